"""Translation of message keys.

Messages are stored as flat JSON catalogs in ``app/locales/<language>.json``.
The language of a request is taken from its ``Accept-Language`` header; keys
missing from a catalog fall back to the default language and then to the key
itself.
"""

import json
import logging
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

from fastapi import Request

from app.core.config import settings

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"

Translator = Callable[[str], str]


@lru_cache
def load_catalog(language: str) -> dict[str, str]:
    """Load the message catalog of a language, empty if it does not exist."""
    path = LOCALES_DIR / f"{language}.json"
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        logger.warning("Missing translation catalog: %s", path)
        return {}


def translate(key: str, language: str | None = None) -> str:
    language = language or settings.default_language
    catalog = load_catalog(language)
    if key in catalog:
        return catalog[key]
    return load_catalog(settings.default_language).get(key, key)


def resolve_language(accept_language: str | None) -> str:
    """Pick the best supported language from an Accept-Language header value.

    ``"pl-PL,pl;q=0.9,en;q=0.8"`` resolves to ``"pl"`` when Polish is
    supported.
    """
    if not accept_language:
        return settings.default_language

    candidates = []
    for position, part in enumerate(accept_language.split(",")):
        tag, _, params = part.strip().partition(";")
        if not tag:
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        candidates.append((-quality, position, tag.split("-")[0].lower()))

    supported = settings.supported_languages_list
    for _quality, _position, language in sorted(candidates):
        if language in supported:
            return language
    return settings.default_language


def get_request_language(request: Request) -> str:
    return resolve_language(request.headers.get("accept-language"))


async def get_translator(request: Request) -> Translator:
    """Dependency returning a translate function bound to the request language."""
    language = get_request_language(request)

    def _t(key: str) -> str:
        return translate(key, language)

    return _t
