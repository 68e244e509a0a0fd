"""Disk storage of uploaded files."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


class UploadStorage:
    """
    Reads and writes uploaded files under two directories: one for profile
    avatars and one for post images.

    Files are addressed only by the opaque storage key recorded in the
    database, never by a client supplied name.

    :ivar profile_dir: Directory holding avatar images.
    :type profile_dir: Path
    :ivar post_dir: Directory holding post images.
    :type post_dir: Path
    """

    def __init__(self, profile_dir: Path | str, post_dir: Path | str):
        self.profile_dir = Path(profile_dir)
        self.post_dir = Path(post_dir)

    def ensure_folders(self) -> None:
        """Create the upload directories if they do not exist yet."""
        self.profile_dir.mkdir(parents=True, exist_ok=True)
        self.post_dir.mkdir(parents=True, exist_ok=True)

    def post_file_path(self, filename: str) -> Path:
        return self.post_dir / Path(filename).name

    def avatar_path(self, filename: str) -> Path:
        return self.profile_dir / Path(filename).name

    async def write_post_file(self, filename: str, content: bytes) -> None:
        await self._write(self.post_file_path(filename), content)

    async def write_avatar(self, filename: str, content: bytes) -> None:
        await self._write(self.avatar_path(filename), content)

    async def remove_post_file(self, filename: str) -> bool:
        """Remove a post file.

        Returns ``False`` when the file was already gone. Any other failure is
        raised as ``OSError``.
        """
        return await self._remove(self.post_file_path(filename))

    async def remove_avatar(self, filename: str) -> bool:
        return await self._remove(self.avatar_path(filename))

    async def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "wb") as fh:
            await fh.write(content)

    async def _remove(self, path: Path) -> bool:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("File %s was already removed", path)
            return False
        return True
