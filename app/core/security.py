"""Security related functions."""

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.core.config import settings
from app.exceptions.base import UnauthorizedError


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_random_token() -> str:
    """Create an unguessable token for activation and password reset links."""
    return uuid.uuid4().hex


class JWTAuthenticator:
    """
    Issues and verifies the access tokens of the API.

    Tokens are signed with HS256 and carry the user id (``sub``), email,
    account name and admin flag, so most endpoints can authorize a request
    without another lookup.

    :ivar secret_key: The secret key used to sign JWT tokens.
    :type secret_key: str
    :ivar algorithm: The JWT signing algorithm.
    :type algorithm: str
    """

    def __init__(self, secret_key: str | None = None, algorithm: str | None = None):
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    def token_expiration_date(self) -> datetime:
        return datetime.now(timezone.utc) + self.expires_delta

    def create_access_token(
        self, user_id, email: str, account_name: str, is_admin: bool
    ) -> tuple[str, datetime]:
        """Create a signed token for the user and return it with its expiry."""
        expires_at = self.token_expiration_date()
        payload = {
            "sub": str(user_id),
            "email": email,
            "account_name": account_name,
            "is_admin": is_admin,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def verify_token(self, token: str) -> dict:
        """
        Verifies a given JSON Web Token (JWT) and returns its payload.

        :param token: The JWT token to be verified.
        :return: A dictionary containing the decoded payload of the token.
        :raises UnauthorizedError: ``token_expired`` for an expired token,
            ``authentication_failure`` for any other invalid token.
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError("token_expired") from e
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError("authentication_failure") from e
