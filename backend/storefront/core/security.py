"""
Password hashing and access tokens.

Passwords are hashed with bcrypt. Access tokens are signed JWTs carrying the
user id as subject and expiring a fixed time after issuance.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from storefront.core.config import settings
from storefront.core.exceptions import (
    TokenExpired,
    TokenInvalid,
    TokenMalformed,
    ValidationError,
)

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with a fresh bcrypt salt."""
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError("Password is too long")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenService:
    """
    Issues and verifies signed access tokens.

    Usage:
        tokens = TokenService(secret="...")
        token = tokens.issue(user.id)
        user_id = tokens.verify(token)
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=24),
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, user_id: int, now: datetime | None = None) -> str:
        """
        Create a token for a user.

        Args:
            user_id: Subject of the token
            now: Issuance time (defaults to current UTC time)

        Returns:
            Encoded JWT
        """
        issued_at = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """
        Decode a token and return its user id.

        Raises:
            TokenInvalid: Signature does not match
            TokenExpired: Token is past its expiry
            TokenMalformed: Token is not a decodable JWT or lacks claims
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired(str(e)) from e
        except jwt.InvalidSignatureError as e:
            raise TokenInvalid(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise TokenMalformed(str(e)) from e

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise TokenMalformed("Subject is not a user id") from e


@lru_cache
def get_token_service() -> TokenService:
    """Get the token service configured from settings."""
    return TokenService(
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        lifetime=timedelta(hours=settings.jwt_access_token_expire_hours),
    )
