"""
Application error taxonomy.

Every error raised by the service layer carries the HTTP status and the
message sent to the client. Token errors are internal to the auth layer and
are collapsed into ``Unauthorized`` before they reach a client.
"""

from fastapi import status


class StorefrontError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Please fill all fields!"


class Unauthorized(StorefrontError):
    """Missing, invalid or expired bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized!"


class InvalidCredentials(StorefrontError):
    """Password does not match the stored hash."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid Credentials"


class Conflict(StorefrontError):
    """Unique constraint violated (duplicate email)."""

    status_code = status.HTTP_409_CONFLICT
    message = "email already used"


class NotFound(StorefrontError):
    """Requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Forbidden(StorefrontError):
    """
    Caller does not own the resource.

    Rendered as 404 so that non-owners cannot tell it exists.
    """

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Internal(StorefrontError):
    """Unexpected store or I/O failure."""


class BlobStoreError(Exception):
    """Image storage backend failed to upload or delete a blob."""


# ==================== Token errors ====================


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    """Signature does not match."""


class TokenExpired(TokenError):
    """Token is past its expiry."""


class TokenMalformed(TokenError):
    """Token cannot be decoded or lacks required claims."""
