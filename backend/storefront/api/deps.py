"""
Shared API dependencies.

Provides the authentication gate and access to process-wide collaborators
(token service, blob store) so tests can swap them with
``app.dependency_overrides``.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from storefront.core.exceptions import TokenError, Unauthorized
from storefront.core.security import TokenService, get_token_service
from storefront.modules.storage import get_blob_store

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "bearer_scheme",
    "get_blob_store",
    "get_current_user_id",
    "get_token_service",
]


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """
    Authenticate the request from its ``Authorization: Bearer`` header.

    Every failure is reported as ``Unauthorized``; the specific token error
    is only logged.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    try:
        user_id = tokens.verify(credentials.credentials)
    except TokenError as e:
        logger.debug(f"Rejected token ({type(e).__name__}): {e}")
        raise Unauthorized()

    request.state.user_id = user_id
    return user_id

