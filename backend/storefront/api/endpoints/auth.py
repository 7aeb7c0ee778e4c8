"""
Account API Endpoints.

Registration and login, both returning an access token.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_token_service
from storefront.api.serializers import serialize_user
from storefront.core.database import get_db
from storefront.core.security import TokenService
from storefront.modules.accounts import AccountService

router = APIRouter()


# ==================== Schemas ====================


class RegisterRequest(BaseModel):
    """New account details."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    password: str | None = None
    user_type: str | None = Field(None, alias="userType")


class LoginRequest(BaseModel):
    """Login credentials."""

    email: str | None = None
    password: str | None = None


# ==================== Endpoints ====================


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """Create a buyer or seller account."""
    accounts = AccountService(db, tokens)
    user, token = await accounts.register(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.user_type,
    )

    return {
        "message": "User registered successfully!",
        "user": serialize_user(user),
        "token": token,
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """Authenticate with email and password."""
    accounts = AccountService(db, tokens)
    user, token = await accounts.login(request.email, request.password)

    return {
        "message": "User validated successfully!",
        "user": serialize_user(user),
        "token": token,
    }
