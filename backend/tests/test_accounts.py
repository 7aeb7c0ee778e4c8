"""Tests for account registration and login."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import (
    Conflict,
    InvalidCredentials,
    NotFound,
    ValidationError,
)
from storefront.core.security import TokenService
from storefront.models.user import UserRole
from storefront.modules.accounts import AccountService


@pytest.fixture
def accounts(db_session: AsyncSession, token_service: TokenService) -> AccountService:
    return AccountService(db_session, token_service)


class TestRegister:
    async def test_register_creates_user_and_token(
        self, accounts: AccountService, token_service: TokenService
    ):
        user, token = await accounts.register("Ann", "ann@example.com", "pw123456", "seller")

        assert user.id is not None
        assert user.role == UserRole.SELLER
        assert user.cart == []
        assert user.hashed_password != "pw123456"
        assert token_service.verify(token) == user.id

    async def test_duplicate_email_conflicts_and_first_user_survives(
        self, accounts: AccountService
    ):
        first, _ = await accounts.register("Ann", "ann@example.com", "first-pw", "buyer")

        with pytest.raises(Conflict):
            await accounts.register("Impostor", "ann@example.com", "other-pw", "seller")

        user, _ = await accounts.login("ann@example.com", "first-pw")
        assert user.id == first.id
        assert user.name == "Ann"

    @pytest.mark.parametrize(
        "name,email,password,role",
        [
            (None, "a@example.com", "pw", "buyer"),
            ("Ann", "", "pw", "buyer"),
            ("Ann", "a@example.com", None, "buyer"),
            ("Ann", "a@example.com", "pw", None),
            ("   ", "a@example.com", "pw", "buyer"),
        ],
    )
    async def test_missing_fields_rejected(self, accounts: AccountService, name, email, password, role):
        with pytest.raises(ValidationError):
            await accounts.register(name, email, password, role)

    async def test_unknown_role_rejected(self, accounts: AccountService):
        with pytest.raises(ValidationError):
            await accounts.register("Ann", "ann@example.com", "pw", "admin")


class TestLogin:
    async def test_login_returns_user_and_token(
        self, accounts: AccountService, token_service: TokenService
    ):
        registered, _ = await accounts.register("Bob", "bob@example.com", "hunter22", "buyer")

        user, token = await accounts.login("bob@example.com", "hunter22")

        assert user.id == registered.id
        assert token_service.verify(token) == registered.id

    async def test_wrong_password_is_invalid_credentials(self, accounts: AccountService):
        await accounts.register("Bob", "bob@example.com", "hunter22", "buyer")

        for attempt in ("hunter23", "", "HUNTER22"):
            with pytest.raises((InvalidCredentials, ValidationError)):
                await accounts.login("bob@example.com", attempt)

        with pytest.raises(InvalidCredentials):
            await accounts.login("bob@example.com", "wrong")

    async def test_unknown_email_is_not_found(self, accounts: AccountService):
        with pytest.raises(NotFound):
            await accounts.login("nobody@example.com", "whatever")

    async def test_missing_credentials_rejected(self, accounts: AccountService):
        with pytest.raises(ValidationError):
            await accounts.login(None, "pw")
