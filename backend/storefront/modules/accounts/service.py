"""
Account Service - Registration and login.
"""

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import (
    Conflict,
    InvalidCredentials,
    NotFound,
    ValidationError,
)
from storefront.core.security import TokenService, hash_password, verify_password
from storefront.models.user import User, UserRole


class AccountService:
    """
    Service for creating accounts and authenticating users.

    Usage:
        accounts = AccountService(db_session, token_service)
        user, token = await accounts.login("ann@example.com", "secret")
    """

    def __init__(self, db: AsyncSession, tokens: TokenService) -> None:
        """Initialize account service with database session and token issuer."""
        self.db = db
        self.tokens = tokens

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email."""
        query = select(User).where(User.email == email)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        role: str | None,
    ) -> tuple[User, str]:
        """
        Create a new account.

        Args:
            name: Display name
            email: Login email, unique across users
            password: Plain text password (only its hash is stored)
            role: "buyer" or "seller"

        Returns:
            Created user and an access token

        Raises:
            ValidationError: Missing field or unknown role
            Conflict: Email already registered
        """
        if not all(isinstance(v, str) and v.strip() for v in (name, email, password, role)):
            raise ValidationError("Please fill all fields!")

        try:
            user_role = UserRole(role)
        except ValueError:
            raise ValidationError("userType must be 'buyer' or 'seller'")

        if await self.get_user_by_email(email):
            raise Conflict("email already used")

        user = User(
            name=name.strip(),
            email=email.strip(),
            hashed_password=hash_password(password),
            role=user_role,
            cart=[],
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("email already used")

        logger.info(f"Registered {user_role.value} account {user.id}")
        return user, self.tokens.issue(user.id)

    async def login(self, email: str | None, password: str | None) -> tuple[User, str]:
        """
        Authenticate by email and password.

        Returns:
            User and a fresh access token

        Raises:
            ValidationError: Missing email or password
            NotFound: No account with that email
            InvalidCredentials: Password does not match
        """
        if not email or not password:
            raise ValidationError("Please fill all fields!")

        user = await self.get_user_by_email(email.strip())
        if not user:
            raise NotFound("User not found!")

        if not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for account {user.id}")
            raise InvalidCredentials("Invalid Credentials")

        return user, self.tokens.issue(user.id)
