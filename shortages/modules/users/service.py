"""
UsersService - registration, login and profile lookups.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortages.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from shortages.modules.users.auth import AuthService
from .models import User
from .schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UsersService:
    """
    Users service. All methods use async/await and single-statement queries.
    """

    @staticmethod
    def _auth_response(user: User) -> AuthResponse:
        token_data = {
            "sub": user.email,
            "user_id": user.id,
            "name": user.name,
        }
        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=TokenResponse(access_token=AuthService.create_access_token(token_data)),
        )

    @staticmethod
    async def create(db: AsyncSession, create_dto: RegisterRequest) -> AuthResponse:
        """
        Create a new user and sign them in.

        Raises:
            ConflictError: If the email is already registered
        """
        email = create_dto.email.lower()
        existing_user = await db.execute(select(User).where(User.email == email))
        if existing_user.scalars().first():
            raise ConflictError("User already exists with this email")

        user = User(
            email=email,
            password=AuthService.get_password_hash(create_dto.password),
            name=create_dto.name,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info("Registered user %s", user.id)
        return UsersService._auth_response(user)

    @staticmethod
    async def login(db: AsyncSession, login_dto: LoginRequest) -> AuthResponse:
        """
        Verify credentials and issue an access token.

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong
        """
        user = await db.scalar(
            select(User).where(
                User.email == login_dto.email.lower(), User.deleted_at.is_(None)
            )
        )
        if not user or not AuthService.verify_password(login_dto.password, user.password):
            raise UnauthorizedError("Invalid email or password")
        return UsersService._auth_response(user)

    @staticmethod
    async def find_me(db: AsyncSession, user_id: int) -> User:
        """
        Find the signed-in user where deleted_at is null.

        Raises:
            NotFoundError: If user not found or is soft-deleted
        """
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError("User", user_id)

        return user
