"""
Users Router - registration, login and the signed-in profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shortages.core.db.engine import get_db_util
from shortages.core.response_interceptor import CustomAPIRoute
from .service import UsersService
from .schemas import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from .auth import get_current_user, TokenData

router = APIRouter(prefix="/users", tags=["users"], route_class=CustomAPIRoute)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register_user(
    register_dto: RegisterRequest, db: AsyncSession = Depends(get_db_util)
):
    """Register a new user"""
    return await UsersService.create(db, register_dto)


@router.post("/login", response_model=AuthResponse)
async def login_user(login_dto: LoginRequest, db: AsyncSession = Depends(get_db_util)):
    """Login a user and receive a JWT access token"""
    return await UsersService.login(db, login_dto)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Get current user profile from JWT token.
    Requires valid authentication token in Authorization header.
    """
    return await UsersService.find_me(db, current_user.user_id)
