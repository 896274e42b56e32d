"""
User DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field
from datetime import datetime


class UserResponse(BaseModel):
    """Response model for User entity"""

    id: int
    email: str
    name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$")
    password: str


class RegisterRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$", max_length=255)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)


class AuthResponse(BaseModel):
    user: UserResponse
    token: TokenResponse
