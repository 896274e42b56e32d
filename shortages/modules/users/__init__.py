"""Users module"""

from .models import User
from .service import UsersService
from .schemas import UserResponse
from .router import router

__all__ = ["User", "UsersService", "UserResponse", "router"]
