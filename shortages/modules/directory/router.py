"""
Directory Router - selectable branches, departments and contacts
"""

from fastapi import APIRouter, Depends

from shortages.core.response_interceptor import CustomAPIRoute
from shortages.modules.users.auth import TokenData, get_current_user
from .schemas import Directory, DirectoryResponse
from .service import get_directory

router = APIRouter(prefix="/directory", tags=["directory"], route_class=CustomAPIRoute)


@router.get("", response_model=DirectoryResponse)
async def read_directory(
    directory: Directory = Depends(get_directory),
    current_user: TokenData = Depends(get_current_user),
):
    """Branches, departments, packing labels and contact names for the form."""
    return DirectoryResponse.from_directory(directory)
