"""
Export DTOs
"""

from pydantic import BaseModel, Field


class ShareRequest(BaseModel):
    """Share the current report with a contact from the directory"""

    contact: str = Field(..., min_length=1, description="Contact name from the directory")


class ShareResponse(BaseModel):
    url: str
    filename: str
    saved: bool
    filledRows: int
