from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from shortages.core.db.base import BaseModel


class User(BaseModel):
    """
    Data-entry operator who fills in shortage forms.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    # bcrypt hash, never returned by the API
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
