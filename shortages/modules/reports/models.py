"""
Shortage Draft Model - Store the in-progress shortage form of each user
"""

import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, func

from shortages.core.db.base import Base, utcnow


def _new_draft_id() -> str:
    return uuid.uuid4().hex


class ShortageDraft(Base):
    """
    One saved shortage form.
    The user's current draft is the row with the latest updated_at.
    Rows are kept as a JSON-encoded string in `rows`.
    """
    __tablename__ = "shortage_drafts"

    id = Column(String(32), primary_key=True, default=_new_draft_id)
    user_id = Column(Integer, nullable=False, index=True)
    branch_name = Column(String(255), nullable=False, default="")
    department = Column(String(255), nullable=False, default="")
    entered_by = Column(String(255), nullable=False, default="")
    date = Column(String(10), nullable=False)
    rows = Column(Text, nullable=False)
    # Python-side timestamps keep sub-second precision for "latest" ordering
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ShortageDraft(id='{self.id}', user_id={self.user_id}, branch='{self.branch_name}')>"
