"""
Draft store adapter - maps FormDocument to and from persisted drafts.

The "current draft" question is answered by the query itself
(owner filter, updated_at descending, limit 1), never by filtering a full
fetch on the client side.
"""

import abc
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shortages.core.config import config
from shortages.core.db.base import utcnow
from shortages.core.exceptions import PersistenceError
from .codec import decode_rows, encode_rows, tag_rows
from .models import ShortageDraft
from .schemas import FormDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistedDraft:
    """A FormDocument as known to the store"""

    id: str
    owner: int
    document: FormDocument
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DraftStore(abc.ABC):
    """Query/create/update contract the synchronizer persists through."""

    @abc.abstractmethod
    async def fetch_latest(self, user_id: int) -> Optional[PersistedDraft]:
        """Most recently updated draft owned by the user, or None."""

    @abc.abstractmethod
    async def create(self, user_id: int, document: FormDocument) -> PersistedDraft:
        """Insert a new draft; the store assigns its id."""

    @abc.abstractmethod
    async def update(self, draft_id: str, user_id: int, document: FormDocument) -> PersistedDraft:
        """Overwrite the draft with the given id and bump its updated_at."""


def document_from_record(record: ShortageDraft) -> FormDocument:
    """
    Rebuild a FormDocument from a stored record.
    Missing rows or date fall back to a blank form's values.
    """
    blank = FormDocument.blank(config.blank_row_count)
    rows = decode_rows(tag_rows(record.rows)) or blank.rows
    return FormDocument(
        branchName=record.branch_name or "",
        department=record.department or "",
        enteredBy=record.entered_by or "",
        date=record.date or blank.date,
        rows=rows,
    )


def _to_persisted(record: ShortageDraft) -> PersistedDraft:
    return PersistedDraft(
        id=record.id,
        owner=record.user_id,
        document=document_from_record(record),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _apply_document(record: ShortageDraft, document: FormDocument) -> None:
    record.branch_name = document.branchName
    record.department = document.department
    record.entered_by = document.enteredBy
    record.date = document.date
    record.rows = encode_rows(document.rows)


class SqlDraftStore(DraftStore):
    """
    Draft store backed by the shortage_drafts table.
    Each call runs in its own short transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_latest(self, user_id: int) -> Optional[PersistedDraft]:
        query = (
            select(ShortageDraft)
            .where(ShortageDraft.user_id == user_id)
            .order_by(desc(ShortageDraft.updated_at), desc(ShortageDraft.created_at))
            .limit(1)
        )
        try:
            async with self._session_factory() as db:
                result = await db.execute(query)
                record = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Draft query failed: {exc}") from exc

        if record is None:
            return None
        return _to_persisted(record)

    async def create(self, user_id: int, document: FormDocument) -> PersistedDraft:
        record = ShortageDraft(user_id=user_id)
        _apply_document(record, document)
        try:
            async with self._session_factory() as db:
                db.add(record)
                await db.commit()
                await db.refresh(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Draft create failed: {exc}") from exc

        logger.info("Created draft %s for user %s", record.id, user_id)
        return _to_persisted(record)

    async def update(self, draft_id: str, user_id: int, document: FormDocument) -> PersistedDraft:
        query = select(ShortageDraft).where(
            ShortageDraft.id == draft_id,
            ShortageDraft.user_id == user_id,
        )
        try:
            async with self._session_factory() as db:
                result = await db.execute(query)
                record = result.scalar_one_or_none()
                if record is None:
                    raise PersistenceError(f"Draft {draft_id} no longer exists")
                _apply_document(record, document)
                record.updated_at = utcnow()
                await db.commit()
                await db.refresh(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Draft update failed: {exc}") from exc

        return _to_persisted(record)
