import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from shortages.core.exceptions import PersistenceError
from shortages.modules.reports.schemas import FormDocument
from shortages.modules.reports.store import DraftStore, PersistedDraft

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryDraftStore(DraftStore):
    """Draft store kept in a dict, with call recording and failure switches."""

    def __init__(self, ids: Optional[Iterable[str]] = None) -> None:
        self.drafts: Dict[str, PersistedDraft] = {}
        self.calls: List[Tuple[str, object]] = []
        self.fail_fetch = False
        self.fail_writes = False
        # when set, writes wait for the event before completing
        self.gate: Optional[asyncio.Event] = None
        # raised once by the next create, then cleared
        self.create_error: Optional[Exception] = None
        self._ids = iter(ids) if ids is not None else None
        self._clock = 0

    def _now(self) -> datetime:
        self._clock += 1
        return EPOCH + timedelta(seconds=self._clock)

    def _next_id(self) -> str:
        if self._ids is not None:
            return next(self._ids)
        return f"draft-{len(self.drafts) + 1}"

    def seed(self, user_id: int, document: FormDocument, updated_at: datetime, draft_id: str) -> PersistedDraft:
        draft = PersistedDraft(
            id=draft_id, owner=user_id, document=document,
            created_at=updated_at, updated_at=updated_at,
        )
        self.drafts[draft_id] = draft
        return draft

    def writes(self) -> List[Tuple[str, object]]:
        return [call for call in self.calls if call[0] in ("create", "update")]

    async def fetch_latest(self, user_id: int) -> Optional[PersistedDraft]:
        self.calls.append(("fetch", user_id))
        if self.fail_fetch:
            raise PersistenceError("store unavailable")
        owned = [draft for draft in self.drafts.values() if draft.owner == user_id]
        return max(owned, key=lambda draft: draft.updated_at, default=None)

    async def create(self, user_id: int, document: FormDocument) -> PersistedDraft:
        self.calls.append(("create", user_id))
        if self.gate is not None:
            await self.gate.wait()
        if self.create_error is not None:
            error, self.create_error = self.create_error, None
            raise error
        if self.fail_writes:
            raise PersistenceError("create failed")
        now = self._now()
        draft = PersistedDraft(
            id=self._next_id(), owner=user_id, document=document,
            created_at=now, updated_at=now,
        )
        self.drafts[draft.id] = draft
        return draft

    async def update(self, draft_id: str, user_id: int, document: FormDocument) -> PersistedDraft:
        self.calls.append(("update", draft_id))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_writes:
            raise PersistenceError("update failed")
        existing = self.drafts.get(draft_id)
        if existing is None or existing.owner != user_id:
            raise PersistenceError(f"Draft {draft_id} no longer exists")
        draft = PersistedDraft(
            id=draft_id, owner=user_id, document=document,
            created_at=existing.created_at, updated_at=self._now(),
        )
        self.drafts[draft_id] = draft
        return draft
