"""
Draft synchronizer - owns the in-memory form of one user session.

Loads the user's latest draft, applies editor actions, and persists the
document on explicit saves and on a fixed autosave interval. Persistence
failures are logged and never touch the in-memory document, so unsaved
edits stay visible and can be saved again.
"""

import asyncio
import enum
import logging
from typing import Any, Callable, Optional

from shortages.core.exceptions import PersistenceError
from .schemas import FormDocument
from .store import DraftStore

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_INTERVAL = 30.0


class SyncState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"


class AutosaveHandle:
    """Owned handle of a running autosave loop; cancel() stops future ticks."""

    def __init__(self, task: "asyncio.Task[None]") -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        self._task.cancel()


class DraftSynchronizer:
    """
    State machine: UNINITIALIZED -> LOADING -> READY <-> SAVING.

    Args:
        store: Draft store adapter scoped by user id
        user_id: Owner of the session
        blank_row_count: Row count of a fresh form
        serialize_saves: When True, a save waits for the one in flight;
            when False, updates may overlap and the last write to finish
            wins; a first save still waits for a create in flight
    """

    def __init__(
        self,
        store: DraftStore,
        user_id: int,
        blank_row_count: int = 30,
        serialize_saves: bool = True,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.blank_row_count = blank_row_count
        self.state = SyncState.UNINITIALIZED
        self.document = FormDocument.blank(blank_row_count)
        self.draft_id: Optional[str] = None
        self._saves_in_flight = 0
        self._save_lock = asyncio.Lock() if serialize_saves else None
        # set while a first save is creating the draft
        self._pending_create: Optional["asyncio.Future[None]"] = None

    async def load(self) -> FormDocument:
        """Resolve the user's current draft; fall back to a blank form."""
        self.state = SyncState.LOADING
        try:
            draft = await self.store.fetch_latest(self.user_id)
        except PersistenceError:
            logger.exception("Error loading draft for user %s", self.user_id)
            draft = None

        if draft is None:
            self.document = FormDocument.blank(self.blank_row_count)
            self.draft_id = None
        else:
            self.document = draft.document
            self.draft_id = draft.id
            logger.info("Loaded draft %s for user %s", draft.id, self.user_id)

        self.state = SyncState.READY
        return self.document

    def apply(self, action: Callable[..., FormDocument], *args: Any) -> FormDocument:
        """Replace the document with `action(document, *args)`."""
        self.document = action(self.document, *args)
        return self.document

    async def save(self) -> bool:
        """
        Persist a snapshot of the current document.
        Creates the draft on first success, updates it afterwards.

        Returns:
            True if the store accepted the write
        """
        if self._save_lock is None:
            return await self._save()
        async with self._save_lock:
            return await self._save()

    async def _save(self) -> bool:
        while self.draft_id is None and self._pending_create is not None:
            # wait for the id instead of creating a second draft
            await asyncio.shield(self._pending_create)

        snapshot = self.document
        draft_id = self.draft_id

        self._saves_in_flight += 1
        self.state = SyncState.SAVING
        try:
            if draft_id is None:
                await self._create(snapshot)
            else:
                await self.store.update(draft_id, self.user_id, snapshot)
            return True
        except PersistenceError:
            logger.exception("Error saving draft for user %s", self.user_id)
            return False
        finally:
            self._saves_in_flight -= 1
            if self._saves_in_flight == 0:
                self.state = SyncState.READY

    async def _create(self, snapshot: FormDocument) -> None:
        pending = asyncio.get_running_loop().create_future()
        self._pending_create = pending
        try:
            draft = await self.store.create(self.user_id, snapshot)
            self.draft_id = draft.id
        finally:
            self._pending_create = None
            pending.set_result(None)

    def should_autosave(self) -> bool:
        """Fully blank headers are not autosaved."""
        return bool(self.document.branchName or self.document.enteredBy)

    async def autosave_tick(self) -> bool:
        """One timer firing. Returns whether a save was attempted."""
        if not self.should_autosave():
            return False
        await self.save()
        return True

    def start_autosave(self, interval: float = DEFAULT_AUTOSAVE_INTERVAL) -> AutosaveHandle:
        """Start the periodic autosave loop on the running event loop."""

        async def _loop() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    # a save already started finishes even if the loop is cancelled
                    await asyncio.shield(self.autosave_tick())
                except Exception:
                    logger.exception("Autosave failed for user %s", self.user_id)

        task = asyncio.get_running_loop().create_task(_loop())
        return AutosaveHandle(task)
