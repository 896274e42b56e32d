"""Shortage form module: document model, editor, draft store and synchronizer"""

from .schemas import FormDocument, Packing, Row
from .store import DraftStore, PersistedDraft, SqlDraftStore
from .synchronizer import AutosaveHandle, DraftSynchronizer, SyncState
from .sessions import FormSessionRegistry

__all__ = [
    "FormDocument",
    "Packing",
    "Row",
    "DraftStore",
    "PersistedDraft",
    "SqlDraftStore",
    "AutosaveHandle",
    "DraftSynchronizer",
    "SyncState",
    "FormSessionRegistry",
]
