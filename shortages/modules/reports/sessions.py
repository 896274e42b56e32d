"""
Form sessions - one live synchronizer per signed-in user.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from shortages.core.config import config
from shortages.core.exceptions import NotFoundError
from .store import DraftStore
from .synchronizer import AutosaveHandle, DraftSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class FormSession:
    synchronizer: DraftSynchronizer
    autosave: Optional[AutosaveHandle] = None

    def close(self) -> None:
        if self.autosave is not None:
            self.autosave.cancel()
            self.autosave = None


class FormSessionRegistry:
    """
    Keeps the open form session of each user.
    Opening a session always re-queries the store for the latest draft.
    """

    def __init__(
        self,
        autosave_interval: float = config.autosave_interval_seconds,
        blank_row_count: int = config.blank_row_count,
        serialize_saves: bool = config.serialize_saves,
    ) -> None:
        self.autosave_interval = autosave_interval
        self.blank_row_count = blank_row_count
        self.serialize_saves = serialize_saves
        self._sessions: Dict[int, FormSession] = {}

    async def open(self, user_id: int, store: DraftStore) -> FormSession:
        """Load the user's latest draft and start autosaving it."""
        self.close(user_id)

        synchronizer = DraftSynchronizer(
            store,
            user_id,
            blank_row_count=self.blank_row_count,
            serialize_saves=self.serialize_saves,
        )
        await synchronizer.load()
        session = FormSession(synchronizer)
        session.autosave = synchronizer.start_autosave(self.autosave_interval)
        self._sessions[user_id] = session
        logger.info("Opened form session for user %s (draft %s)", user_id, synchronizer.draft_id)
        return session

    def get(self, user_id: int) -> FormSession:
        session = self._sessions.get(user_id)
        if session is None:
            raise NotFoundError("Form session", user_id)
        return session

    def close(self, user_id: int) -> bool:
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Closed form session for user %s", user_id)
        return True

    def close_all(self) -> None:
        for user_id in list(self._sessions):
            self.close(user_id)

    def __len__(self) -> int:
        return len(self._sessions)
