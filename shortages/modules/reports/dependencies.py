"""FastAPI dependencies of the shortage form"""

from fastapi import Depends, Request

from shortages.core.db.engine import AsyncSessionLocal
from shortages.modules.users.auth import TokenData, get_current_user
from .sessions import FormSession, FormSessionRegistry
from .store import DraftStore, SqlDraftStore


def get_draft_store() -> DraftStore:
    return SqlDraftStore(AsyncSessionLocal)


def get_session_registry(request: Request) -> FormSessionRegistry:
    return request.app.state.form_sessions


def get_form_session(
    registry: FormSessionRegistry = Depends(get_session_registry),
    current_user: TokenData = Depends(get_current_user),
) -> FormSession:
    """The caller's open form session; 404 when none is open."""
    return registry.get(current_user.user_id)
