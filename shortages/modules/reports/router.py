"""
Form Router - open a form session and edit the shortage form
"""

from fastapi import APIRouter, Depends

from shortages.core.exceptions import ValidationError
from shortages.core.response_interceptor import CustomAPIRoute
from shortages.modules.directory.schemas import Directory
from shortages.modules.directory.service import get_directory
from shortages.modules.users.auth import TokenData, get_current_user
from . import editor
from .dependencies import get_draft_store, get_form_session, get_session_registry
from .schemas import FormStateResponse, UpdateHeaderDto, UpdateRowDto
from .sessions import FormSession, FormSessionRegistry
from .store import DraftStore

router = APIRouter(prefix="/form", tags=["form"], route_class=CustomAPIRoute)


def _state(session: FormSession) -> FormStateResponse:
    synchronizer = session.synchronizer
    return FormStateResponse(
        draftId=synchronizer.draft_id,
        state=synchronizer.state.value,
        document=synchronizer.document,
    )


@router.post("/session", response_model=FormStateResponse)
async def open_session(
    registry: FormSessionRegistry = Depends(get_session_registry),
    store: DraftStore = Depends(get_draft_store),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Start editing: load the latest draft of the user (or a blank form)
    and start the autosave timer. Reopening discards the previous session.
    """
    session = await registry.open(current_user.user_id, store)
    return _state(session)


@router.delete("/session")
async def close_session(
    registry: FormSessionRegistry = Depends(get_session_registry),
    current_user: TokenData = Depends(get_current_user),
):
    """Stop autosaving and drop the in-memory form"""
    closed = registry.close(current_user.user_id)
    return {"closed": closed}


@router.get("", response_model=FormStateResponse)
async def get_form(session: FormSession = Depends(get_form_session)):
    """Current form document, draft id and synchronizer state"""
    return _state(session)


@router.patch("/header", response_model=FormStateResponse)
async def update_header(
    dto: UpdateHeaderDto,
    session: FormSession = Depends(get_form_session),
    directory: Directory = Depends(get_directory),
):
    """Update branch, department, enterer name and/or date"""
    changes = dto.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("branchName") and changes["branchName"] not in directory.branches:
        raise ValidationError(f"Unknown branch: {changes['branchName']}")
    if changes.get("department") and changes["department"] not in directory.departments:
        raise ValidationError(f"Unknown department: {changes['department']}")

    for field, value in changes.items():
        session.synchronizer.apply(editor.set_header_field, field, value)
    return _state(session)


@router.patch("/rows/{index}", response_model=FormStateResponse)
async def update_row(
    index: int,
    dto: UpdateRowDto,
    session: FormSession = Depends(get_form_session),
):
    """Update one or more fields of the row at `index` (0-based)"""
    changes = dto.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        session.synchronizer.apply(editor.set_row_field, index, field, value)
    return _state(session)


@router.post("/rows", response_model=FormStateResponse, status_code=201)
async def add_row(session: FormSession = Depends(get_form_session)):
    """Append a blank row"""
    session.synchronizer.apply(editor.add_row)
    return _state(session)


@router.delete("/rows/{index}", response_model=FormStateResponse)
async def remove_row(index: int, session: FormSession = Depends(get_form_session)):
    """Remove a row and renumber the rest; the last row is kept"""
    session.synchronizer.apply(editor.remove_row, index)
    return _state(session)


@router.post("/save", response_model=FormStateResponse)
async def save_form(session: FormSession = Depends(get_form_session)):
    """
    Save the draft now.
    A storage failure is logged and leaves the form as it was; the returned
    draftId stays null until a first save succeeds.
    """
    await session.synchronizer.save()
    return _state(session)
