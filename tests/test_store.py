import json
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, text

from shortages.core.exceptions import PersistenceError
from shortages.modules.reports import editor
from shortages.modules.reports.codec import encode_rows
from shortages.modules.reports.models import ShortageDraft
from shortages.modules.reports.schemas import FormDocument, Packing, Row
from shortages.modules.reports.store import SqlDraftStore, document_from_record

USER_ID = 3
T0 = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def _doc(branch: str) -> FormDocument:
    doc = editor.set_header_field(FormDocument.blank(4), "branchName", branch)
    doc = editor.set_header_field(doc, "department", "Groceries")
    return editor.set_row_field(doc, 0, "item", f"{branch} item")


async def _insert(session_factory, **fields) -> str:
    record = ShortageDraft(**fields)
    async with session_factory() as db:
        db.add(record)
        await db.commit()
        return record.id


async def test_create_then_fetch_returns_same_document(session_factory):
    store = SqlDraftStore(session_factory)
    doc = _doc("Jeddah-Naseem")

    created = await store.create(USER_ID, doc)
    fetched = await store.fetch_latest(USER_ID)

    assert created.id
    assert created.owner == USER_ID
    assert fetched.id == created.id
    assert fetched.document == doc


async def test_rows_are_stored_as_encoded_string(session_factory):
    store = SqlDraftStore(session_factory)
    doc = _doc("Makkah-Otaibiya")

    created = await store.create(USER_ID, doc)

    async with session_factory() as db:
        raw = (await db.execute(
            text("SELECT rows FROM shortage_drafts WHERE id = :id"), {"id": created.id}
        )).scalar_one()
    assert isinstance(raw, str)
    assert json.loads(raw)[0]["item"] == "Makkah-Otaibiya item"


async def test_fetch_latest_orders_by_update_time(session_factory):
    store = SqlDraftStore(session_factory)
    for hours, branch in ((2, "second"), (3, "third"), (1, "first")):
        doc = _doc(branch)
        await _insert(
            session_factory,
            id=branch, user_id=USER_ID, branch_name=branch, department="", entered_by="",
            date=doc.date, rows=encode_rows(doc.rows),
            created_at=T0, updated_at=T0 + timedelta(hours=hours),
        )

    latest = await store.fetch_latest(USER_ID)

    assert latest.id == "third"
    assert latest.document.branchName == "third"


async def test_fetch_latest_is_scoped_to_the_user(session_factory):
    store = SqlDraftStore(session_factory)
    await store.create(USER_ID + 1, _doc("someone else"))

    assert await store.fetch_latest(USER_ID) is None


async def test_update_overwrites_fields_and_moves_draft_to_front(session_factory):
    store = SqlDraftStore(session_factory)
    older = await store.create(USER_ID, _doc("older"))
    newer = await store.create(USER_ID, _doc("newer"))

    edited = editor.set_row_field(_doc("older"), 2, "packing", "pack")
    updated = await store.update(older.id, USER_ID, edited)
    latest = await store.fetch_latest(USER_ID)

    assert updated.id == older.id
    assert updated.updated_at >= newer.updated_at
    assert latest.id == older.id
    assert latest.document.rows[2].packing is Packing.pack


async def test_update_of_missing_draft_fails(session_factory):
    store = SqlDraftStore(session_factory)

    with pytest.raises(PersistenceError):
        await store.update("does-not-exist", USER_ID, _doc("x"))


async def test_update_of_another_users_draft_fails(session_factory):
    store = SqlDraftStore(session_factory)
    created = await store.create(USER_ID + 1, _doc("theirs"))

    with pytest.raises(PersistenceError):
        await store.update(created.id, USER_ID, _doc("mine"))


async def test_legacy_packing_labels_are_read_back(session_factory):
    rows = json.dumps(
        [{"sequence": 1, "item": "Dates", "packing": "كرتون"}], ensure_ascii=False
    )
    await _insert(
        session_factory, id="legacy", user_id=USER_ID, branch_name="b",
        department="", entered_by="", date="2025-12-30", rows=rows,
    )

    latest = await SqlDraftStore(session_factory).fetch_latest(USER_ID)

    assert latest.document.rows == [Row(sequence=1, item="Dates", packing=Packing.carton)]
    assert latest.document.date == "2025-12-30"


async def test_empty_stored_rows_fall_back_to_blank_form(session_factory):
    await _insert(
        session_factory, id="empty", user_id=USER_ID, branch_name="b",
        department="", entered_by="", date="", rows="[]",
    )

    latest = await SqlDraftStore(session_factory).fetch_latest(USER_ID)

    assert len(latest.document.rows) == 30
    assert latest.document.date == FormDocument.blank(1).date


async def test_corrupt_rows_surface_as_persistence_error(session_factory):
    await _insert(
        session_factory, id="corrupt", user_id=USER_ID, branch_name="b",
        department="", entered_by="", date="2026-01-01", rows="not json",
    )

    with pytest.raises(PersistenceError):
        await SqlDraftStore(session_factory).fetch_latest(USER_ID)


async def test_database_errors_are_wrapped(session_factory):
    async with session_factory() as db:
        await db.execute(text("DROP TABLE shortage_drafts"))
        await db.commit()
    store = SqlDraftStore(session_factory)

    with pytest.raises(PersistenceError):
        await store.fetch_latest(USER_ID)
    with pytest.raises(PersistenceError):
        await store.create(USER_ID, _doc("x"))


def test_document_from_record_accepts_structured_rows():
    record = ShortageDraft(
        branch_name="b", department="d", entered_by="e", date="2026-02-02",
        rows=[{"sequence": 1, "item": "Oil"}, {"sequence": 2}],
    )

    doc = document_from_record(record)

    assert doc.rows == [Row(sequence=1, item="Oil"), Row(sequence=2)]
    assert doc.header() == {
        "branchName": "b", "department": "d", "enteredBy": "e", "date": "2026-02-02",
    }


async def test_record_ids_are_generated(session_factory):
    created = await SqlDraftStore(session_factory).create(USER_ID, _doc("x"))

    async with session_factory() as db:
        record = (await db.execute(select(ShortageDraft))).scalar_one()
    assert record.id == created.id
    assert len(created.id) == 32
