"""
Row-list transport codec.

Drafts store their rows in a single text column as a JSON-encoded list.
Older documents, and stores that keep native JSON, hand the list back
already decoded, so a fetched value is tagged as RawRows or EncodedRows
and normalized to a list of Row before it reaches the form model.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

from shortages.core.exceptions import PersistenceError
from .schemas import Row


@dataclass(frozen=True)
class RawRows:
    """Rows that arrived as a structured list of dicts"""

    items: List[Dict[str, Any]]


@dataclass(frozen=True)
class EncodedRows:
    """Rows that arrived as a JSON string"""

    text: str


RowsTransport = Union[RawRows, EncodedRows]


def tag_rows(value: Any) -> RowsTransport:
    """Tag a stored rows value with its transport form."""
    if isinstance(value, str):
        return EncodedRows(value)
    if value is None:
        return RawRows([])
    return RawRows(list(value))


def encode_rows(rows: Sequence[Row]) -> str:
    """Serialize rows into the string transport form."""
    return json.dumps(
        [row.model_dump(mode="json") for row in rows], ensure_ascii=False
    )


def decode_rows(transport: RowsTransport) -> List[Row]:
    """
    Normalize either transport form into Row objects.

    Raises:
        PersistenceError: If the stored value is not a list of row records
    """
    if isinstance(transport, EncodedRows):
        try:
            items = json.loads(transport.text) if transport.text else []
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Stored rows are not valid JSON: {exc}") from exc
    else:
        items = transport.items

    if not isinstance(items, list):
        raise PersistenceError("Stored rows are not a list")

    rows = []
    for item in items:
        if isinstance(item, Row):
            rows.append(item)
            continue
        if not isinstance(item, dict):
            raise PersistenceError(f"Stored row is not a record: {item!r}")
        # null columns fall back to the row defaults
        fields = {key: value for key, value in item.items() if value is not None}
        try:
            rows.append(Row.model_validate(fields))
        except ValueError as exc:
            raise PersistenceError(f"Stored row is malformed: {exc}") from exc
    return rows
