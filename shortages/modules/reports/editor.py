"""
Row editor - pure transformations of a FormDocument.

Every function returns a new document and leaves its input untouched.
Values are stored verbatim: empty strings and non-numeric quantities are
accepted, validation of user input happens at the HTTP boundary.
"""

from typing import Any

from shortages.core.exceptions import IndexOutOfRangeError, ValidationError
from .schemas import EDITABLE_ROW_FIELDS, HEADER_FIELDS, FormDocument, Row


def _check_index(doc: FormDocument, index: int) -> None:
    if not 0 <= index < len(doc.rows):
        raise IndexOutOfRangeError(index, len(doc.rows))


def set_header_field(doc: FormDocument, field: str, value: str) -> FormDocument:
    """Replace one header attribute (branchName, department, enteredBy, date)."""
    if field not in HEADER_FIELDS:
        raise ValidationError(f"Unknown header field: {field}")
    return doc.model_copy(update={field: value})


def set_row_field(doc: FormDocument, index: int, field: str, value: Any) -> FormDocument:
    """
    Replace one attribute of the row at `index`.

    Raises:
        IndexOutOfRangeError: If index is not within [0, len(rows))
        ValidationError: If the field is unknown, is `sequence`, or the
            packing value is not a known option
    """
    _check_index(doc, index)
    if field not in EDITABLE_ROW_FIELDS:
        raise ValidationError(f"Unknown row field: {field}")

    current = doc.rows[index]
    try:
        updated = Row.model_validate({**current.model_dump(), field: value})
    except ValueError as exc:
        raise ValidationError(f"Invalid value for {field}: {value!r}") from exc

    rows = list(doc.rows)
    rows[index] = updated
    return doc.model_copy(update={"rows": rows})


def add_row(doc: FormDocument) -> FormDocument:
    """Append a blank row numbered after the current last position."""
    rows = [*doc.rows, Row.blank(len(doc.rows) + 1)]
    return doc.model_copy(update={"rows": rows})


def remove_row(doc: FormDocument, index: int) -> FormDocument:
    """
    Remove the row at `index` and renumber the rest 1..N-1.
    The last remaining row is never removed; the document comes back as is.
    """
    if len(doc.rows) <= 1:
        return doc
    _check_index(doc, index)

    kept = [row for i, row in enumerate(doc.rows) if i != index]
    rows = [
        row if row.sequence == position else row.model_copy(update={"sequence": position})
        for position, row in enumerate(kept, start=1)
    ]
    return doc.model_copy(update={"rows": rows})
