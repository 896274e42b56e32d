"""
Shortage report DTOs (Data Transfer Objects) and the form document model.

Field names are camelCase to match the stored draft documents.
"""

import datetime
import enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from shortages.core.utils import is_future_date, today_iso


class Packing(str, enum.Enum):
    """How a missing item is counted"""

    unit = "unit"
    carton = "carton"
    pack = "pack"
    unset = ""

    @classmethod
    def _missing_(cls, value):
        # Drafts saved by the first version of the form stored the Arabic labels
        return _LEGACY_PACKING.get(value)


_LEGACY_PACKING = {
    "حبة": Packing.unit,
    "كرتون": Packing.carton,
    "شد": Packing.pack,
}


class Row(BaseModel):
    """One line item of the shortage form"""

    sequence: int = Field(..., ge=1)
    item: str = ""
    barcode: str = ""
    quantity: str = ""
    size: str = ""
    packing: Packing = Packing.unset
    company: str = ""
    altCompany: str = ""
    notes: str = ""

    class Config:
        frozen = True
        from_attributes = True

    @field_validator("packing", mode="before")
    @classmethod
    def coerce_packing(cls, value):
        if isinstance(value, str):
            return Packing(value)
        return value

    @classmethod
    def blank(cls, sequence: int) -> "Row":
        return cls(sequence=sequence)

    def is_filled(self) -> bool:
        """A row is exported when it names an item, a barcode or a quantity."""
        return bool(self.item or self.barcode or self.quantity)


ROW_FIELDS = tuple(Row.model_fields)
EDITABLE_ROW_FIELDS = tuple(name for name in ROW_FIELDS if name != "sequence")
HEADER_FIELDS = ("branchName", "department", "enteredBy", "date")


class FormDocument(BaseModel):
    """Header fields plus the ordered rows of one shortage form"""

    branchName: str = ""
    department: str = ""
    enteredBy: str = ""
    date: str = Field(default_factory=today_iso)
    rows: List[Row] = Field(..., min_length=1)

    class Config:
        frozen = True
        from_attributes = True

    @classmethod
    def blank(cls, row_count: int = 30, today: Optional[datetime.date] = None) -> "FormDocument":
        """Empty header, today's date and `row_count` rows sequenced 1..N."""
        return cls(
            date=today_iso(today),
            rows=[Row.blank(i + 1) for i in range(row_count)],
        )

    def header(self) -> dict:
        return {name: getattr(self, name) for name in HEADER_FIELDS}


class FormStateResponse(BaseModel):
    """Current form session state returned to the client"""

    draftId: Optional[str] = None
    state: str
    document: FormDocument


class UpdateHeaderDto(BaseModel):
    """DTO for changing one or more header fields"""

    branchName: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=255)
    enteredBy: Optional[str] = Field(None, max_length=255)
    date: Optional[str] = Field(None, description="ISO date, not in the future")

    @field_validator("date")
    @classmethod
    def date_not_in_future(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            future = is_future_date(value)
        except ValueError:
            raise ValueError("date must be an ISO date (YYYY-MM-DD)")
        if future:
            raise ValueError("date cannot be in the future")
        return value


class UpdateRowDto(BaseModel):
    """DTO for editing the fields of a single row"""

    item: Optional[str] = None
    barcode: Optional[str] = None
    quantity: Optional[str] = None
    size: Optional[str] = None
    packing: Optional[Packing] = None
    company: Optional[str] = None
    altCompany: Optional[str] = None
    notes: Optional[str] = None
