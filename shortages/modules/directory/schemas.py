"""
Directory DTOs - branches, departments, contacts and report labels
loaded from the directory data file at startup.
"""

from pydantic import BaseModel, Field
from typing import Dict, List

from shortages.core.exceptions import NotFoundError

ROW_COLUMNS = (
    "sequence",
    "item",
    "barcode",
    "quantity",
    "size",
    "packing",
    "company",
    "altCompany",
    "notes",
)


class Contact(BaseModel):
    """A WhatsApp recipient of shared reports"""

    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=r"^\d{6,15}$")


class ReportLabels(BaseModel):
    """Texts printed on the exported report and the share message"""

    title: str = "Daily branch shortages report"
    file_prefix: str = "shortages"
    header_labels: Dict[str, str] = Field(
        default_factory=lambda: {
            "branchName": "Branch",
            "department": "Department",
            "enteredBy": "Entered by",
            "date": "Date",
        }
    )
    column_labels: Dict[str, str] = Field(
        default_factory=lambda: {name: name for name in ROW_COLUMNS}
    )
    share_template: str = (
        "Branch shortages report\nBranch: {branchName}\nDate: {date}\n\n"
        "Please see the attached file."
    )


class Directory(BaseModel):
    """Selectable values and contacts of the shortage form"""

    branches: List[str] = Field(default_factory=list)
    departments: List[str] = Field(default_factory=list)
    packing_labels: Dict[str, str] = Field(default_factory=dict)
    contacts: List[Contact] = Field(default_factory=list)
    report: ReportLabels = Field(default_factory=ReportLabels)

    def contact_phone(self, name: str) -> str:
        """
        Resolve a contact name to its phone number.

        Raises:
            NotFoundError: If no contact has that name
        """
        for contact in self.contacts:
            if contact.name == name:
                return contact.phone
        raise NotFoundError("Contact", name)

    def packing_label(self, value: str) -> str:
        return self.packing_labels.get(value, value)

    def printed_texts(self) -> List[str]:
        """Every directory text that can appear on an exported report."""
        report = self.report
        return [
            report.title,
            *report.header_labels.values(),
            *report.column_labels.values(),
            *self.packing_labels.values(),
            *self.branches,
            *self.departments,
        ]


class DirectoryResponse(BaseModel):
    """Public view of the directory; phone numbers stay on the server"""

    branches: List[str]
    departments: List[str]
    packing_labels: Dict[str, str]
    contacts: List[str]

    @classmethod
    def from_directory(cls, directory: Directory) -> "DirectoryResponse":
        return cls(
            branches=directory.branches,
            departments=directory.departments,
            packing_labels=directory.packing_labels,
            contacts=[contact.name for contact in directory.contacts],
        )
