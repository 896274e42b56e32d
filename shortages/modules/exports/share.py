"""
Report naming, row filtering and WhatsApp share links.
"""

from typing import List, Tuple
from urllib.parse import quote

from shortages.core.config import config
from shortages.modules.directory.schemas import ROW_COLUMNS, Directory
from shortages.modules.reports.schemas import FormDocument, Row


def filled_rows(doc: FormDocument) -> List[Row]:
    """Rows with an item, barcode or quantity; sequences are kept as stored."""
    return [row for row in doc.rows if row.is_filled()]


def table_rows(doc: FormDocument, directory: Directory) -> List[Tuple[str, ...]]:
    """Cell texts of the report table, one tuple per filled row."""
    table = []
    for row in filled_rows(doc):
        cells = []
        for column in ROW_COLUMNS:
            value = getattr(row, column)
            if column == "packing":
                value = directory.packing_label(value.value)
            cells.append(str(value))
        table.append(tuple(cells))
    return table


def report_filename(doc: FormDocument, prefix: str) -> str:
    """<prefix>_<branchName>_<date>.pdf"""
    return f"{prefix}_{doc.branchName}_{doc.date}.pdf"


def build_share_message(doc: FormDocument, template: str) -> str:
    return template.format(branchName=doc.branchName, date=doc.date)


def build_share_url(phone: str, message: str, base_url: str = config.whatsapp_base_url) -> str:
    """WhatsApp deep link with the message pre-filled."""
    return f"{base_url.rstrip('/')}/{phone}?text={quote(message, safe='')}"
