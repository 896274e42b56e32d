from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Sequence

from fpdf import FPDF
from fpdf.errors import FPDFException

from shortages.core.config import config
from shortages.core.exceptions import RenderError
from shortages.modules.directory.schemas import ROW_COLUMNS, Directory
from shortages.modules.reports.schemas import HEADER_FIELDS, FormDocument
from .share import table_rows

# A4 landscape leaves 277mm between 10mm margins
COLUMN_WIDTHS = {
    "sequence": 14,
    "item": 50,
    "barcode": 34,
    "quantity": 18,
    "size": 26,
    "packing": 22,
    "company": 38,
    "altCompany": 38,
    "notes": 37,
}
ROW_HEIGHT = 7
# room kept for the page number footer
BOTTOM_MARGIN = 15
REPORT_FONT = "ReportFont"


class ShortageReportPDF(FPDF):
    def __init__(self, font_path: str = "", text_shaping: bool = False):
        super().__init__(orientation="L", unit="mm", format="A4")
        self.set_margins(10, 10, 10)
        self.set_auto_page_break(auto=False)
        if font_path:
            # Unicode TTF, required for Arabic branch names and labels
            self.add_font(REPORT_FONT, "", font_path)
            self.font_family_name = REPORT_FONT
            self.bold_style = ""
        else:
            self.font_family_name = "Helvetica"
            self.bold_style = "B"
        if text_shaping:
            self.set_text_shaping(True)

    def footer(self):
        self.set_y(-12)
        self.set_font(self.font_family_name, "", 8)
        self.cell(0, 6, f"{self.page_no()}/{{nb}}", align="C")

    def _fit(self, text: str, width: float) -> str:
        """Trim text so it fits inside a cell of the given width."""
        room = width - 2
        if self.get_string_width(text) <= room:
            return text
        # longest prefix that still fits with the ".." marker
        low, high = 0, len(text)
        while low < high:
            middle = (low + high + 1) // 2
            if self.get_string_width(text[:middle] + "..") <= room:
                low = middle
            else:
                high = middle - 1
        return text[:low] + ".."

    def _table_header(self, directory: Directory) -> None:
        labels = directory.report.column_labels
        self.set_font(self.font_family_name, self.bold_style, 9)
        self.set_fill_color(66, 139, 202)
        self.set_text_color(255, 255, 255)
        for column in ROW_COLUMNS:
            width = COLUMN_WIDTHS[column]
            self.cell(width, ROW_HEIGHT + 1, self._fit(labels.get(column, column), width),
                      border=1, align="C", fill=True)
        self.ln(ROW_HEIGHT + 1)
        self.set_text_color(0, 0, 0)
        self.set_font(self.font_family_name, "", 9)

    def _table_row(self, cells: Sequence[str]) -> None:
        for column, text in zip(ROW_COLUMNS, cells):
            width = COLUMN_WIDTHS[column]
            self.cell(width, ROW_HEIGHT, self._fit(text, width), border=1, align="C")
        self.ln(ROW_HEIGHT)

    @staticmethod
    def _creation_date(doc: FormDocument) -> datetime:
        try:
            day = date.fromisoformat(doc.date)
        except ValueError:
            day = date(1970, 1, 1)
        return datetime.combine(day, time(), tzinfo=timezone.utc)

    @staticmethod
    def generate(
        doc: FormDocument,
        directory: Directory,
        font_path: str = config.pdf_font_path,
        text_shaping: bool = config.pdf_text_shaping,
    ) -> bytes:
        """
        Render the filled rows of a form as a landscape A4 report.
        The same document always renders to the same bytes.

        Raises:
            RenderError: If the font cannot be loaded or a text cannot be encoded
        """
        labels = directory.report
        try:
            pdf = ShortageReportPDF(font_path=font_path, text_shaping=text_shaping)
            pdf.set_creation_date(ShortageReportPDF._creation_date(doc))
            pdf.add_page()

            # --- Title ---
            pdf.set_font(pdf.font_family_name, pdf.bold_style, 18)
            pdf.cell(0, 12, labels.title, align="C")
            pdf.ln(14)

            # --- Header fields ---
            pdf.set_font(pdf.font_family_name, "", 11)
            header = doc.header()
            for field in HEADER_FIELDS:
                label = labels.header_labels.get(field, field)
                pdf.cell(0, 7, f"{label}: {header[field]}")
                pdf.ln(7)
            pdf.ln(4)

            # --- Table, header repeated on every page ---
            pdf._table_header(directory)
            for cells in table_rows(doc, directory):
                if pdf.get_y() + ROW_HEIGHT > pdf.h - BOTTOM_MARGIN:
                    pdf.add_page()
                    pdf._table_header(directory)
                pdf._table_row(cells)

            return bytes(pdf.output())
        except (FPDFException, OSError) as exc:
            raise RenderError(str(exc)) from exc


def _is_latin1(text: str) -> bool:
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


def check_font_coverage(directory: Directory, font_path: str = config.pdf_font_path) -> None:
    """
    Fail at startup when the report could never be rendered: a configured
    font file that is missing, or directory labels outside Latin-1 without
    a Unicode font to print them.

    Raises:
        RuntimeError: If exports with this directory and font would fail
    """
    if font_path:
        if not Path(font_path).is_file():
            raise RuntimeError(f"PDF font file not found: {font_path}")
        return

    unsupported = [text for text in directory.printed_texts() if not _is_latin1(text)]
    if unsupported:
        raise RuntimeError(
            f"Directory labels such as {unsupported[0]!r} need a Unicode font: "
            "set PDF_FONT_PATH to a TTF file covering them"
        )
