"""
Export Service - save, render and share the current shortage form.

PDF rendering is CPU-bound and runs in a small thread pool so other
requests keep being served.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from shortages.core.exceptions import InvalidArgumentError
from shortages.modules.directory.schemas import Directory
from shortages.modules.reports.schemas import FormDocument
from shortages.modules.reports.synchronizer import DraftSynchronizer
from .pdf_generator import ShortageReportPDF
from .share import build_share_message, build_share_url, filled_rows, report_filename

logger = logging.getLogger(__name__)

# Thread pool for CPU-bound PDF generation (non-blocking)
_executor = ThreadPoolExecutor(max_workers=2)


@dataclass(frozen=True)
class ExportResult:
    document: FormDocument
    filename: str
    content: bytes
    saved: bool
    filled_rows: int


@dataclass(frozen=True)
class ShareResult:
    url: str
    export: ExportResult


class ExportService:
    """Turns a form session snapshot into a PDF and a share link"""

    @staticmethod
    async def render(doc: FormDocument, directory: Directory) -> bytes:
        """Render a document snapshot off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            _executor, ShortageReportPDF.generate, doc, directory
        )

    @staticmethod
    async def export(synchronizer: DraftSynchronizer, directory: Directory) -> ExportResult:
        """
        Save the draft, then render the document as it was when saved.
        A failed save is logged by the synchronizer and does not block the export.

        Raises:
            RenderError: If the PDF cannot be produced
        """
        snapshot = synchronizer.document
        saved = await synchronizer.save()
        content = await ExportService.render(snapshot, directory)
        filename = report_filename(snapshot, directory.report.file_prefix)
        logger.info(
            "Exported %s for user %s (%d bytes)", filename, synchronizer.user_id, len(content)
        )
        return ExportResult(
            document=snapshot,
            filename=filename,
            content=content,
            saved=saved,
            filled_rows=len(filled_rows(snapshot)),
        )

    @staticmethod
    async def share(
        synchronizer: DraftSynchronizer, directory: Directory, contact_phone: str
    ) -> ShareResult:
        """
        Save, render and build the WhatsApp link for one recipient.

        Raises:
            InvalidArgumentError: If the contact phone is empty
            RenderError: If the PDF cannot be produced
        """
        if not contact_phone or not contact_phone.strip():
            raise InvalidArgumentError("Contact phone number is required")

        result = await ExportService.export(synchronizer, directory)
        message = build_share_message(result.document, directory.report.share_template)
        return ShareResult(url=build_share_url(contact_phone.strip(), message), export=result)
