"""
Export Router - PDF download and WhatsApp sharing of the current form
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from shortages.core.response_interceptor import CustomAPIRoute
from shortages.modules.directory.schemas import Directory
from shortages.modules.directory.service import get_directory
from shortages.modules.reports.dependencies import get_form_session
from shortages.modules.reports.sessions import FormSession
from .schemas import ShareRequest, ShareResponse
from .service import ExportService

router = APIRouter(prefix="/form", tags=["export"], route_class=CustomAPIRoute)


@router.get("/export")
async def export_pdf(
    session: FormSession = Depends(get_form_session),
    directory: Directory = Depends(get_directory),
):
    """Save the draft and download the shortage report as a PDF"""
    result = await ExportService.export(session.synchronizer, directory)
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}",
            "X-Filled-Rows": str(result.filled_rows),
        },
    )


@router.post("/share", response_model=ShareResponse)
async def share_report(
    dto: ShareRequest,
    session: FormSession = Depends(get_form_session),
    directory: Directory = Depends(get_directory),
):
    """
    Save the draft, render the report and return the WhatsApp link for the
    chosen contact. The client opens the link and attaches the PDF.
    """
    phone = directory.contact_phone(dto.contact)
    result = await ExportService.share(session.synchronizer, directory, phone)
    return ShareResponse(
        url=result.url,
        filename=result.export.filename,
        saved=result.export.saved,
        filledRows=result.export.filled_rows,
    )
