from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response
from datetime import datetime, timezone
from urllib.parse import quote
import logging
import time

from ..models.schemas import (
    ConversionResponse,
    HealthResponse,
    SelectionRequest,
    SessionResponse,
)
from ..errors import ConversionError, SessionNotFound
from ..services.session import ConversionSession, sessions
from ..utils.audit import audit_logger
from ..config import config

logger = logging.getLogger(__name__)

router = APIRouter(prefix=config.API_V1_PREFIX)


def _session_response(session: ConversionSession, message: str) -> SessionResponse:
    return SessionResponse(
        message=message,
        session_id=session.session_id,
        file_name=session.file_name,
        sheets=session.summaries(),
    )


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=config.VERSION,
        timestamp=datetime.now(timezone.utc)
    )


@router.post("/sessions", response_model=SessionResponse)
async def upload_workbook(file: UploadFile = File(...)):
    """Load a workbook into a new conversion session."""
    logger.info(f"File upload attempt: filename={file.filename}, content_type={file.content_type}")
    content = await file.read()
    session = sessions.create()

    audit_logger.log_file_operation(
        session_id=session.session_id,
        action="upload",
        file_name=file.filename or "",
        file_size=len(content),
        details={"content_type": file.content_type}
    )

    try:
        sheets = session.load(content, file.filename, file.content_type)
    except ConversionError:
        # Nothing was loaded, keep no half-initialized session around
        sessions.discard(session.session_id)
        raise

    logger.info(f"File upload success: filename={file.filename}, sheets={len(sheets)}")
    return _session_response(session, f"{len(sheets)} sheet(s) found")


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    session = sessions.get(session_id)
    return _session_response(session, "File loaded" if session.loaded else "No file loaded")


@router.put("/sessions/{session_id}/selection", response_model=SessionResponse)
async def replace_selection(session_id: str, request: SelectionRequest):
    """Replace the set of sheets to convert."""
    session = sessions.get(session_id)
    session.select(request.sheets)
    return _session_response(session, f"{session.selected_count} sheet(s) selected")


@router.post("/sessions/{session_id}/selection/{sheet_name}", response_model=SessionResponse)
async def toggle_sheet(session_id: str, sheet_name: str):
    """Toggle one sheet in or out of the selection."""
    session = sessions.get(session_id)
    selected = session.toggle(sheet_name)
    state = "selected" if selected else "deselected"
    return _session_response(session, f"Sheet {sheet_name} {state}")


@router.post("/sessions/{session_id}/convert", response_model=ConversionResponse)
async def convert_session(session_id: str):
    """Convert the selected sheets of a session to XML."""
    session = sessions.get(session_id)
    start_time = time.time()
    try:
        xml = session.convert()
    except ConversionError as e:
        audit_logger.log_conversion_event(
            session_id=session_id,
            input_file=session.file_name or "",
            output_file="",
            conversion_time=0.0,
            status="error",
            details={"error": e.detail}
        )
        raise

    conversion_time = (time.time() - start_time) * 1000
    sheet_count = session.selected_count
    audit_logger.log_conversion_event(
        session_id=session_id,
        input_file=session.file_name or "",
        output_file=session.download_name,
        conversion_time=conversion_time,
        details={
            "sheets": sheet_count,
            "output_size": len(xml.encode("utf-8"))
        }
    )

    return ConversionResponse(
        status="success",
        message=f"Successfully converted {sheet_count} sheet(s) to XML",
        session_id=session_id,
        sheet_count=sheet_count,
        download_url=f"{config.API_V1_PREFIX}/sessions/{session_id}/download",
        file_name=session.download_name,
        xml=xml,
        conversion_time=conversion_time
    )


@router.get("/sessions/{session_id}/download")
async def download_xml(session_id: str):
    """Download the last generated document of a session."""
    session = sessions.get(session_id)
    if session.xml_output is None:
        raise SessionNotFound("No XML document has been generated for this session")

    body = session.xml_output.encode("utf-8")
    audit_logger.log_file_operation(
        session_id=session_id,
        action="file_download",
        file_name=session.download_name,
        file_size=len(body)
    )
    logger.info(f"File download success: filename={session.download_name}")
    return Response(
        content=body,
        media_type="application/xml",
        headers={"Content-Disposition": _content_disposition(session.download_name)}
    )


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.delete("/sessions/{session_id}", status_code=204)
async def discard_session(session_id: str):
    """Forget a session and its loaded workbook."""
    sessions.get(session_id)
    sessions.discard(session_id)
    return Response(status_code=204)
