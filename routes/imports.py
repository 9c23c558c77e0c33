"""
CSV lead import routes.

One session per upload: upload -> edit mapping -> confirm. Progress can be
polled with GET while the confirm request is running.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
import structlog

from config import get_settings
from models.lead_import import (
    ImportResultResponse,
    ImportSessionResponse,
    MappingUpdateRequest,
)
from services.lead_import_service import get_lead_import_service
from exceptions import AppError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


async def _read_upload(file: UploadFile) -> bytes:
    """Read an uploaded CSV, rejecting wrong types, empty and oversized files."""
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise ValidationError(
            message="File must be a CSV file (.csv)",
            code="INVALID_FILE_TYPE",
            details={"filename": file.filename}
        )

    content = await file.read()

    if len(content) == 0:
        raise ValidationError(message="Uploaded file is empty", code="EMPTY_FILE")

    max_bytes = get_settings().import_max_file_bytes
    if len(content) > max_bytes:
        raise ValidationError(
            message="File is too large",
            code="FILE_TOO_LARGE",
            details={"size_bytes": len(content), "max_bytes": max_bytes}
        )

    return content


# ===================
# ROUTES
# ===================

@router.post("", response_model=ImportSessionResponse, status_code=201)
async def upload_csv(
    file: UploadFile = File(..., description="CSV file with one lead per row")
):
    """
    Upload a CSV and open an import session.

    Returns the headers, a preview of the first rows and a suggested
    column mapping.

    Raises:
        422: Not a CSV, empty, too large, or unparseable
    """
    logger.info("csv_upload_started", filename=file.filename)
    try:
        content = await _read_upload(file)
        session = get_lead_import_service().start_session(content, file.filename)
        return session.to_response()
    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=ImportSessionResponse)
async def get_import_session(session_id: str):
    """
    Current phase, mapping and progress of a session.

    Raises:
        404: Session unknown or expired
    """
    try:
        return get_lead_import_service().get_session(session_id).to_response()
    except Exception as e:
        return handle_error(e)


@router.put("/{session_id}/mapping", response_model=ImportSessionResponse)
async def update_mapping(session_id: str, data: MappingUpdateRequest):
    """
    Replace the column mapping.

    Null or empty values mean "ignore this field".

    Raises:
        404: Session unknown or expired
        409: Session is not in the mapping step
        422: Unknown field or column
    """
    try:
        return get_lead_import_service().update_mapping(session_id, data.mapping).to_response()
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/file", response_model=ImportSessionResponse)
async def replace_file(
    session_id: str,
    file: UploadFile = File(..., description="CSV file with one lead per row")
):
    """
    Load a file into a session that was sent back to upload.

    Raises:
        409: Session is not in the upload step
        422: Not a CSV, empty, too large, or unparseable
    """
    try:
        content = await _read_upload(file)
        session = get_lead_import_service().load_file(session_id, content, file.filename)
        return session.to_response()
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/change-file", response_model=ImportSessionResponse)
async def change_file(session_id: str):
    """
    Discard the current file and mapping.

    Raises:
        409: Import already running or finished
    """
    try:
        return get_lead_import_service().change_file(session_id).to_response()
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/confirm", response_model=ImportResultResponse)
def confirm_import(session_id: str):
    """
    Run the import with the current mapping.

    Blocks until every batch is in or one fails. Plain def so the batch
    pauses run in the threadpool.

    Raises:
        409: Session is not in the mapping step
        422: Required field unmapped, or file unreadable
        502: A batch was rejected; details hold rows_imported and total_rows
    """
    try:
        return get_lead_import_service().run_import(session_id)
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def close_import(session_id: str):
    """
    Close the import and drop its state.

    Raises:
        409: Import is still running
    """
    try:
        get_lead_import_service().close(session_id)
        return None
    except Exception as e:
        return handle_error(e)
