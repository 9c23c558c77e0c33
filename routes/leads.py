"""
Lead API routes: pipeline board, lead detail, clients.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.lead import (
    ActivityResponse,
    LeadCreate,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    LeadStatus,
    LeadStatusUpdate,
    LeadUpdate,
    NoteCreate,
)
from models.job import JobCreate, JobResponse
from services.lead_service import get_lead_service
from services.job_service import get_job_service
from exceptions import AppError

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


# ===================
# ROUTES
# ===================

@router.get("", response_model=LeadListResponse)
async def list_leads(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    status: Optional[LeadStatus] = Query(None, description="Filter by pipeline stage"),
    search: Optional[str] = Query(None, description="Name, email, phone, address or city")
):
    """List leads, newest first."""
    try:
        leads, total = get_lead_service().get_all(
            page=page,
            page_size=page_size,
            status=status,
            search=search
        )
        return LeadListResponse(
            data=leads,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size
        )
    except Exception as e:
        return handle_error(e)


@router.get("/clients", response_model=list[LeadResponse])
async def list_clients(
    search: Optional[str] = Query(None, description="Name, email, phone, address or city")
):
    """Won leads, i.e. active clients."""
    try:
        return get_lead_service().get_clients(search)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(data: LeadCreate):
    """
    Capture a new lead.

    Raises:
        422: Validation error
    """
    try:
        return get_lead_service().create(data)
    except Exception as e:
        return handle_error(e)


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(lead_id: int):
    """
    Lead with its activity log.

    Raises:
        404: Lead not found
    """
    try:
        return get_lead_service().get_by_id(lead_id)
    except Exception as e:
        return handle_error(e)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(lead_id: int, data: LeadUpdate):
    """
    Update lead fields. Only provided fields change.

    Raises:
        404: Lead not found
    """
    try:
        return get_lead_service().update(lead_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{lead_id}/status", response_model=LeadResponse)
async def update_lead_status(lead_id: int, data: LeadStatusUpdate):
    """
    Move a lead on the pipeline board. Logged as a status_change activity.

    Raises:
        404: Lead not found
    """
    try:
        return get_lead_service().update_status(lead_id, data.status)
    except Exception as e:
        return handle_error(e)


@router.post("/{lead_id}/notes", response_model=ActivityResponse, status_code=201)
async def add_note(lead_id: int, data: NoteCreate):
    """Add a note, call or email entry to the activity log."""
    try:
        service = get_lead_service()
        service.get_by_id(lead_id)
        return service.add_activity(lead_id, data.content, data.type)
    except Exception as e:
        return handle_error(e)


@router.delete("/{lead_id}", status_code=204)
async def delete_lead(lead_id: int):
    """
    Delete a lead.

    Raises:
        404: Lead not found
    """
    try:
        get_lead_service().delete(lead_id)
        return None
    except Exception as e:
        return handle_error(e)


# ===================
# JOBS
# ===================

@router.get("/{lead_id}/jobs", response_model=list[JobResponse])
async def list_lead_jobs(lead_id: int):
    """Jobs scheduled for a lead, latest first."""
    try:
        return get_job_service().get_for_lead(lead_id)
    except Exception as e:
        return handle_error(e)


@router.post("/{lead_id}/jobs", response_model=JobResponse, status_code=201)
async def create_lead_job(lead_id: int, data: JobCreate):
    """
    Schedule a job for a lead.

    Raises:
        404: Lead not found
    """
    try:
        get_lead_service().get_by_id(lead_id)
        return get_job_service().create(lead_id, data)
    except Exception as e:
        return handle_error(e)
