"""
Report routes: monthly financials, exports, pipeline stats, job status.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response, StreamingResponse
from typing import Literal, Optional
import structlog

from models.job import JobResponse, JobStatusUpdate
from models.report import MonthlyFinancialReport, PipelineStats
from services.export_service import get_export_service, report_filename
from services.job_service import get_job_service
from services.report_service import get_report_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


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
# REPORT ROUTES
# ===================

@router.get("/api/reports/financial", response_model=MonthlyFinancialReport)
async def get_financial_report(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current month")
):
    """
    Completed jobs for a month with revenue, team pay and profit.

    Raises:
        422: Month not formatted YYYY-MM
    """
    try:
        return get_report_service().monthly_financials(month)
    except Exception as e:
        return handle_error(e)


@router.get("/api/reports/financial/export")
async def export_financial_report(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current month"),
    format: Literal["csv", "xlsx"] = Query("csv", description="File format")
):
    """Download the monthly report as CSV or Excel."""
    try:
        report = get_report_service().monthly_financials(month)
        exporter = get_export_service()
        filename = report_filename(report.month, format)
        headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

        if format == "xlsx":
            return StreamingResponse(
                exporter.generate_financial_excel(report),
                media_type=XLSX_MEDIA_TYPE,
                headers=headers
            )
        return Response(
            content=exporter.generate_financial_csv(report),
            media_type="text/csv; charset=utf-8",
            headers=headers
        )
    except Exception as e:
        return handle_error(e)


@router.get("/api/reports/pipeline", response_model=PipelineStats)
async def get_pipeline_stats():
    """Lead counts per stage, conversion rate and pipeline value."""
    try:
        return get_report_service().pipeline_stats()
    except Exception as e:
        return handle_error(e)


# ===================
# JOB ROUTES
# ===================

@router.patch("/api/jobs/{job_id}/status", response_model=JobResponse)
async def update_job_status(job_id: int, data: JobStatusUpdate):
    """
    Mark a job scheduled, completed or cancelled.

    Raises:
        404: Job not found
    """
    try:
        return get_job_service().update_status(job_id, data.status)
    except Exception as e:
        return handle_error(e)
