"""
Job service: cleaning visits scheduled for leads.
"""

from datetime import date
from typing import Optional
import structlog

from config import get_supabase_client, get_settings
from models.job import JobCreate, JobResponse, JobStatus
from exceptions import JobNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class JobService:
    """Job CRUD."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = get_settings().jobs_table

    def get_for_lead(self, lead_id: int) -> list[JobResponse]:
        """Jobs for one lead, most recent date first."""
        logger.debug("getting_lead_jobs", lead_id=lead_id)
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("lead_id", lead_id)
                .order("date", desc=True)
                .execute()
            )
            return [JobResponse(**row) for row in result.data]
        except Exception as e:
            logger.error("get_lead_jobs_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_all(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[JobStatus] = None,
    ) -> list[JobResponse]:
        """
        All jobs, most recent date first.

        Args:
            start: Earliest job date (inclusive)
            end: Latest job date (inclusive)
            status: Only jobs in this status
        """
        try:
            query = self.db.table(self.table).select("*")
            if start:
                query = query.gte("date", start.isoformat())
            if end:
                query = query.lte("date", end.isoformat())
            if status:
                query = query.eq("status", status.value)
            result = query.order("date", desc=True).execute()
            return [JobResponse(**row) for row in result.data]
        except Exception as e:
            logger.error("get_jobs_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_months(self) -> list[str]:
        """Distinct YYYY-MM months that have at least one job, newest first."""
        try:
            result = self.db.table(self.table).select("date").execute()
        except Exception as e:
            logger.error("get_job_months_failed", error=str(e))
            raise DatabaseError("select", str(e))
        return sorted({row["date"][:7] for row in result.data if row.get("date")}, reverse=True)

    def create(self, lead_id: int, data: JobCreate) -> JobResponse:
        """Schedule a job for a lead."""
        logger.info("creating_job", lead_id=lead_id, date=data.date.isoformat())
        try:
            result = (
                self.db.table(self.table)
                .insert({**data.model_dump(mode="json"), "lead_id": lead_id})
                .execute()
            )
            job = JobResponse(**result.data[0])
            logger.info("job_created", job_id=job.id, lead_id=lead_id)
            return job
        except Exception as e:
            logger.error("create_job_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def update_status(self, job_id: int, status: JobStatus) -> JobResponse:
        """
        Mark a job scheduled, completed or cancelled.

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        logger.info("updating_job_status", job_id=job_id, status=status.value)
        try:
            result = (
                self.db.table(self.table)
                .update({"status": status.value})
                .eq("id", job_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_job_status_failed", job_id=job_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise JobNotFoundError(job_id)
        return JobResponse(**result.data[0])


# Singleton instance for convenience
_job_service: Optional[JobService] = None


def get_job_service() -> JobService:
    """Get or create JobService instance."""
    global _job_service
    if _job_service is None:
        _job_service = JobService()
    return _job_service
