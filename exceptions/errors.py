"""
CRM error types.

Every error carries a stable code, a human-readable message, an HTTP status
and a details dict that is returned to the client unchanged.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Root of every error the API turns into a JSON envelope.

    Attributes:
        code: Error code (e.g., "LEAD_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """{"error": {code, message, details, timestamp}}"""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current resource state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (502/503)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: Optional[str] = None,
        status_code: int = 503,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=status_code,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# LEAD ERRORS
# ===================

class LeadNotFoundError(NotFoundError):
    """Lead not found."""

    def __init__(self, lead_id: str):
        super().__init__(
            resource="Lead",
            identifier=str(lead_id),
            code="LEAD_NOT_FOUND"
        )


class JobNotFoundError(NotFoundError):
    """Job not found."""

    def __init__(self, job_id: str):
        super().__init__(
            resource="Job",
            identifier=str(job_id),
            code="JOB_NOT_FOUND"
        )


# ===================
# CSV IMPORT ERRORS
# ===================

class CsvParseError(ValidationError):
    """CSV file could not be read. Terminal for the import session."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_PARSE_ERROR",
            message=message,
            details=details
        )


class MissingRequiredFieldsError(ValidationError):
    """Required lead fields left unmapped."""

    def __init__(self, fields: list[str]):
        super().__init__(
            code="IMPORT_REQUIRED_FIELDS_UNMAPPED",
            message=f"Required fields must be mapped: {', '.join(fields)}",
            details={"fields": fields}
        )


class UnknownColumnError(ValidationError):
    """Mapping references a column the file does not have."""

    def __init__(self, field: str, column: str, available: list[str]):
        super().__init__(
            code="IMPORT_UNKNOWN_COLUMN",
            message=f"Column '{column}' mapped to '{field}' is not in the file",
            details={"field": field, "column": column, "available": available}
        )


class UnknownFieldError(ValidationError):
    """Mapping references a lead field that does not exist."""

    def __init__(self, field: str, valid: list[str]):
        super().__init__(
            code="IMPORT_UNKNOWN_FIELD",
            message=f"Unknown lead field: {field}",
            details={"field": field, "valid": valid}
        )


class ImportSessionNotFoundError(NotFoundError):
    """Import session expired or never existed."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Import session",
            identifier=session_id,
            code="IMPORT_SESSION_NOT_FOUND"
        )


class InvalidImportPhaseError(ConflictError):
    """Action not allowed in the session's current phase."""

    def __init__(self, action: str, phase: str, allowed: list[str]):
        super().__init__(
            code="IMPORT_INVALID_PHASE",
            message=f"Cannot {action} while import is in '{phase}'",
            details={"action": action, "phase": phase, "allowed_phases": allowed}
        )


class ImportBatchError(ExternalServiceError):
    """
    A bulk insert batch was rejected by the database.

    Batches before the failing one stay imported; details carry both counts
    so the client can show them separately from the batch error.
    """

    def __init__(
        self,
        message: str,
        failed_batch: int,
        rows_imported: int,
        total_rows: int
    ):
        super().__init__(
            service="supabase",
            code="IMPORT_BATCH_FAILED",
            message=message,
            status_code=502,
            details={
                "failed_batch": failed_batch,
                "rows_imported": rows_imported,
                "total_rows": total_rows,
            }
        )
