"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.lead import (
    LeadStatus,
    ServiceType,
    Frequency,
    ActivityType,
    LeadCreate,
    LeadUpdate,
    LeadStatusUpdate,
    NoteCreate,
    ActivityResponse,
    LeadResponse,
    LeadDetailResponse,
    LeadListResponse,
)
from models.job import (
    JobStatus,
    JobCreate,
    JobStatusUpdate,
    JobResponse,
)
from models.report import (
    MonthlyFinancialReport,
    StatusCount,
    PipelineStats,
)
from models.lead_import import (
    FieldSpec,
    LEAD_IMPORT_FIELDS,
    NUMERIC_FIELDS,
    ImportPhase,
    MappingUpdateRequest,
    ImportProgress,
    ImportFailure,
    ImportSessionResponse,
    ImportResultResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Lead
    "LeadStatus",
    "ServiceType",
    "Frequency",
    "ActivityType",
    "LeadCreate",
    "LeadUpdate",
    "LeadStatusUpdate",
    "NoteCreate",
    "ActivityResponse",
    "LeadResponse",
    "LeadDetailResponse",
    "LeadListResponse",

    # Job
    "JobStatus",
    "JobCreate",
    "JobStatusUpdate",
    "JobResponse",

    # Report
    "MonthlyFinancialReport",
    "StatusCount",
    "PipelineStats",

    # Lead import
    "FieldSpec",
    "LEAD_IMPORT_FIELDS",
    "NUMERIC_FIELDS",
    "ImportPhase",
    "MappingUpdateRequest",
    "ImportProgress",
    "ImportFailure",
    "ImportSessionResponse",
    "ImportResultResponse",
]
