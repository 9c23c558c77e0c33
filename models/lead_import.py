"""
CSV lead import schemas.

Defines the fixed set of lead fields a CSV column can be mapped to, the
import phases, and the request/response bodies of the import routes.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class FieldSpec(BaseModel):
    """Target lead field offered in the mapping step."""

    key: str
    label: str
    required: bool = False
    numeric: bool = False


# Order is the order shown to the user.
LEAD_IMPORT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(key="name", label="Name", required=True),
    FieldSpec(key="email", label="Email"),
    FieldSpec(key="phone", label="Phone"),
    FieldSpec(key="zip_code", label="Zip Code"),
    FieldSpec(key="type", label="Type (One-time/Recurring)"),
    FieldSpec(key="bedrooms", label="Bedrooms", numeric=True),
    FieldSpec(key="bathrooms", label="Bathrooms", numeric=True),
    FieldSpec(key="sqft", label="Sqft", numeric=True),
    FieldSpec(key="people_count", label="People", numeric=True),
    FieldSpec(key="service", label="Service"),
    FieldSpec(key="estimated_price", label="Estimated Price", numeric=True),
    FieldSpec(key="city", label="City"),
)

NUMERIC_FIELDS: frozenset[str] = frozenset(f.key for f in LEAD_IMPORT_FIELDS if f.numeric)
REQUIRED_FIELDS: tuple[str, ...] = tuple(f.key for f in LEAD_IMPORT_FIELDS if f.required)

DEFAULT_IMPORT_STATUS = "new"


class ImportPhase(str, Enum):
    """
    Import session phases.

    upload -> map -> processing -> success
    processing -> map on a failed batch
    map -> upload on "change file"
    """
    UPLOAD = "upload"
    MAP = "map"
    PROCESSING = "processing"
    SUCCESS = "success"


# ===================
# REQUESTS
# ===================

class MappingUpdateRequest(BaseSchema):
    """
    Replace the session's column mapping.

    Keys are lead field keys; a null or empty value means "ignore this field".
    """

    # CSV headers are matched verbatim
    model_config = ConfigDict(str_strip_whitespace=False)

    mapping: dict[str, Optional[str]] = Field(
        ...,
        examples=[{"name": "Full Name", "email": "Email Address", "phone": None}]
    )


# ===================
# RESPONSES
# ===================

class ImportProgress(BaseSchema):
    processed: int = 0
    total: int = 0
    percent: int = 0
    batch: int = 0
    batch_count: int = 0


class ImportFailure(BaseSchema):
    """
    Failed batch report.

    rows_imported counts rows from earlier batches that were written and
    stay written.
    """

    message: str
    failed_batch: int
    rows_imported: int
    total_rows: int


class ImportSessionResponse(BaseSchema):
    """State of one import session, as shown by the mapping/progress UI."""

    model_config = ConfigDict(str_strip_whitespace=False)

    session_id: str
    phase: ImportPhase
    filename: Optional[str] = None
    size_bytes: int = 0
    headers: list[str] = []
    preview: list[dict[str, str]] = []
    fields: list[FieldSpec] = list(LEAD_IMPORT_FIELDS)
    mapping: dict[str, str] = {}
    progress: ImportProgress = Field(default_factory=ImportProgress)
    error: Optional[ImportFailure] = None
    previous_failures: list[ImportFailure] = Field(
        default_factory=list,
        description="Every failed run of this file; their rows_imported stay in the database"
    )


class ImportResultResponse(BaseSchema):
    """Returned once every batch has been inserted."""

    session_id: str
    phase: ImportPhase
    imported: int
    total: int
    batches: int
