"""
Lead and activity schemas for validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


class LeadStatus(str, Enum):
    """Pipeline stages, in board order."""
    NEW = "new"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    SCHEDULED = "scheduled"
    WON = "won"
    LOST = "lost"


# Stages that still count toward pipeline value
ACTIVE_STATUSES = (
    LeadStatus.NEW,
    LeadStatus.CONTACTED,
    LeadStatus.QUOTED,
    LeadStatus.SCHEDULED,
)

STATUS_LABELS = {
    LeadStatus.NEW: "New Lead",
    LeadStatus.CONTACTED: "Contacted",
    LeadStatus.QUOTED: "Quoted",
    LeadStatus.SCHEDULED: "Scheduled",
    LeadStatus.WON: "Won",
    LeadStatus.LOST: "Lost",
}


class ServiceType(str, Enum):
    """Cleaning service offered."""
    STANDARD = "standard"
    DEEP = "deep"
    MOVE_IN_OUT = "move-in-out"


class Frequency(str, Enum):
    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


class ActivityType(str, Enum):
    NOTE = "note"
    CALL = "call"
    EMAIL = "email"
    STATUS_CHANGE = "status_change"


class LeadCreate(BaseSchema):
    """
    Create a new lead.

    Required: name
    Everything else optional; status defaults to "new".
    """

    name: str = Field(..., min_length=1, max_length=200, description="Contact name")
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=300)
    zip_code: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    service_type: Optional[ServiceType] = None
    type: Optional[str] = Field(None, description="One-time or recurring")
    service: Optional[str] = None
    bedrooms: Optional[float] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    sqft: Optional[float] = Field(None, ge=0)
    people_count: Optional[float] = Field(None, ge=0)
    frequency: Optional[Frequency] = None
    estimated_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    source: Optional[str] = Field(None, examples=["website", "referral", "facebook"])
    status: LeadStatus = LeadStatus.NEW

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: Optional[str]) -> Optional[str]:
        """Store emails lowercase."""
        if v is None:
            return v
        return v.lower()


class LeadUpdate(BaseSchema):
    """
    Update existing lead.

    All fields optional - only provided fields are updated.
    Status changes go through LeadStatusUpdate so they get logged.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=300)
    zip_code: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    service_type: Optional[ServiceType] = None
    type: Optional[str] = None
    service: Optional[str] = None
    bedrooms: Optional[float] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    sqft: Optional[float] = Field(None, ge=0)
    people_count: Optional[float] = Field(None, ge=0)
    frequency: Optional[Frequency] = None
    estimated_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    source: Optional[str] = None


class LeadStatusUpdate(BaseSchema):
    status: LeadStatus


class NoteCreate(BaseSchema):
    content: str = Field(..., min_length=1, max_length=5000)
    type: ActivityType = ActivityType.NOTE


class ActivityResponse(BaseSchema):
    """Entry in a lead's activity log."""

    id: int
    lead_id: int
    type: ActivityType
    content: Optional[str] = None
    created_at: datetime


class LeadResponse(BaseSchema):
    """
    Lead response with all fields.

    Imported rows may be missing almost everything, so only id and
    created_at are guaranteed.
    """

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    service_type: Optional[str] = None
    type: Optional[str] = None
    service: Optional[str] = None
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    sqft: Optional[float] = None
    people_count: Optional[float] = None
    frequency: Optional[str] = None
    status: str = LeadStatus.NEW.value
    estimated_price: Optional[float] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_default(cls, v: Optional[str]) -> str:
        """Rows without a status sit in the first column of the board."""
        return (v or LeadStatus.NEW.value).lower()


class LeadDetailResponse(LeadResponse):
    """Lead with its activity log, newest first."""

    activities: list[ActivityResponse] = []


class LeadListResponse(BaseSchema):
    """List of leads with pagination."""

    data: list[LeadResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
