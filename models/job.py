"""
Job schemas.

A job is one cleaning visit for a lead: what was charged and what the team
was paid.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import date, datetime

from models.base import BaseSchema


class JobStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class JobCreate(BaseSchema):
    """Schedule a job for a lead."""

    date: date
    team: Optional[str] = Field(None, max_length=100)
    amount: float = Field(0, ge=0, description="Amount charged to the client")
    team_pay: Optional[float] = Field(None, ge=0, description="Amount paid to the team")
    status: JobStatus = JobStatus.SCHEDULED
    notes: Optional[str] = None


class JobStatusUpdate(BaseSchema):
    status: JobStatus


class JobResponse(BaseSchema):
    id: int
    lead_id: int
    date: date
    team: Optional[str] = None
    amount: float = 0
    team_pay: Optional[float] = None
    status: JobStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def profit(self) -> float:
        return (self.amount or 0) - (self.team_pay or 0)
