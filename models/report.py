"""
Reporting schemas: monthly financials and pipeline statistics.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema
from models.job import JobResponse


class MonthlyFinancialReport(BaseSchema):
    """Totals over completed jobs in one calendar month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", examples=["2026-10"])
    jobs: list[JobResponse]
    job_count: int
    total_revenue: float
    total_team_pay: float
    total_profit: float
    profit_margin: Optional[float] = Field(
        None,
        description="Profit as a percentage of revenue (None when revenue is 0)"
    )
    available_months: list[str] = Field(
        default_factory=list,
        description="Months with any job, newest first"
    )


class StatusCount(BaseSchema):
    status: str
    label: str
    count: int


class PipelineStats(BaseSchema):
    """Dashboard numbers computed over all leads."""

    total_leads: int
    won_leads: int
    conversion_rate: int = Field(..., description="Won / total, rounded percent")
    pipeline_value: float = Field(..., description="Estimated price of active leads")
    by_status: list[StatusCount]
