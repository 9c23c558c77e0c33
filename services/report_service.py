"""
Report service: monthly financials and pipeline statistics.

Financials count completed jobs only. Profit is what was charged minus what
the team was paid.
"""

import calendar
from datetime import date
from typing import Optional
import structlog

from config import get_supabase_client, get_settings
from models.job import JobStatus
from models.lead import ACTIVE_STATUSES, STATUS_LABELS, LeadStatus
from models.report import MonthlyFinancialReport, PipelineStats, StatusCount
from services.job_service import JobService, get_job_service
from exceptions import DatabaseError, ValidationError

logger = structlog.get_logger(__name__)


def current_month() -> str:
    """Current month as YYYY-MM."""
    return date.today().strftime("%Y-%m")


def _month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a YYYY-MM month."""
    try:
        first = date.fromisoformat(f"{month}-01")
    except ValueError:
        raise ValidationError(
            message="Month must be formatted YYYY-MM",
            code="INVALID_MONTH",
            details={"provided": month}
        )
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


class ReportService:
    """Read-only aggregates over jobs and leads."""

    def __init__(self, job_service: Optional[JobService] = None):
        self.db = get_supabase_client()
        self.leads_table = get_settings().leads_table
        self.job_service = job_service or get_job_service()

    def monthly_financials(self, month: Optional[str] = None) -> MonthlyFinancialReport:
        """
        Revenue, team pay and profit over completed jobs in a month.

        Args:
            month: YYYY-MM, defaults to the current month

        Raises:
            ValidationError: Month not formatted YYYY-MM
        """
        month = month or current_month()
        first_day, last_day = _month_bounds(month)
        logger.info("building_financial_report", month=month)

        jobs = self.job_service.get_all(
            start=first_day,
            end=last_day,
            status=JobStatus.COMPLETED
        )

        revenue = sum(job.amount or 0 for job in jobs)
        team_pay = sum(job.team_pay or 0 for job in jobs)
        profit = revenue - team_pay

        months = sorted(set(self.job_service.get_months()) | {month}, reverse=True)

        report = MonthlyFinancialReport(
            month=month,
            jobs=jobs,
            job_count=len(jobs),
            total_revenue=round(revenue, 2),
            total_team_pay=round(team_pay, 2),
            total_profit=round(profit, 2),
            profit_margin=round(profit / revenue * 100, 1) if revenue else None,
            available_months=months,
        )

        logger.info(
            "financial_report_built",
            month=month,
            jobs=report.job_count,
            revenue=report.total_revenue,
            profit=report.total_profit
        )
        return report

    def pipeline_stats(self) -> PipelineStats:
        """Lead counts per stage, conversion rate and open pipeline value."""
        try:
            result = (
                self.db.table(self.leads_table)
                .select("status, estimated_price")
                .execute()
            )
        except Exception as e:
            logger.error("pipeline_stats_failed", error=str(e))
            raise DatabaseError("select", str(e))

        leads = result.data or []
        statuses = [(row.get("status") or LeadStatus.NEW.value).lower() for row in leads]

        total = len(leads)
        won = statuses.count(LeadStatus.WON.value)
        active = {s.value for s in ACTIVE_STATUSES}
        pipeline_value = sum(
            row.get("estimated_price") or 0
            for row, status in zip(leads, statuses)
            if status in active
        )

        return PipelineStats(
            total_leads=total,
            won_leads=won,
            conversion_rate=int(won * 100 / total + 0.5) if total else 0,
            pipeline_value=round(float(pipeline_value), 2),
            by_status=[
                StatusCount(status=s.value, label=STATUS_LABELS[s], count=statuses.count(s.value))
                for s in LeadStatus
            ],
        )


# Singleton instance for convenience
_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    """Get or create ReportService instance."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
