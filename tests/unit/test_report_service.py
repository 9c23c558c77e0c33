"""
Unit tests for ReportService and ExportService.

Run: pytest tests/unit/test_report_service.py -v
"""

import csv
from datetime import date
from io import StringIO

import pytest
from openpyxl import load_workbook

from services.report_service import ReportService, current_month
from services.export_service import ExportService, EXPORT_COLUMNS, report_filename
from exceptions import ValidationError
from tests.factories import JobFactory, LeadFactory


@pytest.fixture
def report_service(mock_db):
    return ReportService()


@pytest.fixture
def october_jobs(mock_supabase):
    mock_supabase.set_table_data("jobs", [
        JobFactory.create(job_date=date(2026, 10, 3), amount=200, team_pay=80, team="Team A"),
        JobFactory.create(job_date=date(2026, 10, 17), amount=300, team_pay=100, team="Team B"),
        JobFactory.create(job_date=date(2026, 10, 25), amount=250, team_pay=90, status="scheduled"),
        JobFactory.create(job_date=date(2026, 9, 12), amount=150, team_pay=60),
    ])


class TestMonthlyFinancials:
    """Tests for ReportService.monthly_financials()"""

    def test_totals_over_completed_jobs(self, report_service, october_jobs):
        report = report_service.monthly_financials("2026-10")

        assert report.job_count == 2
        assert report.total_revenue == 500
        assert report.total_team_pay == 180
        assert report.total_profit == 320
        assert report.profit_margin == 64.0
        assert report.available_months == ["2026-10", "2026-09"]

    def test_month_without_jobs(self, report_service, october_jobs):
        report = report_service.monthly_financials("2026-11")

        assert report.job_count == 0
        assert report.total_revenue == 0
        assert report.profit_margin is None
        assert report.available_months[0] == "2026-11"

    def test_missing_team_pay_counts_as_zero(self, report_service, mock_supabase):
        mock_supabase.set_table_data("jobs", [
            JobFactory.create(job_date=date(2026, 10, 3), amount=120, team_pay=None),
        ])

        report = report_service.monthly_financials("2026-10")

        assert report.total_profit == 120
        assert report.profit_margin == 100.0

    def test_reads_only_the_requested_month(self, report_service, mock_supabase):
        mock_supabase.set_table_data("jobs", [
            JobFactory.create(job_date=date(2026, 9, 30), amount=999),
            JobFactory.create(job_date=date(2026, 10, 1), amount=100, team_pay=40),
            JobFactory.create(job_date=date(2026, 10, 31), amount=200, team_pay=60),
            JobFactory.create(job_date=date(2026, 11, 1), amount=999),
        ])

        report = report_service.monthly_financials("2026-10")

        assert report.job_count == 2
        assert report.total_revenue == 300
        assert report.available_months == ["2026-11", "2026-10", "2026-09"]
        assert mock_supabase.table("jobs").select_calls == ["*", "date"]

    def test_february_bounds(self, report_service, mock_supabase):
        mock_supabase.set_table_data("jobs", [
            JobFactory.create(job_date=date(2028, 2, 29), amount=150),
            JobFactory.create(job_date=date(2028, 3, 1), amount=999),
        ])

        report = report_service.monthly_financials("2028-02")

        assert report.total_revenue == 150

    def test_defaults_to_current_month(self, report_service, mock_supabase):
        mock_supabase.set_table_data("jobs", [])

        report = report_service.monthly_financials()

        assert report.month == current_month()

    @pytest.mark.parametrize("month", ["2026-13", "October", "2026-1"])
    def test_invalid_month(self, report_service, month):
        with pytest.raises(ValidationError) as exc_info:
            report_service.monthly_financials(month)

        assert exc_info.value.code == "INVALID_MONTH"


class TestPipelineStats:
    """Tests for ReportService.pipeline_stats()"""

    def test_counts_and_value(self, report_service, mock_supabase):
        mock_supabase.set_table_data("leads", [
            LeadFactory.create(status="new", estimated_price=100),
            LeadFactory.create(status="contacted", estimated_price=200),
            LeadFactory.create(status="won", estimated_price=300),
            LeadFactory.create(status="lost", estimated_price=50),
            LeadFactory.create(status=None, estimated_price=None),
        ])

        stats = report_service.pipeline_stats()

        assert stats.total_leads == 5
        assert stats.won_leads == 1
        assert stats.conversion_rate == 20
        assert stats.pipeline_value == 300
        counts = {s.status: s.count for s in stats.by_status}
        assert counts == {
            "new": 2, "contacted": 1, "quoted": 0,
            "scheduled": 0, "won": 1, "lost": 1,
        }

    def test_conversion_rounds_half_up(self, report_service, mock_supabase):
        mock_supabase.set_table_data("leads", [
            LeadFactory.create(status="won"),
        ] + LeadFactory.create_batch(7, status="new"))

        # 1/8 = 12.5%
        assert report_service.pipeline_stats().conversion_rate == 13

    def test_no_leads(self, report_service, mock_supabase):
        mock_supabase.set_table_data("leads", [])

        stats = report_service.pipeline_stats()

        assert stats.total_leads == 0
        assert stats.conversion_rate == 0
        assert stats.pipeline_value == 0


# ===================
# EXPORT
# ===================

class TestExportService:
    """Tests for the CSV and Excel downloads."""

    @pytest.fixture
    def report(self, report_service, october_jobs):
        return report_service.monthly_financials("2026-10")

    def test_filename(self):
        assert report_filename("2026-10", "xlsx") == "cleaning_report_2026-10.xlsx"

    def test_csv_has_one_line_per_job(self, report):
        content = ExportService().generate_financial_csv(report).decode("utf-8")

        rows = list(csv.reader(StringIO(content)))

        assert rows[0] == EXPORT_COLUMNS
        assert len(rows) == 3
        teams = sorted(r[1] for r in rows[1:])
        assert teams == ["Team A", "Team B"]
        profits = sorted(float(r[4]) for r in rows[1:])
        assert profits == [120.0, 200.0]

    def test_excel_layout(self, report):
        output = ExportService().generate_financial_excel(report)

        ws = load_workbook(output).active

        assert ws.title == "2026-10"
        assert ws["A1"].value == "Monthly Report 2026-10"
        assert [ws.cell(row=3, column=i).value for i in range(1, 7)] == EXPORT_COLUMNS
        # Two job lines, a blank row, then totals
        assert ws["A7"].value == "TOTAL"
        assert ws["C7"].value == 500
        assert ws["D7"].value == 180
        assert ws["E7"].value == 320
