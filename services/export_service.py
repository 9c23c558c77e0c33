"""
Export service: monthly financial report as CSV or Excel.
"""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side
import pandas as pd
import structlog

from models.report import MonthlyFinancialReport

logger = structlog.get_logger(__name__)

EXPORT_COLUMNS = ["Date", "Team", "Amount Charged", "Team Pay", "Profit", "Status"]


def report_filename(month: str, extension: str) -> str:
    return f"cleaning_report_{month}.{extension}"


class ExportService:
    """Service for generating report downloads."""

    def _rows(self, report: MonthlyFinancialReport) -> list[list]:
        return [
            [
                job.date.isoformat(),
                job.team or "-",
                job.amount or 0,
                job.team_pay or 0,
                job.profit,
                job.status.value,
            ]
            for job in report.jobs
        ]

    def generate_financial_csv(self, report: MonthlyFinancialReport) -> bytes:
        """
        One line per completed job.

        Returns:
            UTF-8 encoded CSV
        """
        df = pd.DataFrame(self._rows(report), columns=EXPORT_COLUMNS)
        logger.info("financial_csv_generated", month=report.month, rows=len(df))
        return df.to_csv(index=False).encode("utf-8")

    def generate_financial_excel(self, report: MonthlyFinancialReport) -> BytesIO:
        """
        Job lines followed by a totals row.

        Returns:
            BytesIO containing the Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = report.month

        bold_font = Font(bold=True)
        title_font = Font(bold=True, size=14)
        thin_border = Border(bottom=Side(style="thin", color="000000"))

        ws.column_dimensions["A"].width = 14
        ws.column_dimensions["B"].width = 20
        for col in ("C", "D", "E"):
            ws.column_dimensions[col].width = 16
        ws.column_dimensions["F"].width = 12

        ws["A1"] = f"Monthly Report {report.month}"
        ws["A1"].font = title_font

        header_row = 3
        for idx, name in enumerate(EXPORT_COLUMNS, start=1):
            cell = ws.cell(row=header_row, column=idx, value=name)
            cell.font = bold_font
            cell.border = thin_border

        row = header_row + 1
        for line in self._rows(report):
            for idx, value in enumerate(line, start=1):
                cell = ws.cell(row=row, column=idx, value=value)
                if idx in (3, 4, 5):
                    cell.number_format = "#,##0.00"
            row += 1

        row += 1
        ws.cell(row=row, column=1, value="TOTAL").font = bold_font
        for idx, value in ((3, report.total_revenue), (4, report.total_team_pay), (5, report.total_profit)):
            cell = ws.cell(row=row, column=idx, value=value)
            cell.font = bold_font
            cell.number_format = "#,##0.00"
            cell.border = thin_border

        logger.info(
            "financial_excel_generated",
            month=report.month,
            rows=report.job_count,
            revenue=report.total_revenue
        )

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output


def get_export_service() -> ExportService:
    return ExportService()
