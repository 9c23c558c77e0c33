"""
Business logic services.

Each service handles one domain area.
"""

from services.lead_service import LeadService, get_lead_service
from services.job_service import JobService, get_job_service
from services.report_service import ReportService, get_report_service
from services.export_service import ExportService, get_export_service
from services.lead_import_service import (
    LeadImportService,
    ImportSession,
    get_lead_import_service,
)
from services.lead_sink import LeadSink, SupabaseLeadSink
from services.column_mapper import MappingRule, DEFAULT_MAPPING_RULES, suggest_mapping

__all__ = [
    "LeadService",
    "get_lead_service",
    "JobService",
    "get_job_service",
    "ReportService",
    "get_report_service",
    "ExportService",
    "get_export_service",
    "LeadImportService",
    "ImportSession",
    "get_lead_import_service",
    "LeadSink",
    "SupabaseLeadSink",
    "MappingRule",
    "DEFAULT_MAPPING_RULES",
    "suggest_mapping",
]
