"""
Custom exceptions module.

All errors derive from AppError and serialize with to_dict().
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Leads
    LeadNotFoundError,
    JobNotFoundError,

    # CSV import
    CsvParseError,
    MissingRequiredFieldsError,
    UnknownColumnError,
    UnknownFieldError,
    ImportSessionNotFoundError,
    InvalidImportPhaseError,
    ImportBatchError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Leads
    "LeadNotFoundError",
    "JobNotFoundError",

    # CSV import
    "CsvParseError",
    "MissingRequiredFieldsError",
    "UnknownColumnError",
    "UnknownFieldError",
    "ImportSessionNotFoundError",
    "InvalidImportPhaseError",
    "ImportBatchError",
]
