"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.imports import router as imports_router
from routes.leads import router as leads_router
from routes.reports import router as reports_router

__all__ = [
    "imports_router",
    "leads_router",
    "reports_router",
]
