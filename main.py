"""
Star Cleaning CRM API.

Run locally with `python main.py` or `uvicorn main:app --reload`.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings, check_connection
from exceptions import AppError

API_VERSION = "0.1.0"


def configure_logging() -> None:
    """structlog on top of stdlib logging; JSON lines in production."""
    logging.basicConfig(format="%(message)s", level=settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the database state and import tuning on startup."""
    logger.info(
        "crm_api_starting",
        environment=settings.environment,
        import_batch_size=settings.import_batch_size,
        import_batch_delay_ms=settings.import_batch_delay_ms
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info("database_ready", leads=db_status["leads_count"])
    else:
        logger.error("database_unreachable", error=db_status.get("error"))

    yield

    logger.info("crm_api_stopped")


app = FastAPI(
    title="Star Cleaning CRM",
    description="Leads, pipeline, clients, CSV import and financial reports for a cleaning company",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """Liveness plus a lead count from the database."""
    database = check_connection()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": database,
    }


@app.get("/")
async def root():
    """API name, version and entry points."""
    return {
        "name": "Star Cleaning CRM API",
        "version": API_VERSION,
        "docs": "/docs" if settings.debug else None,
        "health": "/health",
        "endpoints": {
            "leads": "/api/leads",
            "clients": "/api/leads/clients",
            "import": "/api/leads/import",
            "financial_report": "/api/reports/financial",
            "financial_export": "/api/reports/financial/export",
            "pipeline": "/api/reports/pipeline",
        },
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Application errors that escaped a route's own handle_error()."""
    logger.warning(
        "app_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything else becomes a 500 in the standard error envelope."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {"error": str(exc)} if settings.debug else {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.imports import router as imports_router
from routes.leads import router as leads_router
from routes.reports import router as reports_router

# Before the leads router, or "import" is read as a lead id
app.include_router(imports_router, prefix="/api/leads/import", tags=["Lead Import"])
app.include_router(leads_router, prefix="/api/leads", tags=["Leads"])
app.include_router(reports_router, tags=["Reports"])  # Paths already absolute


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
