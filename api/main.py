"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from api.routes import health, sources, stations, imports, waveforms, stats
from api.fdsnws import station, availability, dataselect
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.database import async_session_maker, init_models, seed_sources
from core.exceptions import (
    PortalError,
    UpstreamError,
    InvalidQueryError,
    ResourceNotFoundError,
)
from core.logging import setup_logging
from schemas.api import ErrorResponse
import logging

setup_logging()

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
FDSNWS_PREFIX = "/fdsnws"

# Create FastAPI app
app = FastAPI(
    title="FDSN Portal API",
    description="Aggregates FDSN station metadata from upstream data centres and re-serves it",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)


# Include routers
app.include_router(health.router, prefix=API_PREFIX)
app.include_router(sources.router, prefix=API_PREFIX)
app.include_router(stations.router, prefix=API_PREFIX)
app.include_router(imports.router, prefix=API_PREFIX)
app.include_router(waveforms.router, prefix=API_PREFIX)
app.include_router(stats.router, prefix=API_PREFIX)

app.include_router(station.router, prefix=FDSNWS_PREFIX)
app.include_router(availability.router, prefix=FDSNWS_PREFIX)
app.include_router(dataselect.router, prefix=FDSNWS_PREFIX)


# ============================================================================
# Error handling
# ============================================================================

def status_for(error: PortalError):
    """HTTP status and short error label for a portal exception"""
    if isinstance(error, InvalidQueryError):
        return 400, "Invalid request"
    if isinstance(error, ResourceNotFoundError):
        return 404, "Resource not found"
    if isinstance(error, UpstreamError):
        return 502, "Upstream error"
    return 500, "Internal error"


def error_response(request: Request, status_code: int, error: str, detail: str):
    """Plain text for the FDSN web services, ErrorResponse JSON elsewhere"""
    if request.url.path.startswith(FDSNWS_PREFIX):
        body = f"Error {status_code}: {error}"
        if detail:
            body += f"\n{detail}"
        return PlainTextResponse(body + "\n", status_code=status_code)

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(error=error, detail=detail))
    )


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    status_code, label = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {str(exc)}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(request, status_code, label, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(request, 400, "Invalid request", details)


# ============================================================================
# Lifecycle
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting FDSN Portal API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL}")

    await init_models()
    async with async_session_maker() as session:
        created = await seed_sources(session)
    logger.info(f"Startup complete ({created} preset sources seeded)")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down FDSN Portal API")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "FDSN Portal API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
        "endpoints": {
            "sources": f"{API_PREFIX}/sources",
            "stations": f"{API_PREFIX}/stations",
            "import": f"{API_PREFIX}/import/stations",
            "stats": f"{API_PREFIX}/stats",
            "fdsnws_station": f"{FDSNWS_PREFIX}/station/1/query",
            "fdsnws_availability": f"{FDSNWS_PREFIX}/availability/1/query",
            "fdsnws_dataselect": f"{FDSNWS_PREFIX}/dataselect/1/query"
        }
    }
