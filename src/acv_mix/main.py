"""
FastAPI application for the ACV mix service.

Wires the dataset router, CORS, request correlation, Prometheus exposition
and the error envelopes. Data routes never return partial results: any
``AcvMixException`` raised while computing becomes a single 500 response
naming the failing dataset.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.models import ErrorResponse, HealthCheckResponse, ValidationErrorResponse
from .api.router import router as datasets_router
from .config.models import MixConfig
from .config.settings import load_config_with_fallback
from .shared.dependencies import check_data_sources_health, get_config
from .shared.exceptions import AcvMixException, DataSourceError, InvalidRecordError
from .shared.logging_config import configure_structured_logging
from .shared.logging_utils import StructuredLogger, get_structured_logger

logger = logging.getLogger(__name__)

APP_NAME = "ACV Mix API"
APP_VERSION = __version__
APP_DESCRIPTION = """
**ACV Mix API** serves won-deal mix figures for the sales pipeline dashboard.

## Datasets
Four datasets are computed from exported pipeline records on every request:
- **customerTypes**: grouped by `Cust_Type`
- **industries**: grouped by `Acct_Industry`
- **acvRanges**: grouped by `ACV_Range`
- **teams**: grouped by `Team`

Each dataset is grouped by `closed_fiscal_quarter` and category, with summed
count and ACV and each group's share of the dataset's total ACV.

## Consistency
The response is all four datasets or an error. Totals and percentages are
computed here once; clients should display them rather than recompute them.
"""

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = await get_config()
    configure_structured_logging(level=config.logging.level)

    logger.info(f"{APP_NAME} v{APP_VERSION} reading from {config.paths.data_dir}")

    sources = await check_data_sources_health()
    if sources["status"] != "healthy":
        # Serve anyway; /api/data reports the failure per request
        logger.warning(f"Data sources not ready: {sources}")

    yield

    logger.info(f"{APP_NAME} stopped")


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    lifespan=lifespan,
)

# CORS origins are fixed at import time; ALLOWED_ORIGINS overrides the file
_startup_config = load_config_with_fallback()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_startup_config.server.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


# ================================
# EXCEPTION HANDLERS
# ================================


def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error, message=message, details=details, timestamp=datetime.now(UTC)
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Also covers the router's own 404 and 405 for unknown routes
    return _error_response(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report each invalid request field."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.errors()}")

    body = ValidationErrorResponse(
        error="VALIDATION_ERROR",
        message="Request validation failed",
        field_errors=[
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ],
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(mode="json"),
    )


@app.exception_handler(AcvMixException)
async def data_exception_handler(request: Request, exc: AcvMixException):
    """Turn a source or aggregation failure into one 500 for the whole response."""
    if isinstance(exc, DataSourceError):
        error, message = "DATA_SOURCE_ERROR", "Error reading source data"
    elif isinstance(exc, InvalidRecordError):
        error, message = "INVALID_RECORD", "Error processing data"
    else:
        error, message = "PROCESSING_ERROR", "Error processing data"

    details = {"exception_type": type(exc).__name__}
    dataset = getattr(exc, "dataset", None)
    if dataset:
        details["dataset"] = dataset

    logger.error(f"{request.url.path} failed ({error}): {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, error, message, details
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.url.path}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        {"exception_type": type(exc).__name__},
    )


# ================================
# MIDDLEWARE
# ================================


@app.middleware("http")
async def correlation_middleware(request: Request, call_next):
    """Tag the request with a correlation ID and log its outcome."""
    correlation_id = (
        request.headers.get(CORRELATION_HEADER)
        or StructuredLogger.generate_correlation_id()
    )
    request.state.correlation_id = correlation_id
    request_log = get_structured_logger(__name__, correlation_id)

    start = time.perf_counter()
    response = await call_next(request)

    request_log.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


# ================================
# CORE ROUTES
# ================================


@app.get("/api", summary="API index")
async def root():
    return {
        "message": f"Welcome to {APP_NAME}",
        "version": APP_VERSION,
        "docs_url": "/docs",
        "health_url": "/health",
        "data_url": "/api/data",
        "datasets_url": "/api/datasets",
        "timestamp": datetime.now(UTC),
    }


@app.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Configuration and source file availability",
)
async def health_check():
    """
    Report configuration and source file health.

    Missing source files make the service ``degraded`` rather than
    ``unhealthy``: the process is up, but ``/api/data`` will fail until the
    files appear.
    """
    try:
        await get_config()
        configuration = {"status": "healthy", "message": "Configuration loaded"}
    except Exception as e:
        configuration = {"status": "unhealthy", "error": str(e)}

    data_sources = await check_data_sources_health()

    if configuration["status"] != "healthy":
        overall = "unhealthy"
    elif data_sources["status"] != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthCheckResponse(
        status=overall,
        timestamp=datetime.now(UTC),
        version=APP_VERSION,
        checks={"configuration": configuration, "data_sources": data_sources},
    )


@app.get("/version", summary="Application version")
async def get_version():
    return {"name": APP_NAME, "version": APP_VERSION, "timestamp": datetime.now(UTC)}


@app.get("/metrics", summary="Prometheus metrics", tags=["Monitoring"])
async def prometheus_metrics():
    """Response and per-dataset aggregation metrics in exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/api/config", summary="Effective configuration")
async def get_current_config(config: MixConfig = Depends(get_config)):
    return config.model_dump(by_alias=True)


app.include_router(datasets_router)


def run_dev_server(host: str | None = None, port: int | None = None, reload: bool = False):
    """Run the service under uvicorn, defaulting to the configured address."""
    import uvicorn

    uvicorn.run(
        "acv_mix.main:app",
        host=host or _startup_config.server.host,
        port=port or _startup_config.server.port,
        reload=reload,
        log_level=_startup_config.logging.level.lower(),
    )


if __name__ == "__main__":
    run_dev_server()
