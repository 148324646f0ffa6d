"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as SQLTimeoutError

from mtg_catalog.api import api_router
from mtg_catalog.core.circuit_breaker import clear_all_breakers
from mtg_catalog.core.config import settings
from mtg_catalog.core.exceptions import CatalogError, NotFoundError, UpstreamUnavailable, ValidationError
from mtg_catalog.core.logging import setup_logging

# Setup logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and reset breakers on shutdown."""
    logger.info(
        "Catalog API starting",
        version="1.0.0",
        debug=settings.api_debug,
    )

    yield

    logger.info("Catalog API stopped")
    clear_all_breakers()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="MTG marketplace core - card catalog, price history, search and pricing",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors map straight onto HTTP statuses
ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    UpstreamUnavailable: 503,
}


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.warning("Catalog request failed", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, **{k: str(v) for k, v in exc.context.items()}},
    )


for _error_type in ERROR_STATUS:
    app.add_exception_handler(_error_type, catalog_error_handler)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Last-resort handler; a pool timeout reads as 503, anything else as 500."""
    pool_exhausted = isinstance(exc, SQLTimeoutError)
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        pool_exhausted=pool_exhausted,
    )
    if pool_exhausted:
        return JSONResponse(
            status_code=503,
            content={"detail": "Database busy, retry shortly", "error_type": "pool_exhausted"},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router, prefix="/api")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.debug(
        "Handled request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mtg_catalog.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
