"""
TicketTango API - Main Application Entry Point

An event ticket booking service demonstrating:
- One booking transaction over two storage engines (SQLite file, PostgreSQL)
- A query service that hides placeholder and dialect differences
- Structured logging with request correlation
- Prometheus metrics for booking outcomes and latency
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tickettango.api.middleware import RequestLoggingMiddleware
from tickettango.api.router import api_router
from tickettango.core.config import get_settings
from tickettango.core.errors import StorageError, TicketTangoError
from tickettango.core.logging import get_logger, setup_logging
from tickettango.core.metrics import metrics_endpoint, record_storage_error
from tickettango.db.session import close_storage, open_storage

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Fatal on failure: no traffic without a working store
    app.state.storage = await open_storage(settings)

    yield

    await close_storage(app.state.storage)
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event ticket booking API with a dual-backend booking transaction",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(TicketTangoError)
async def domain_error_handler(request: Request, exc: TicketTangoError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Query failures are reported to the caller, never with engine text."""
    storage = getattr(request.app.state, "storage", None)
    backend = storage.backend if storage is not None else "unknown"
    record_storage_error(backend, "request")
    logger.error("storage_error", operation=request.url.path, backend=backend, error=str(exc))
    error = StorageError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for Docker and load balancers."""
    storage = getattr(request.app.state, "storage", None)
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "backend": storage.backend if storage is not None else None,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
