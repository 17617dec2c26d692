"""
CareSpace API

FastAPI application entry point that ties all components together.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carespace import __version__
from carespace.api.envelope import error_body, failure
from carespace.api.routes import (
    availability,
    bookings,
    chat,
    chatbot,
    doctors,
    health,
    spaces,
    stats,
)
from carespace.config import settings
from carespace.core.errors import (
    CareSpaceError,
    Conflict,
    InvalidInput,
    NotBookable,
    NotFound,
    PersistenceUnconfirmed,
)
from carespace.infra.store import init_store


def setup_logging() -> None:
    """Configure logging based on environment."""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Loads the entity store on startup. A missing data file leaves its
    collection empty; startup never fails on data.
    """
    # === STARTUP ===
    setup_logging()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")

    health.set_start_time()

    store = init_store()
    logger.info(f"Entity store ready: {store.stats()}")

    logger.info(f"Application ready at http://{settings.host}:{settings.port}")

    yield

    # === SHUTDOWN ===
    logger.info("Shutdown complete")


app = FastAPI(
    title="CareSpace API",
    description="""
    Matches doctors to rooms in a medical office.

    ## Features
    - Doctor availability from schedule entries
    - Space availability from existing bookings, filtered by activity
    - Suggested doctor/space matches
    - Conflict-free space bookings
    - Conversational availability queries
    """,
    version=__version__,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_for(exc: CareSpaceError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(exc, InvalidInput):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, NotBookable):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, Conflict):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(CareSpaceError)
async def domain_exception_handler(
    request: Request,
    exc: CareSpaceError,
) -> JSONResponse:
    """Map domain errors to status codes and the error envelope."""
    status_code = status_for(exc)
    content = error_body(exc)

    if isinstance(exc, Conflict):
        content["conflicts"] = [b.to_dict() for b in exc.conflicts]
    elif isinstance(exc, PersistenceUnconfirmed) and exc.booking is not None:
        content["data"] = exc.booking.to_dict()

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")

    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content=failure(
            "Validation error",
            "Request parameters failed validation",
            detail=[
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        ),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    # Don't expose internal errors in production
    message = str(exc) if settings.is_development else "Internal server error"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=failure("Internal server error", message),
    )


@app.middleware("http")
async def request_timing_middleware(request: Request, call_next):
    """Log request duration in debug mode."""
    start_time = time.time()

    try:
        response = await call_next(request)
        return response
    finally:
        if settings.debug:
            duration = time.time() - start_time
            logger.debug(
                f"{request.method} {request.url.path} "
                f"completed in {duration:.3f}s"
            )


API_PREFIX = "/api"

for module in (health, doctors, spaces, bookings, availability, chatbot, chat, stats):
    app.include_router(module.router, prefix=API_PREFIX)
app.include_router(doctors.calendars_router, prefix=API_PREFIX)


@app.get("/", tags=["Root"])
async def root() -> dict:
    """
    Root endpoint.

    Returns basic API information.
    """
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
        "docs": "/docs" if settings.is_development else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "carespace.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
