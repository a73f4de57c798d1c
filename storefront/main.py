import logging
import uuid
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.settings import AppSettings, get_settings

from .api import notifications, session, wishlist
from .schemas.error import (
    ErrorResponse,
    ErrorType,
    InvalidProductErrorResponse,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from .schemas.wishlist import InvalidProductIdError
from .services.wishlist_service import open_wishlist_resources

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=get_settings().log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log a warning banner for optional configuration left unset."""

    warnings = (active_settings or get_settings()).optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the wishlist store once for the whole application session."""
    validate_environment()

    app_settings = get_settings()
    logger.info("=" * 60)
    logger.info("Storefront Wishlist API - Startup")
    logger.info("=" * 60)
    logger.info(f"Remote backend: {app_settings.wishlist_remote_backend}")
    logger.info(f"Local cache: {app_settings.wishlist_cache_path or 'in-memory'}")

    resources = await open_wishlist_resources(app_settings)
    app.state.wishlist = resources
    logger.info(
        "Wishlist bootstrapped with %d cached entries", len(resources.store.entries)
    )

    try:
        yield
    finally:
        logger.info("Shutting down Storefront Wishlist API")
        await resources.aclose()


app = FastAPI(
    title="Storefront Wishlist API",
    version="0.1.0",
    description="Wishlist synchronization between local storage and the remote store.",
    lifespan=lifespan,
    redirect_slashes=False,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_json(request: Request, error: ErrorResponse) -> JSONResponse:
    """Stamp request metadata onto ``error`` and render it."""
    error.request_id = _request_id(request)
    error.path = str(request.url.path)
    return JSONResponse(status_code=error.status_code, content=error.model_dump(mode="json"))


def _validation_details(exc: RequestValidationError | ValidationError) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies such as a login without an identity."""
    errors = _validation_details(exc)

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        _request_id(request),
        request.url.path,
        len(errors),
    )

    return _error_json(
        request,
        ValidationErrorResponse(
            message="Request validation failed",
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            errors=errors,
        ),
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised inside the store."""
    errors = _validation_details(exc)

    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        _request_id(request),
        request.url.path,
        len(errors),
    )

    return _error_json(
        request,
        ValidationErrorResponse(
            message="Data validation failed",
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            errors=errors,
        ),
    )


@app.exception_handler(InvalidProductIdError)
async def invalid_product_exception_handler(request: Request, exc: InvalidProductIdError):
    """Handle blank product identifiers rejected by the wishlist store."""
    logger.warning(
        "Rejected product id %r for request %s to %s",
        exc.product_id,
        _request_id(request),
        request.url.path,
    )

    return _error_json(
        request,
        InvalidProductErrorResponse(
            message="Invalid product identifier",
            detail=str(exc),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            product_id=exc.product_id if isinstance(exc.product_id, str) else None,
        ),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        _request_id(request),
        request.url.path,
        type(exc).__name__,
    )

    return _error_json(
        request,
        ErrorResponse(
            error_type=ErrorType.INTERNAL_ERROR,
            message="Internal server error",
            detail=f"An unexpected error occurred: {type(exc).__name__}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            retry_after=5,
        ),
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(wishlist.router, prefix="/wishlist", tags=["wishlist"])
app.include_router(session.router, prefix="/session", tags=["session"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
