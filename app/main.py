"""
Main FastAPI application for VideoTube
"""

import logging
import warnings
from contextlib import asynccontextmanager
from typing import Any, List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings, validate_required_for_production
from app.core.dependencies import verify_temp_directory
from app.core.exceptions import ApiError
from app.core.middleware import (
    add_cors_middleware,
    add_file_size_middleware,
    add_request_logging_middleware,
    add_security_middleware
)
from app.database import close_database, engine, init_database
from app.schemas.common import ApiResponse, ErrorResponse

# Import API routers
from app.api import comments, users, videos

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Suppress bcrypt warnings
warnings.filterwarnings("ignore", message=".*bcrypt version.*", category=UserWarning)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("Starting VideoTube API...")

    for problem in validate_required_for_production(settings):
        logger.warning(f"Configuration: {problem}")

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if not verify_temp_directory(settings):
        logger.error("Temp directory is not accessible")
        raise RuntimeError("Temp directory setup failed")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down VideoTube API...")

    try:
        await close_database()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during database shutdown: {e}")

    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Video sharing backend: users, videos and comments",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


def _error_response(status_code: int, message: str, errors: List[Any] = None) -> JSONResponse:
    body = ErrorResponse(status_code=status_code, message=message, errors=errors or [])
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True))
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Request schema violations are reported as 400 with the field errors.
    """
    logger.warning(f"Request validation failed for {request.method} {request.url.path}: {exc.errors()}")

    errors = [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return _error_response(400, "Request validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Serialize API and HTTP errors into the error envelope.
    """
    if exc.status_code == 401:
        logger.warning(f"Authentication failed for {request.method} {request.url.path}: {exc.detail}")
    elif exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} error for {request.method} {request.url.path}: {exc.detail}")
    elif exc.status_code >= 400:
        logger.warning(f"HTTP {exc.status_code} error for {request.method} {request.url.path}: {exc.detail}")

    errors = exc.errors if isinstance(exc, ApiError) else []
    response = _error_response(exc.status_code, str(exc.detail), errors)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error for {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(500, "Database operation failed")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error for {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(500, "Internal server error")


# Add middleware
add_cors_middleware(app, settings)
add_security_middleware(app, settings)
add_request_logging_middleware(app)
add_file_size_middleware(app, settings)

# Include API routes
app.include_router(
    users.router,
    prefix="/api/v1/users",
    tags=["users"]
)
app.include_router(
    videos.router,
    prefix="/api/v1/videos",
    tags=["videos"]
)
app.include_router(
    comments.router,
    prefix="/api/v1/comments",
    tags=["comments"]
)


@app.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.

    Returns:
        dict: Basic API information
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.version,
        "docs": "/docs",
        "status": "operational"
    }


@app.get("/api/v1/health", response_model=ApiResponse)
async def health_check() -> ApiResponse:
    """
    Health check endpoint.

    Returns:
        ApiResponse: Application health status
    """
    database_connected = True
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database_connected = False

    return ApiResponse(
        status_code=200,
        data={
            "status": "healthy" if database_connected else "unhealthy",
            "version": settings.version,
            "databaseConnected": database_connected
        },
        message="Health check"
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
