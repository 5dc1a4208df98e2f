"""
Middleware for CORS, security, request logging and upload size
"""

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import Settings

# Use a custom logger name instead of "uvicorn.access" to avoid conflicts
logger = logging.getLogger("app.middleware")


def add_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Add CORS middleware to FastAPI app.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Requested-With",
            "Accept",
            "Origin",
            "User-Agent"
        ],
        max_age=600,  # 10 minutes
    )


def add_security_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Add trusted host middleware to FastAPI app.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    if settings.debug:
        # In debug mode, allow all hosts
        allowed_hosts = ["*"]
    else:
        # Deployment hostnames come from ALLOWED_HOSTS_STR
        allowed_hosts = settings.allowed_hosts

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=allowed_hosts
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url.path}")

        response: Response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Response: {response.status_code} | "
            f"Time: {process_time:.4f}s | "
            f"Size: {response.headers.get('content-length', 'unknown')} bytes"
        )

        # Add performance headers
        response.headers["X-Process-Time"] = str(process_time)

        return response


def add_request_logging_middleware(app: FastAPI) -> None:
    """
    Add request logging middleware.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(RequestLoggingMiddleware)


def add_file_size_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Reject multipart requests whose declared size exceeds the upload limit.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    max_size = settings.max_file_size_mb * 1024 * 1024

    class FileSizeMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            content_type = request.headers.get("content-type", "")
            if request.method in ("POST", "PATCH") and content_type.startswith("multipart/form-data"):
                content_length = request.headers.get("content-length")
                if content_length and content_length.isdigit() and int(content_length) > max_size:
                    return JSONResponse(
                        status_code=413,
                        content={
                            "statusCode": 413,
                            "message": f"File too large. Maximum size: {settings.max_file_size_mb}MB",
                            "success": False,
                            "errors": []
                        }
                    )

            return await call_next(request)

    app.add_middleware(FileSizeMiddleware)
