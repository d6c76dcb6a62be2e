"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
import logging

from qrinstruct.config import settings
from qrinstruct.database import (
    AsyncSessionLocal,
    test_database_connection,
    close_db_connection,
    utcnow,
)
from qrinstruct.routers import properties_router, items_router, qrcodes_router, content_router
from qrinstruct.utils.exceptions import APIException
from qrinstruct.services.error_handler import ErrorHandlerService
from qrinstruct.services.demo_user import ensure_demo_user
from qrinstruct.middleware import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")
    elif settings.is_development:
        try:
            async with AsyncSessionLocal() as session:
                if await ensure_demo_user(session):
                    logger.info("Demo user seeded")
        except (APIException, SQLAlchemyError) as e:
            logger.error(f"Could not seed demo user: {e}")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Property managers register rental properties, attach items to them and
    generate QR codes that open mobile-friendly instruction pages for guests.

    ## Identity

    Every request runs as the demo user. The optional `X-Demo-User` header may
    carry the demo user's id; any other value is rejected with 401.

    ## Public content

    `/api/content/{qr_code}` is public. Each successful resolution counts one scan.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Properties", "description": "Rental properties owned by the current user"},
        {"name": "Items", "description": "Appliances and fixtures placed in properties"},
        {"name": "QR Codes", "description": "QR code generation, status and downloads"},
        {"name": "Content", "description": "Public pages behind scanned QR codes"},
        {"name": "Health", "description": "Service health"},
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time", "Content-Disposition"],
)

app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=settings.slow_request_threshold,
    enable_detailed_logging=settings.debug,
)

app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(items_router, prefix=settings.api_prefix)
app.include_router(qrcodes_router, prefix=settings.api_prefix)
app.include_router(content_router, prefix=settings.api_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe; does not touch the database."""
    return {
        "status": "OK",
        "timestamp": utcnow().isoformat(),
        "service": settings.service_name,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "qrinstruct.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
