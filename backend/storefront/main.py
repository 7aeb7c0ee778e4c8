"""
Storefront Backend Application.

FastAPI application with seller-owned product catalog, image uploads,
user accounts and shopping carts.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from storefront.api import router as api_router
from storefront.core.config import settings
from storefront.core.database import close_db, init_db
from storefront.core.exceptions import BlobStoreError, Internal, StorefrontError
from storefront.core.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings.log_level)
    logger.info("Starting Storefront Backend...")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    if settings.storage_backend == "local":
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        logger.info(f"Storing images in {Path(settings.upload_dir).resolve()}")
    else:
        logger.info(f"Storing images with {settings.storage_backend}")

    logger.info("Storefront Backend started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Storefront Backend...")

    # Close database
    await close_db()

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Storefront Backend

    ## Features

    - **Accounts**: Buyer and seller registration with token login
    - **Products**: Seller-owned catalog with image uploads
    - **Cart**: Per-user shopping cart

    ## Documentation

    - [API Docs](/docs) - Interactive Swagger UI
    - [ReDoc](/redoc) - Alternative documentation
    """,
    openapi_url=f"{settings.api_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Error handlers ====================


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> ORJSONResponse:
    """Render application errors with their status and message."""
    return ORJSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """Report malformed requests as 400."""
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Invalid request",
            "errors": jsonable_encoder(exc.errors(), exclude={"input", "ctx"}),
        },
    )


@app.exception_handler(SQLAlchemyError)
@app.exception_handler(BlobStoreError)
async def backend_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Report store and storage failures as 500."""
    logger.opt(exception=exc).error(f"{request.method} {request.url.path} failed: {exc}")
    return ORJSONResponse(
        status_code=Internal.status_code,
        content={"message": Internal.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Last-resort handler for unexpected errors."""
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return ORJSONResponse(
        status_code=Internal.status_code,
        content={"message": Internal.message},
    )


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)

# Locally stored product images
if settings.storage_backend == "local":
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


@app.get("/", tags=["System"])
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "message": "Server running successfully!",
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
