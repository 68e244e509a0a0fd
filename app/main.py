"""Social Media API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, static file serving and lifecycle management, including
the background cleanup of unused uploads.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import CleanupSchedulerEnum, ConfigValidator, get_config_summary, settings
from app.core.i18n import get_request_language, translate
from app.core.logging import setup_logging
from app.database import AsyncSessionLocal, engine
from app.domains.file.storage import UploadStorage
from app.services.file_cleanup_service import build_file_cleanup_scheduler
from models import Base

logger = logging.getLogger(__name__)

STATIC_PREFIXES = ("/images/", "/posts/")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle events."""
    # Startup
    setup_logging()
    logger.info("🚀 Starting Social Media API...")
    if settings.is_production:
        ConfigValidator.validate_required_settings()
    logger.info(f"⚙️ Configuration: {get_config_summary()}")

    # Development mode: Auto-create tables if they don't exist
    # Production: Use Alembic migrations (alembic upgrade head)
    if settings.is_development:
        logger.info("📝 Development mode: Creating/updating database tables...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables created/verified")
    else:
        logger.info("🏭 Use 'alembic upgrade head' to manage database schema")

    scheduler = None
    if settings.file_cleanup_scheduler == CleanupSchedulerEnum.inprocess:
        scheduler = build_file_cleanup_scheduler(AsyncSessionLocal, app.state.upload_storage)
        scheduler.start()
    app.state.file_cleanup_scheduler = scheduler

    yield

    # Shutdown
    logger.info("🛑 Shutting down Social Media API...")
    if scheduler:
        await scheduler.stop()
    await engine.dispose()
    logger.info("✅ Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Social network backend: accounts, posts, comments, likes and image uploads",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    storage = UploadStorage(settings.profile_path, settings.post_path)
    storage.ensure_folders()
    app.state.upload_storage = storage

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    # Serve uploaded images
    app.mount("/images", StaticFiles(directory=storage.profile_dir), name="images")
    app.mount("/posts", StaticFiles(directory=storage.post_dir), name="posts")

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        if request.url.path.startswith(STATIC_PREFIXES) and response.status_code == 200:
            response.headers["Cache-Control"] = f"public, max-age={settings.static_max_age}"
        return response


def error_response(request: Request, status_code: int, message: str, error_code: str, details=None):
    """Render an error with its message and field errors in the request language."""
    language = get_request_language(request)
    if isinstance(details, dict):
        details = {
            field: translate(value, language) if isinstance(value, str) else value
            for field, value in details.items()
        }

    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": translate(message, language),
            "error_code": error_code,
            "details": details or None,
            "path": request.url.path,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        elif exc.status_code == 404:
            message = "route_not_found"
            error_code = "NOT_FOUND"
            details = None
        else:
            message = str(exc.detail) if exc.detail else "internal_server_error"
            error_code = "HTTP_ERROR"
            details = None

        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path} failed: {message}")

        return error_response(request, exc.status_code, message, error_code, details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Field name -> first error message
        details = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", []) if part != "body"]
            field = ".".join(loc) or "body"
            details.setdefault(field, str(error.get("msg", "Validation error")))

        return error_response(request, 400, "data_validation_failure", "VALIDATION_ERROR", details)


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.admin.controller import router as admin_router
    from app.domains.comment.controller import router as comment_router
    from app.domains.file.controller import router as file_router
    from app.domains.like.controller import router as like_router
    from app.domains.post.controller import router as post_router
    from app.domains.user.controller import router as user_router

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning(f"Database health check failed: {str(e)}")
            db_status = "unhealthy"

        scheduler = getattr(app.state, "file_cleanup_scheduler", None)
        return JSONResponse(
            status_code=200 if db_status == "healthy" else 503,
            content={
                "status": "healthy" if db_status == "healthy" else "degraded",
                "version": settings.version,
                "environment": settings.environment.value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "services": {
                    "database": db_status,
                    "file_cleanup": settings.file_cleanup_scheduler.value,
                    "file_cleanup_running": bool(scheduler and scheduler.is_running),
                },
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "api_prefix": settings.api_prefix,
            "docs_url": "/docs" if settings.is_development else None,
        }

    # Include domain routers
    app.include_router(user_router)
    app.include_router(post_router)
    app.include_router(comment_router)
    app.include_router(like_router)
    app.include_router(file_router)
    app.include_router(admin_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
