"""FastAPI application entry point.

Marketplace Admin API - price automation rules and digital stock entry.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace_admin.routes import api_router
from marketplace_admin.services.backend_client import BackendError, close_http_client, init_http_client
from marketplace_admin.settings import get_settings
from marketplace_admin.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    await init_http_client()

    # Query cache is optional (skip in tests if no Redis available)
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed, query cache disabled")

    yield

    # Shutdown
    await close_redis()
    await close_http_client()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Admin API for price automation rules and digital stock",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BackendError)
    async def backend_exception_handler(request: Request, exc: BackendError) -> JSONResponse:
        """Backend failures keep their status; network errors surface as 502."""
        status_code = exc.status if 400 <= exc.status < 600 else 502
        errors = exc.field_errors
        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": "BACKEND_ERROR",
                    "message": exc.message,
                    "detail": {"errors": errors} if errors else None,
                }
            },
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if settings.debug else "Internal server error",
                    "detail": None,
                }
            },
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "marketplace_admin.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
