"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen import __version__
from pagegen.api.deps import get_db
from pagegen.api.errors import pagegen_error_handler
from pagegen.api.middleware import RequestContextMiddleware
from pagegen.api.routes import admin, auth, documents, generate
from pagegen.common.config import settings
from pagegen.common.database import get_engine
from pagegen.common.errors import PageGenError
from pagegen.common.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.log_level)
    settings.validate_jwt_secret()

    # Destructive admin routes are open when auth is disabled
    if not settings.auth_required:
        logger.warning(
            "auth_disabled",
            detail="AUTH_REQUIRED=false: delete and generate routes are open without authentication. "
            "Set AUTH_REQUIRED=true in production.",
        )

    yield

    # Shutdown
    await get_engine().dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="pagegen API",
        description="Generate and maintain documents from CSV rows and a template document",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware (outermost first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(PageGenError, pagegen_error_handler)

    # Routes
    app.include_router(generate.router, prefix="/api", tags=["generate"])
    app.include_router(documents.router, prefix="/api", tags=["documents"])
    app.include_router(admin.router, prefix="/api", tags=["admin"])
    app.include_router(auth.router, prefix="/api", tags=["auth"])

    @app.get("/api/health")
    async def health(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            postgres = "up"
        except Exception:
            logger.warning("health_check_pg_failed", exc_info=True)
            postgres = "down"

        status_code = 200 if postgres == "up" else 503
        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if postgres == "up" else "unhealthy",
                "services": {"postgres": postgres},
                "auth_required": settings.auth_required,
            },
        )

    return app


app = create_app()
