"""
ClearFund FastAPI application entry point.

Workflows: evidence review / campaign lifecycle / report resolution → transparency score → API
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clearfund import __version__
from clearfund.config import get_settings
from clearfund.db.session import check_db_connection, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("ClearFund starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
            if "clearfund_test" in get_settings().database_url:
                logger.warning(
                    "App is connected to clearfund_test. "
                    "Use a fresh shell or set DATABASE_URL to clearfund_dev for development."
                )
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        yield
    finally:
        logger.info("ClearFund shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from clearfund.api.transparency import admin_router as transparency_admin_router
    from clearfund.api.transparency import router as transparency_router

    app.include_router(transparency_router, prefix="/api/transparency", tags=["transparency"])
    app.include_router(
        transparency_admin_router,
        prefix="/api/admin/transparency",
        tags=["transparency-admin"],
    )

    # Internal job endpoints (cron/scripts: token-authenticated)
    from clearfund.api.internal import router as internal_router

    app.include_router(internal_router, tags=["internal"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
