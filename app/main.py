"""
FastAPI application factory
"""
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.infrastructure.db.session import check_db_connection
from app.infrastructure.db.migrations import run_migrations
from app.api.v1 import subscriptions

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> int:
    """
    Настроить logging по LOG_LEVEL

    Неизвестный уровень -> INFO (с предупреждением)

    Returns:
        Применённый числовой уровень
    """
    level = logging.getLevelName(level_name.upper())
    invalid = not isinstance(level, int)
    if invalid:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)
    if invalid:
        logger.warning("Invalid log level %s, using INFO", level_name)
    return level


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches ALL exceptions including sync routes"""

    async def dispatch(self, request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return Response(content="Internal Server Error", status_code=500)


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    if settings.RUN_MIGRATIONS:
        run_migrations()
    logger.info("Starting server on %s:%s", settings.SERVER_HOST, settings.SERVER_PORT)
    yield


def create_app() -> FastAPI:
    """
    Application factory - создаёт и настраивает FastAPI приложение

    Returns:
        Настроенный FastAPI app
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Subscription API",
        description="REST API for managing user subscriptions",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorLoggingMiddleware)

    app.include_router(subscriptions.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (проверяет доступность БД)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    _settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=_settings.SERVER_HOST,
        port=_settings.SERVER_PORT,
        reload=_settings.DEBUG,
    )
