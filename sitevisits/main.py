# sitevisits/main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from sitevisits.api.middleware import track_visits
from sitevisits.api.static import SiteStaticFiles
from sitevisits.api.v1.router import api_router_v1
from sitevisits.core.config import Settings, settings as default_settings
from sitevisits.core.exceptions import OperatorAuthError
from sitevisits.services.visits import VisitsContext

# --- Настройка логирования ---
log_level = default_settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


# --- Lifespan для управления ресурсами ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    visits: VisitsContext = app.state.visits
    logger.info(f"Application startup: visits enabled: {visits.enabled}")
    if visits.recorder is not None:
        visits.recorder.start()
    try:
        yield
    finally:
        logger.info("Application shutdown: flushing pending visits...")
        await visits.close()
        logger.info("Resources cleaned up successfully.")


async def operator_auth_exception_handler(request: Request, exc: OperatorAuthError):
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=exc.headers)


async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error."},
    )


def create_app(settings: Optional[Settings] = None, visits: Optional[VisitsContext] = None) -> FastAPI:
    """Собирает приложение. Настройки и контекст визитов можно передать явно (тесты, несколько инстансов)."""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Cookie-based page view tracking with an operator dashboard.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.visits = visits or VisitsContext.from_settings(settings)

    # --- Обработчики ошибок ---
    app.add_exception_handler(OperatorAuthError, operator_auth_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # --- Учет визитов ---
    app.middleware("http")(track_visits)

    # --- Подключение роутеров ---
    app.include_router(api_router_v1)

    # --- Статика сайта (должна подключаться последней: ловит все остальные пути) ---
    if settings.STATIC_DIR:
        if os.path.isdir(settings.STATIC_DIR):
            app.mount("/", SiteStaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
            logger.info(f"Serving static site from: {settings.STATIC_DIR}")
        else:
            logger.warning(f"STATIC_DIR '{settings.STATIC_DIR}' does not exist, static files are not served.")

    return app


app = create_app()
