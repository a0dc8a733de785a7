from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from helpdesk import db
from helpdesk.config import MIN_SESSION_SECRET_LENGTH, AppInfo, Settings, get_settings
from helpdesk.core.logging import get_logger, setup_logging
from helpdesk.core.runtime_state import get_scheduler, set_scheduler
import helpdesk.models  # registers the tables
from helpdesk.routers import get_api_router
from helpdesk.services.cron import prune_expired_sessions_once
from helpdesk.services.exceptions import (
    AccountServiceError,
    InvariantViolation,
    NotFoundError,
    StorageError,
    ValidationError,
)
from helpdesk.services.passwords import get_hasher
from helpdesk.utils.errors import error_response

logger = get_logger(__name__)

SERVICE_ERROR_STATUS: dict[type[AccountServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvariantViolation: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _configure_middlewares(fastapi_app: FastAPI) -> None:
    runtime_settings = get_settings()
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=runtime_settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    if runtime_settings.PROMETHEUS_ENABLED:
        from starlette_exporter import PrometheusMiddleware, handle_metrics

        fastapi_app.add_middleware(PrometheusMiddleware)
        fastapi_app.add_route("/metrics", handle_metrics)

    if runtime_settings.SENTRY_DSN:
        import sentry_sdk

        sentry_sdk.init(dsn=runtime_settings.SENTRY_DSN, traces_sample_rate=0.2)


def _assert_session_secret(settings: Settings) -> None:
    """Fail fast on a weak session secret outside dev/local/test."""

    if len(settings.SESSION_SECRET) >= MIN_SESSION_SECRET_LENGTH:
        return
    if not settings.is_dev:
        logger.error(
            "SESSION_SECRET is too short; configure at least %d characters before startup.",
            MIN_SESSION_SECRET_LENGTH,
            extra={"env": settings.app_env},
        )
        raise RuntimeError("Weak SESSION_SECRET in non-dev environment.")
    logger.warning("SESSION_SECRET is weak; allowed in dev only.", extra={"env": settings.app_env})


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger.info("Application startup", extra={"env": settings.app_env})
    _assert_session_secret(settings)
    # Builds the bcrypt dummy hash before the first login.
    get_hasher()

    db.get_engine()
    if settings.ALLOW_DB_CREATE_ALL and settings.is_dev:
        logger.warning(
            "Running Base.metadata.create_all() because APP_ENV=%s and ALLOW_DB_CREATE_ALL=True",
            settings.app_env,
        )
        db.create_all()
    else:
        logger.info(
            "Skipping create_all(); use Alembic migrations. APP_ENV=%s, ALLOW_DB_CREATE_ALL=%s",
            settings.app_env,
            settings.ALLOW_DB_CREATE_ALL,
        )

    if settings.SESSION_PRUNE_ENABLED:
        scheduler = AsyncIOScheduler()
        scheduler.start()
        scheduler.add_job(
            prune_expired_sessions_once,
            "interval",
            minutes=settings.SESSION_PRUNE_INTERVAL_MINUTES,
            id="prune-expired-sessions",
            replace_existing=True,
        )
        set_scheduler(scheduler)
    try:
        yield
    finally:
        scheduler = get_scheduler()
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            set_scheduler(None)
        db.dispose_engine()
        logger.info("Application shutdown", extra={"env": settings.app_env})


app_info = AppInfo()

app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)

_configure_middlewares(app)
app.include_router(get_api_router())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", exc_info=exc)
    payload = error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred.")
    return JSONResponse(status_code=500, content=payload)


@app.exception_handler(AccountServiceError)
async def account_service_exception_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    status_code = SERVICE_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, StorageError):
        logger.error("Storage failure", exc_info=exc, extra={"path": request.url.path})
        payload = error_response(exc.code, "An unexpected error occurred.")
    elif isinstance(exc, ValidationError):
        payload = error_response(exc.code, exc.message, {"errors": exc.errors})
    else:
        payload = error_response(exc.code, exc.message)
    return JSONResponse(status_code=status_code, content=payload)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        content: dict[str, Any] = detail
    else:
        content = error_response("HTTP_ERROR", str(detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""

    settings = get_settings()
    uvicorn.run("helpdesk.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


__all__ = ["app", "run"]


if __name__ == "__main__":
    run()
