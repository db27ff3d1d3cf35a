import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deploy_dashboard import __version__
from deploy_dashboard.api.v1 import clean, deploy, health, notify, projects
from deploy_dashboard.config import Settings, get_settings
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.domain.services.notify_service import NotifyService
from deploy_dashboard.infrastructure.notify.bark_client import BarkClient
from deploy_dashboard.infrastructure.store.base_store import RecordStore
from deploy_dashboard.infrastructure.store.factory import RecordStoreFactory
from deploy_dashboard.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from deploy_dashboard.schemas.deploy import ErrorResponse

logger = logging.getLogger(__name__)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "invalid request"))
    logger.warning(f"🚨 HTTP 400 for {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    notify_service: Optional[NotifyService] = None,
    retention: Optional[RetentionPolicy] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    retention = retention or RetentionPolicy()
    if store is None:
        store = RecordStoreFactory.create(settings, retention=retention, transport=transport)
    if notify_service is None:
        bark_client = BarkClient(settings.BARK_BASE, transport=transport) if settings.BARK_BASE else None
        notify_service = NotifyService(bark_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 {settings.APP_NAME} started with store tiers: {store.name}")
        yield
        await store.close()
        await notify_service.close()

    app = FastAPI(
        title="Deploy Dashboard",
        description="Records CI deployment events and serves the latest ones to the dashboard",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.retention = retention
    app.state.record_store = store
    app.state.notify_service = notify_service

    # Order matters - last added is first executed
    app.add_middleware(ErrorHandlingMiddleware, enable_error_logging=True)
    app.add_middleware(LoggingMiddleware, enable_detailed_logging=settings.LOG_LEVEL.upper() == "DEBUG")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Mount routers
    app.include_router(health.router, prefix=settings.API_PREFIX)
    app.include_router(deploy.router, prefix=settings.API_PREFIX)
    app.include_router(projects.router, prefix=settings.API_PREFIX)
    app.include_router(clean.router, prefix=settings.API_PREFIX)
    app.include_router(notify.router, prefix=settings.API_PREFIX)

    return app
