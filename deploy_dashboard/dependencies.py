from __future__ import annotations

import logging

from fastapi import Request

from deploy_dashboard.config import Settings
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.domain.services.deploy_service import DeployService
from deploy_dashboard.domain.services.notify_service import NotifyService
from deploy_dashboard.domain.services.query_service import QueryService
from deploy_dashboard.infrastructure.store.base_store import RecordStore

logger = logging.getLogger(__name__)


# The store and clients are built once in create_app and kept on app.state,
# so every request shares the same process-lifetime instances.
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_retention(request: Request) -> RetentionPolicy:
    return request.app.state.retention


def get_deploy_service(request: Request) -> DeployService:
    return DeployService(get_record_store(request), clock=get_retention(request).clock)


def get_query_service(request: Request) -> QueryService:
    return QueryService(get_record_store(request), retention=get_retention(request))


def get_notify_service(request: Request) -> NotifyService:
    return request.app.state.notify_service
