import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from deploy_dashboard.dependencies import get_deploy_service, get_query_service
from deploy_dashboard.domain.errors import ValidationError
from deploy_dashboard.domain.services.deploy_service import DeployService
from deploy_dashboard.domain.services.query_service import QueryService
from deploy_dashboard.schemas.deploy import DeployCreateResponse, DeployListResponse, DeployRequest, OkResponse

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def parse_project_filter(project_names: List[str], projects_csv: Optional[str]) -> Optional[List[str]]:
    """Repeated ``projectName`` params win over a comma-separated ``projects`` param."""
    if project_names:
        return project_names
    if projects_csv:
        names = [name.strip() for name in projects_csv.split(",") if name.strip()]
        return names or None
    return None


@router.get("/deploy", response_model=DeployListResponse, response_model_exclude_none=True)
async def get_deployments(
    response: Response,
    limit: Optional[str] = Query(None),
    project_names: List[str] = Query([], alias="projectName"),
    projects: Optional[str] = Query(None),
    service: QueryService = Depends(get_query_service),
):
    """Latest deploy records, newest first."""
    response.headers.update(NO_CACHE_HEADERS)
    data = await service.get_latest(limit, parse_project_filter(project_names, projects))
    return DeployListResponse(data=data)


@router.post(
    "/deploy",
    response_model=DeployCreateResponse,
    response_model_exclude_none=True,
    openapi_extra={"requestBody": {"content": {"application/json": {"schema": DeployRequest.model_json_schema()}}}},
)
async def create_deployment(
    request: Request,
    response: Response,
    service: DeployService = Depends(get_deploy_service),
):
    """Record a finished deployment reported by CI."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("invalid json") from None

    record = await service.create(payload)
    response.headers.update(NO_CACHE_HEADERS)
    return DeployCreateResponse(data=record)


@router.options("/deploy", response_model=OkResponse)
async def deploy_preflight():
    return OkResponse()
