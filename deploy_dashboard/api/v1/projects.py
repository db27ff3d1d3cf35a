from fastapi import APIRouter, Depends

from deploy_dashboard.dependencies import get_query_service
from deploy_dashboard.domain.services.query_service import QueryService
from deploy_dashboard.schemas.deploy import ProjectsResponse

router = APIRouter()


@router.get("/projects", response_model=ProjectsResponse)
async def get_projects(service: QueryService = Depends(get_query_service)):
    """Distinct project names seen in deploy records, sorted."""
    return ProjectsResponse(data=await service.get_all_projects())
