from fastapi import APIRouter, Depends

from deploy_dashboard.dependencies import get_deploy_service
from deploy_dashboard.domain.services.deploy_service import DeployService
from deploy_dashboard.schemas.deploy import CleanResponse, OkResponse

router = APIRouter()


@router.post("/clean", response_model=CleanResponse)
async def clean_all(service: DeployService = Depends(get_deploy_service)):
    """Wipe every record and project from all active backends."""
    result = await service.clear_all()
    return CleanResponse(cleared=result.cleared, mode=result.mode)


@router.options("/clean", response_model=OkResponse)
async def clean_preflight():
    return OkResponse()
