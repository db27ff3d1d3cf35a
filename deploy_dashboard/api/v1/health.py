from fastapi import APIRouter, Depends

from deploy_dashboard import __version__
from deploy_dashboard.config import Settings
from deploy_dashboard.dependencies import get_record_store, get_settings
from deploy_dashboard.infrastructure.store.base_store import RecordStore

router = APIRouter()


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    store: RecordStore = Depends(get_record_store),
):
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": __version__,
        "store": store.name,
    }
