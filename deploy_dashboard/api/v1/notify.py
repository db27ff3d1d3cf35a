from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from deploy_dashboard.dependencies import get_notify_service
from deploy_dashboard.domain.errors import NotConfiguredError, ValidationError
from deploy_dashboard.domain.services.notify_service import NotifyService
from deploy_dashboard.schemas.notify import NotifyRequest, NotifyResponse

router = APIRouter()


@router.post("/notify", response_model=NotifyResponse)
async def notify(request: NotifyRequest, service: NotifyService = Depends(get_notify_service)):
    """Relay a push notification; the status mirrors the relay's answer."""
    try:
        ok, text = await service.send(request.title, request.body)
    except NotConfiguredError as e:
        # Missing relay setup is reported to the caller, not treated as a server fault
        raise ValidationError(e.message) from e
    return JSONResponse(status_code=200 if ok else 500, content=NotifyResponse(ok=ok, text=text).model_dump())
