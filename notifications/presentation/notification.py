from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config.base import Settings, get_settings

from ..application.ports import PushGateway
from ..application.rules import DispatchNotificationRule
from ..domain.entities import DispatchResult, NotificationIntent
from ..domain.payloads import PayloadBuilder
from ..infrastructure.factory import get_payload_builder, get_push_gateway
from .requests import (
    AssignmentNotificationRequest,
    BackgroundNotificationRequest,
    BasicNotificationRequest,
    SilentNotificationRequest,
    SoundNotificationRequest,
)

router = APIRouter(prefix="/send")

DISPATCH_RESPONSES = {
    400: {"model": DispatchResult, "description": "Invalid payload or device token"},
    403: {"model": DispatchResult, "description": "Token belongs to another project"},
    410: {"model": DispatchResult, "description": "Device must re-register"},
    500: {"model": DispatchResult, "description": "Unknown gateway failure"},
}


async def dispatch_intent(
    intent: NotificationIntent,
    gateway: PushGateway,
    payload_builder: PayloadBuilder,
    settings: Settings,
) -> JSONResponse:
    """Run the dispatch rule and mirror its status code in the HTTP response."""
    dispatch_rule = DispatchNotificationRule(
        intent=intent,
        gateway=gateway,
        payload_builder=payload_builder,
        timeout_seconds=settings.gateway_timeout_seconds,
    )

    result = await dispatch_rule.execute()

    return JSONResponse(
        status_code=result.status_code, content=result.model_dump(mode="json")
    )


@router.post("/basic", response_model=DispatchResult, responses=DISPATCH_RESPONSES)
async def send_basic(
    request: BasicNotificationRequest,
    gateway=Depends(get_push_gateway),
    payload_builder=Depends(get_payload_builder),
    settings=Depends(get_settings),
):
    """Send a visible test notification.

    Parameters
    ----------
    request : BasicNotificationRequest
        Device token, alert title and body
    gateway
        Dependency-injected push gateway
    payload_builder
        Dependency-injected payload builder
    settings
        Application settings

    Returns
    -------
    JSONResponse
        Serialized `DispatchResult` with a mirrored status code
    """
    return await dispatch_intent(request.to_intent(), gateway, payload_builder, settings)


@router.post("/background", response_model=DispatchResult, responses=DISPATCH_RESPONSES)
async def send_background(
    request: BackgroundNotificationRequest,
    gateway=Depends(get_push_gateway),
    payload_builder=Depends(get_payload_builder),
    settings=Depends(get_settings),
):
    """Send an order update that wakes the app for background processing."""
    return await dispatch_intent(request.to_intent(), gateway, payload_builder, settings)


@router.post("/silent", response_model=DispatchResult, responses=DISPATCH_RESPONSES)
async def send_silent(
    request: SilentNotificationRequest,
    gateway=Depends(get_push_gateway),
    payload_builder=Depends(get_payload_builder),
    settings=Depends(get_settings),
):
    """Send a silent order status update.

    The update carries the full order model as JSON text in its `payload`
    data field and never changes the badge count.
    """
    return await dispatch_intent(request.to_intent(), gateway, payload_builder, settings)


@router.post("/sound", response_model=DispatchResult, responses=DISPATCH_RESPONSES)
async def send_sound(
    request: SoundNotificationRequest,
    gateway=Depends(get_push_gateway),
    payload_builder=Depends(get_payload_builder),
    settings=Depends(get_settings),
):
    """Send a notification exercising the default sound and badge."""
    return await dispatch_intent(request.to_intent(), gateway, payload_builder, settings)


@router.post("/assignment", response_model=DispatchResult, responses=DISPATCH_RESPONSES)
async def send_assignment(
    request: AssignmentNotificationRequest,
    gateway=Depends(get_push_gateway),
    payload_builder=Depends(get_payload_builder),
    settings=Depends(get_settings),
):
    """Notify a rider that an order has been assigned to them."""
    return await dispatch_intent(request.to_intent(), gateway, payload_builder, settings)
