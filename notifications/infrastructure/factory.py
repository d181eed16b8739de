import firebase_admin
from fastapi import Depends
from firebase_admin import credentials
from loguru import logger

from config.base import Settings, get_settings
from core.application.ports import ClockInterface
from core.infrastructure.factory import get_clock

from ..domain.payloads import PayloadBuilder
from .services import FirebasePushGateway

FIREBASE_APP_NAME = "push-dispatch"

_push_gateway = None


def initialize_firebase_app(settings: Settings) -> firebase_admin.App:
    """Initialize the named firebase-admin app used for dispatching.

    Parameters
    ----------
    settings: Settings
        Application settings providing the credentials path and project id.

    Returns
    -------
    firebase_admin.App
        Initialized app. Application default credentials are used when no
        service account file is configured; they are resolved lazily on the
        first send.
    """
    if settings.firebase_credentials_path:
        credential = credentials.Certificate(str(settings.firebase_credentials_path))
    else:
        logger.warning(
            "🟠 No firebase credentials file configured, using application default credentials."
        )
        credential = credentials.ApplicationDefault()

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    return firebase_admin.initialize_app(
        credential=credential, options=options, name=FIREBASE_APP_NAME
    )


async def get_push_gateway() -> FirebasePushGateway:
    """Provide a singleton `FirebasePushGateway` instance.

    Returns
    -------
    FirebasePushGateway
        Instance of `FirebasePushGateway`.
    """
    global _push_gateway

    if _push_gateway is None:
        settings = get_settings()
        app = initialize_firebase_app(settings)
        _push_gateway = FirebasePushGateway(app=app, dry_run=settings.firebase_dry_run)

    return _push_gateway


async def close_push_gateway():
    """Close the singleton push gateway properly."""
    global _push_gateway

    if _push_gateway:
        await _push_gateway.close()

        _push_gateway = None


async def get_payload_builder(
    clock: ClockInterface = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> PayloadBuilder:
    """Provide a `PayloadBuilder` configured from settings.

    Parameters
    ----------
    clock : ClockInterface
        Time source for payload timestamps, injected as a dependency.
    settings : Settings
        Application settings, injected as a dependency.

    Returns
    -------
    PayloadBuilder
        Instance of `PayloadBuilder`.
    """
    return PayloadBuilder(
        clock=clock,
        silent_sound=settings.silent_sound,
        click_action=settings.click_action,
    )
