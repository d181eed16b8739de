import asyncio

import firebase_admin
from firebase_admin import exceptions, messaging
from loguru import logger

from ..application.ports import PushGateway
from ..domain.entities import NotificationPayload, WakeHint
from ..domain.exceptions import GatewayError

# apns-priority 5 is the only priority APNs accepts for content-available pushes
BACKGROUND_APNS_HEADERS = {"apns-priority": "5"}


def gateway_code_for(error: exceptions.FirebaseError) -> str:
    """Translate a firebase-admin exception into a gateway error code.

    Parameters
    ----------
    error : exceptions.FirebaseError
        Exception raised by `messaging.send`.

    Returns
    -------
    str
        Code from the messaging vocabulary, e.g. "registration-token-not-registered".
        Codes without a dedicated exception are derived from the platform
        error code ("UNAVAILABLE" becomes "unavailable").
    """
    if isinstance(error, messaging.UnregisteredError):
        return "registration-token-not-registered"
    if isinstance(error, messaging.SenderIdMismatchError):
        return "mismatched-credential"
    if isinstance(error, exceptions.InvalidArgumentError):
        if "registration token" in str(error).lower():
            return "invalid-registration-token"
        return "invalid-argument"
    return str(error.code or "unknown").lower().replace("_", "-")


class FirebasePushGateway(PushGateway):
    """Firebase Cloud Messaging implementation of `PushGateway`.

    Translates platform-neutral payloads into FCM messages with Android and
    APNs overrides, and firebase-admin exceptions into `GatewayError`.
    """

    def __init__(self, app: firebase_admin.App | None = None, dry_run: bool = False):
        """Initialize the Firebase gateway.

        Args:
            app: Initialized firebase-admin app; the default app when None.
            dry_run: Validate messages without delivering them.
        """
        self.app = app
        self.dry_run = dry_run

    def build_message(self, token: str, payload: NotificationPayload) -> messaging.Message:
        """Map a payload onto an FCM message addressed to one device.

        Parameters
        ----------
        token : str
            Device registration token.
        payload : NotificationPayload
            Platform-neutral payload.

        Returns
        -------
        messaging.Message
            Message ready for `messaging.send`.
        """
        notification = None
        if payload.wake_hint == WakeHint.ALERT:
            notification = messaging.Notification(
                title=payload.alert_title, body=payload.alert_body
            )

        return messaging.Message(
            token=token,
            data=dict(payload.data_fields),
            notification=notification,
            android=self._android_config(payload),
            apns=self._apns_config(payload),
        )

    def _android_config(self, payload: NotificationPayload) -> messaging.AndroidConfig:
        # Android receives background and silent updates as data-only messages
        android_notification = None
        if payload.wake_hint == WakeHint.ALERT and payload.sound:
            android_notification = messaging.AndroidNotification(sound=payload.sound)

        return messaging.AndroidConfig(
            priority=str(payload.priority),
            notification=android_notification,
        )

    def _apns_config(self, payload: NotificationPayload) -> messaging.APNSConfig:
        alert = None
        if payload.alert_title or payload.alert_body:
            alert = messaging.ApsAlert(title=payload.alert_title, body=payload.alert_body)

        is_background = payload.wake_hint == WakeHint.BACKGROUND
        aps = messaging.Aps(
            alert=alert,
            sound=payload.sound,
            badge=payload.badge,
            content_available=True if is_background else None,
        )

        return messaging.APNSConfig(
            headers=dict(BACKGROUND_APNS_HEADERS) if is_background else None,
            payload=messaging.APNSPayload(aps=aps),
        )

    async def send(self, token: str, payload: NotificationPayload) -> str:
        """Send one message through FCM.

        The firebase-admin client is blocking, so the call runs in a worker
        thread to keep the event loop free.

        Raises
        ------
        GatewayError
            If FCM rejects the message.
        """
        message = self.build_message(token, payload)

        try:
            return await asyncio.to_thread(messaging.send, message, self.dry_run, self.app)
        except exceptions.FirebaseError as e:
            raise GatewayError(gateway_code_for(e), str(e)) from e

    async def close(self) -> None:
        """Delete the bound firebase-admin app, if any."""
        if self.app is not None:
            logger.debug(f"🔧 Deleting firebase app '{self.app.name}'")
            firebase_admin.delete_app(self.app)
            self.app = None
