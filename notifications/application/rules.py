import asyncio

from fastapi import status
from loguru import logger

from core.infrastructure.factory import get_data_sanitizer

from ..domain.entities import (
    ClassifiedError,
    DispatchErrorKind,
    DispatchResult,
    NotificationIntent,
    NotificationPayload,
)
from ..domain.errors import classify
from ..domain.exceptions import GatewayError, MissingRequiredFieldError
from ..domain.payloads import PayloadBuilder
from .ports import PushGateway

SUCCESS_MESSAGES = {
    "basic": "Basic notification sent successfully",
    "sound_test": "Notification with sound sent successfully",
    "background_update": "Background notification sent successfully",
    "silent_order_update": "Silent notification sent successfully",
    "assignment_update": "Assignment notification sent successfully",
}


class DispatchNotificationRule:
    """Business logic for dispatching one notification intent.

    Validates the intent, builds its payload, performs exactly one gateway
    send and turns every outcome into a `DispatchResult`. Retrying is left
    to the caller, guided by the `retryable` flag of failed results.
    """

    def __init__(
        self,
        intent: NotificationIntent,
        gateway: PushGateway,
        payload_builder: PayloadBuilder,
        timeout_seconds: float | None = None,
    ) -> None:
        self.intent = intent
        self.gateway = gateway
        self.payload_builder = payload_builder
        self.timeout_seconds = timeout_seconds

    async def execute(self) -> DispatchResult:
        """Execute the dispatch process.

        Returns
        -------
        DispatchResult
            Successful result echoing the attempted payload, or a failed
            result carrying the classified error. Never raises for a
            single dispatch.
        """
        sanitizer = await get_data_sanitizer()
        kind = self.intent.kind
        device = sanitizer.mask_device_token(self.intent.token)

        try:
            self._validate()
        except MissingRequiredFieldError as e:
            intent = sanitizer.sanitize_for_logging(self.intent.model_dump(mode="json"))
            logger.warning(f"🚫 Rejected {kind} notification: {e} intent={intent}")
            return self._failure(
                ClassifiedError(
                    kind=DispatchErrorKind.INVALID_ARGUMENT,
                    status_code=status.HTTP_400_BAD_REQUEST,
                    user_message=str(e),
                    retryable=False,
                )
            )

        try:
            payload = self.payload_builder.build(self.intent)
        except Exception as e:
            logger.error(
                f"🔴 Could not build {kind} payload: "
                f"{sanitizer.sanitize_exception_for_logging(e)}"
            )
            return self._failure(classify(None, f"Failed to build notification payload: {e}"))

        logger.info(f"📨 Dispatching {kind} notification to {device}")

        try:
            response = await self._send(payload)
        except GatewayError as e:
            classified = classify(e.code, e.message)
            logger.warning(
                f"🟠 Gateway rejected {kind} notification for {device}: "
                f"code={e.code} kind={classified.kind} status={classified.status_code}"
            )
            return self._failure(classified)
        except TimeoutError:
            logger.error(
                f"⏱️ Gateway timed out after {self.timeout_seconds}s for {kind} notification"
            )
            return self._failure(classify(None, "Timed out waiting for the push gateway."))
        except Exception as e:
            logger.error(
                f"🔴 Unexpected error sending {kind} notification: "
                f"{type(e).__name__}: {sanitizer.sanitize_exception_for_logging(e)}"
            )
            return self._failure(classify(None))

        logger.success(f"🟢 Sent {kind} notification to {device}: {response}")

        return DispatchResult(
            success=True,
            status_code=status.HTTP_200_OK,
            message=SUCCESS_MESSAGES[kind],
            body={"response": response, "payload": payload.model_dump(mode="json")},
        )

    def _validate(self) -> None:
        missing = self.intent.missing_fields()
        if missing:
            raise MissingRequiredFieldError(missing)

    async def _send(self, payload: NotificationPayload) -> str:
        send = self.gateway.send(self.intent.token, payload)
        if self.timeout_seconds is None:
            return await send
        return await asyncio.wait_for(send, timeout=self.timeout_seconds)

    def _failure(self, error: ClassifiedError) -> DispatchResult:
        return DispatchResult(
            success=False,
            status_code=error.status_code,
            message=error.user_message,
            body={
                "kind": error.kind,
                "message": error.user_message,
                "retryable": error.retryable,
            },
        )
