import json
import re
from typing import Any, Dict

from core.application.ports import ClockInterface

from .entities import (
    AddressPoint,
    AssignmentUpdateIntent,
    BackgroundUpdateIntent,
    BasicIntent,
    NotificationIntent,
    NotificationPayload,
    NotificationPriority,
    PayloadModel,
    PayloadPayload,
    SilentOrderUpdateIntent,
    SoundTestIntent,
    WakeHint,
)

DEFAULT_SOUND = "default"
DEFAULT_CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"
DEFAULT_SILENT_SOUND = "offer_notification.caf"

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def to_json_text(value: Any) -> str:
    """Serialize a nested object into canonical JSON text for a data field."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_text(value: Any) -> str:
    """Stringify a scalar for a data field; None becomes an empty string."""
    if value is None:
        return ""
    return str(value)


def order_text(value: Any) -> str:
    """Render an order id for display, without surrounding whitespace."""
    return to_text(value).strip()


def parse_order_id(value: Any) -> int:
    """Strictly parse an order id into an integer.

    Raises
    ------
    ValueError
        If the value is not an integer or a string of decimal digits.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    raise ValueError(f"Order id must be numeric, got {value!r}")


class PayloadBuilder:
    """Map notification intents onto platform-neutral push payloads.

    Building is pure apart from timestamps, which come from the injected
    clock. The builder assumes required fields were validated beforehand.
    """

    def __init__(
        self,
        clock: ClockInterface,
        silent_sound: str = DEFAULT_SILENT_SOUND,
        click_action: str = DEFAULT_CLICK_ACTION,
    ) -> None:
        self.clock = clock
        self.silent_sound = silent_sound
        self.click_action = click_action
        self._builders = {
            BasicIntent: self._build_basic,
            SoundTestIntent: self._build_sound_test,
            BackgroundUpdateIntent: self._build_background_update,
            SilentOrderUpdateIntent: self._build_silent_order_update,
            AssignmentUpdateIntent: self._build_assignment_update,
        }

    def build(self, intent: NotificationIntent) -> NotificationPayload:
        """Build the push payload for an intent.

        Parameters
        ----------
        intent : NotificationIntent
            Validated notification intent.

        Returns
        -------
        NotificationPayload
            Payload whose data fields are all strings.

        Raises
        ------
        ValueError
            If an order id cannot be parsed as an integer.
        TypeError
            If the intent type is not supported.
        """
        builder = self._builders.get(type(intent))
        if builder is None:
            raise TypeError(f"Unsupported notification intent: {type(intent).__name__}")
        return builder(intent)

    def _build_basic(self, intent: BasicIntent) -> NotificationPayload:
        return NotificationPayload(
            data_fields={
                "notification_type": "test_basic",
                "order_no": "TEST-123",
                "click_action": self.click_action,
            },
            alert_title=intent.title,
            alert_body=intent.body,
            sound=DEFAULT_SOUND,
            priority=NotificationPriority.HIGH,
            wake_hint=WakeHint.ALERT,
        )

    def _build_sound_test(self, intent: SoundTestIntent) -> NotificationPayload:
        return NotificationPayload(
            data_fields={"notification_type": "sound_test", "order_no": "SOUND-789"},
            alert_title=intent.title,
            alert_body=intent.body,
            sound=DEFAULT_SOUND,
            badge=5,
            priority=NotificationPriority.HIGH,
            wake_hint=WakeHint.ALERT,
        )

    def background_update_document(self, intent: BackgroundUpdateIntent) -> Dict[str, Any]:
        """Return the nested object carried in a background update's `payload` field."""
        return {
            "notification_type": "order_delivered",
            "order_no": order_text(intent.order_id),
            "updated_on": self.clock.isoformat(),
            "payload": {
                "updated_by": to_text(intent.updated_by),
                "delivery_status": to_text(intent.delivery_status) or "UNKNOWN",
                "custom_data": to_text(intent.custom_data) or "N/A",
                "orderId": parse_order_id(intent.order_id),
            },
        }

    def _build_background_update(self, intent: BackgroundUpdateIntent) -> NotificationPayload:
        document = self.background_update_document(intent)

        # Background wakes are dropped on the wake-model platform unless sent
        # with high priority, so the caller's priority is ignored here.
        return NotificationPayload(
            data_fields={
                "title": to_text(intent.title),
                "body": to_text(intent.body),
                "notification_type": document["notification_type"],
                "order_no": document["order_no"],
                "delivery_status": document["payload"]["delivery_status"],
                "updated_by": document["payload"]["updated_by"],
                "payload": to_json_text(document),
                "click_action": self.click_action,
            },
            alert_title=intent.title,
            alert_body=intent.body,
            sound=DEFAULT_SOUND,
            badge=1,
            priority=NotificationPriority.HIGH,
            wake_hint=WakeHint.BACKGROUND,
        )

    def silent_update_model(self, intent: SilentOrderUpdateIntent) -> PayloadModel:
        """Return the order model carried in a silent update's `payload` field."""
        order_id = parse_order_id(intent.order_id)
        order_no = order_text(intent.order_id)
        updated_by = to_text(intent.updated_by)

        return PayloadModel(
            title="Order Update",
            description=f"Order #{order_no} status changed to {intent.delivery_status}",
            model_id=order_id,
            order_no=order_no,
            updated_on=self.clock.isoformat(),
            payload=PayloadPayload(
                driver_id=to_text(intent.driver_id) if intent.driver_id else updated_by,
                delivery_status=to_text(intent.delivery_status),
                custom_data=to_text(intent.custom_data) or "status update",
                status=to_text(intent.delivery_status),
                orderId=order_id,
                delivery_time=intent.delivery_time or None,
                delivery_distance=intent.delivery_distance or None,
                ready_time=intent.ready_time or None,
                restaurant_name=intent.restaurant_name or None,
            ),
            pickup=intent.pickup or AddressPoint.placeholder("Pickup"),
            dropoff=intent.dropoff or AddressPoint.placeholder("Dropoff"),
        )

    def _silent_alert_body(self, intent: SilentOrderUpdateIntent) -> str:
        if intent.restaurant_name:
            body = f"Your order from {intent.restaurant_name} is now {intent.delivery_status}."
        else:
            body = f"Your order is now {intent.delivery_status}."
        if intent.delivery_time:
            body += f" Estimated delivery: {intent.delivery_time}."
        return body

    def _build_silent_order_update(self, intent: SilentOrderUpdateIntent) -> NotificationPayload:
        model = self.silent_update_model(intent)

        # No badge: silent updates must never accumulate a badge count
        return NotificationPayload(
            data_fields={
                "action": self.click_action,
                "silent": "false",
                "order_id": model.order_no,
                "notification_type": model.notification_type,
                "payload": to_json_text(model.model_dump(mode="json")),
                "user_id": to_text(intent.updated_by),
                "controller": "order_controller",
                "timestamp": self.clock.isoformat(),
                "background_update": "false",
            },
            alert_title=f"📦 Order #{model.order_no} {intent.delivery_status}",
            alert_body=self._silent_alert_body(intent),
            sound=self.silent_sound,
            badge=None,
            priority=NotificationPriority.NORMAL,
            wake_hint=WakeHint.SILENT,
        )

    def assignment_document(self, intent: AssignmentUpdateIntent) -> Dict[str, Any]:
        """Return the nested object carried in an assignment's `payload` field."""
        return {
            "notification_type": "order_assigned",
            "order_no": order_text(intent.order_id),
            "updated_on": self.clock.isoformat(),
            "payload": {
                "driver_id": to_text(intent.assigned_rider_id),
                "delivery_status": intent.delivery_status,
                "status": intent.delivery_status,
                "orderId": parse_order_id(intent.order_id),
            },
        }

    def _build_assignment_update(self, intent: AssignmentUpdateIntent) -> NotificationPayload:
        document = self.assignment_document(intent)

        return NotificationPayload(
            data_fields={
                "notification_type": document["notification_type"],
                "order_no": document["order_no"],
                "delivery_status": to_text(intent.delivery_status),
                "assigned_rider_id": document["payload"]["driver_id"],
                "payload": to_json_text(document),
                "click_action": self.click_action,
            },
            alert_title="📦 New Order Assigned",
            alert_body=f"You have been assigned order #{document['order_no']}.",
            sound=DEFAULT_SOUND,
            priority=NotificationPriority.HIGH,
            wake_hint=WakeHint.ALERT,
        )
