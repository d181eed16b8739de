from enum import StrEnum
from typing import Annotated, Any, ClassVar, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator

Identifier = str | int
Measurement = str | int | float


class NotificationPriority(StrEnum):
    """Delivery priority requested from the gateway."""

    HIGH = "high"
    NORMAL = "normal"


class WakeHint(StrEnum):
    """How the receiving device should surface a notification.

    ALERT shows a visible alert, BACKGROUND wakes the app for background
    processing (content-available), SILENT delivers data to the app with a
    custom sound but never touches the badge count.
    """

    ALERT = "alert"
    BACKGROUND = "background"
    SILENT = "silent"


class DispatchErrorKind(StrEnum):
    """Closed set of caller-actionable dispatch failures."""

    INVALID_ARGUMENT = "InvalidArgument"
    INVALID_TOKEN = "InvalidToken"
    TOKEN_NOT_REGISTERED = "TokenNotRegistered"
    CREDENTIAL_MISMATCH = "CredentialMismatch"
    UNKNOWN = "Unknown"


class AddressPoint(BaseModel):
    """Geographic point shown to the client for pickups and dropoffs.

    Attributes
    ----------
    lat : float
        Latitude in decimal degrees.
    lng : float
        Longitude in decimal degrees.
    name : str
        Human readable label of the location.
    """

    lat: float = 0.0
    lng: float = 0.0
    name: str

    @classmethod
    def placeholder(cls, role: str) -> "AddressPoint":
        """Return the default point used when a location is omitted."""
        return cls(lat=0.0, lng=0.0, name=f"{role} Location")


class _Intent(BaseModel):
    """Shared base for notification intents.

    Fields listed in `required_fields` are typed as optional so that
    their absence is reported by the dispatch rule, not the HTTP layer.
    """

    model_config = ConfigDict(frozen=True)

    required_fields: ClassVar[Tuple[str, ...]] = ("token",)

    token: str | None = None

    def missing_fields(self) -> list[str]:
        """List required fields that are absent or blank."""
        missing = []
        for name in self.required_fields:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class BasicIntent(_Intent):
    """Visible test notification."""

    required_fields: ClassVar[Tuple[str, ...]] = ("token", "title", "body")

    kind: Literal["basic"] = "basic"
    title: str | None = None
    body: str | None = None


class SoundTestIntent(_Intent):
    """Visible notification exercising the default sound and badge."""

    required_fields: ClassVar[Tuple[str, ...]] = ("token", "title", "body")

    kind: Literal["sound_test"] = "sound_test"
    title: str | None = None
    body: str | None = None


class BackgroundUpdateIntent(_Intent):
    """Order update delivered as a content-available background wake."""

    required_fields: ClassVar[Tuple[str, ...]] = ("token", "title", "body", "order_id")

    kind: Literal["background_update"] = "background_update"
    title: str | None = None
    body: str | None = None
    order_id: Identifier | None = None
    delivery_status: Identifier | None = None
    updated_by: Identifier | None = None
    custom_data: Identifier | None = None
    priority: NotificationPriority = NotificationPriority.HIGH


class SilentOrderUpdateIntent(_Intent):
    """Order status change delivered as a silent, badge-free update."""

    required_fields: ClassVar[Tuple[str, ...]] = (
        "token",
        "order_id",
        "delivery_status",
        "updated_by",
    )

    kind: Literal["silent_order_update"] = "silent_order_update"
    order_id: Identifier | None = None
    delivery_status: Identifier | None = None
    updated_by: Identifier | None = None
    driver_id: Identifier | None = None
    custom_data: Identifier | None = None
    delivery_time: Measurement | None = None
    delivery_distance: Measurement | None = None
    ready_time: Measurement | None = None
    restaurant_name: str | None = None
    pickup: AddressPoint | None = None
    dropoff: AddressPoint | None = None


class AssignmentUpdateIntent(_Intent):
    """Visible notification telling a rider an order was assigned to them."""

    required_fields: ClassVar[Tuple[str, ...]] = (
        "token",
        "order_id",
        "delivery_status",
        "assigned_rider_id",
    )

    kind: Literal["assignment_update"] = "assignment_update"
    order_id: Identifier | None = None
    delivery_status: Identifier | None = None
    assigned_rider_id: Identifier | None = None


NotificationIntent = Annotated[
    Union[
        BasicIntent,
        SoundTestIntent,
        BackgroundUpdateIntent,
        SilentOrderUpdateIntent,
        AssignmentUpdateIntent,
    ],
    Field(discriminator="kind"),
]


class PayloadPayload(BaseModel):
    """Inner business payload of a silent order update.

    Optional fields are serialized as explicit nulls, never omitted.
    """

    driver_id: str
    delivery_status: str
    custom_data: str
    status: str
    orderId: int
    delivery_time: Measurement | None = None
    delivery_distance: Measurement | None = None
    ready_time: Measurement | None = None
    restaurant_name: str | None = None


class PayloadModel(BaseModel):
    """Outer envelope of a silent order update, as parsed by the client."""

    model_config = ConfigDict(protected_namespaces=())

    title: str
    description: str
    model_type: str = "order"
    model_id: int
    test_mode: bool = False
    notification_type: str = "silent_update"
    order_no: str
    updated_on: str
    payload: PayloadPayload
    pickup: AddressPoint
    dropoff: AddressPoint


class NotificationPayload(BaseModel):
    """Platform-neutral envelope handed to the push gateway.

    Attributes
    ----------
    data_fields : Dict[str, str]
        Key/value data delivered to the app. Values must already be strings.
    alert_title : str | None
        Title of the visible alert, if any.
    alert_body : str | None
        Body of the visible alert, if any.
    sound : str | None
        Sound asset to play ("default" or a bundled asset name).
    badge : int | None
        Badge count to set; None leaves the badge untouched.
    priority : NotificationPriority
        Delivery priority requested from the gateway.
    wake_hint : WakeHint
        How the device should surface the notification.
    """

    model_config = ConfigDict(frozen=True)

    data_fields: Dict[StrictStr, StrictStr] = Field(default_factory=dict)
    alert_title: str | None = None
    alert_body: str | None = None
    sound: str | None = None
    badge: int | None = None
    priority: NotificationPriority = NotificationPriority.HIGH
    wake_hint: WakeHint = WakeHint.ALERT


class ClassifiedError(BaseModel):
    """Outcome of classifying a gateway failure."""

    model_config = ConfigDict(frozen=True)

    kind: DispatchErrorKind
    status_code: int
    user_message: str
    retryable: bool


class DispatchResult(BaseModel):
    """Result of a single dispatch, serialized back to the HTTP caller.

    `success` is true exactly when `status_code` is a 2xx code.
    """

    success: bool
    status_code: int
    message: str
    body: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_success_matches_status(self) -> "DispatchResult":
        if self.success != (200 <= self.status_code <= 299):
            raise ValueError(
                f"success={self.success} is inconsistent with status_code={self.status_code}"
            )
        return self
