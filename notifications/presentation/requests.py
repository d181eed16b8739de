from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..domain.entities import (
    AddressPoint,
    AssignmentUpdateIntent,
    BackgroundUpdateIntent,
    BasicIntent,
    Identifier,
    Measurement,
    NotificationPriority,
    SilentOrderUpdateIntent,
    SoundTestIntent,
)


class BasicNotificationRequest(BaseModel):
    """Request model for a visible test notification.

    Attributes
    ----------
    token : str | None
        Device registration token
    title : str | None
        Alert title
    body : str | None
        Alert body
    """

    token: str | None = None
    title: str | None = None
    body: str | None = None

    def to_intent(self) -> BasicIntent:
        return BasicIntent(**self.model_dump())


class SoundNotificationRequest(BasicNotificationRequest):
    """Request model for a sound and badge test notification."""

    def to_intent(self) -> SoundTestIntent:
        return SoundTestIntent(**self.model_dump())


class BackgroundNotificationRequest(BaseModel):
    """Request model for a background order update.

    Attributes
    ----------
    token : str | None
        Device registration token
    title : str | None
        Title mirrored into the data fields and the alert
    body : str | None
        Body mirrored into the data fields and the alert
    order_id : str | int | None
        Order identifier, also accepted as `orderId`
    delivery_status : str | int | None
        New delivery status
    updated_by : str | int | None
        Identifier of the acting user
    custom_data : str | int | None
        Free-form note forwarded to the client
    priority : NotificationPriority
        Requested priority; background updates are always sent as high
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    title: str | None = None
    body: str | None = None
    order_id: Identifier | None = Field(
        default=None, validation_alias=AliasChoices("order_id", "orderId")
    )
    delivery_status: Identifier | None = None
    updated_by: Identifier | None = None
    custom_data: Identifier | None = None
    priority: NotificationPriority = NotificationPriority.HIGH

    def to_intent(self) -> BackgroundUpdateIntent:
        return BackgroundUpdateIntent(**self.model_dump())


class SilentNotificationRequest(BaseModel):
    """Request model for a silent order status update.

    Attributes
    ----------
    token : str | None
        Device registration token
    order_id : str | int | None
        Order identifier
    delivery_status : str | int | None
        New delivery status
    updated_by : str | int | None
        Identifier of the acting user
    driver_id : str | int | None
        Assigned driver, defaults to `updated_by`
    custom_data : str | int | None
        Free-form note forwarded to the client
    delivery_time, delivery_distance, ready_time : str | int | float | None
        Optional timing details
    restaurant_name : str | None
        Restaurant the order was placed with
    pickup, dropoff : AddressPoint | None
        Optional locations, placeholders are sent when omitted
    """

    token: str | None = None
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

    def to_intent(self) -> SilentOrderUpdateIntent:
        return SilentOrderUpdateIntent(
            **self.model_dump(exclude={"pickup", "dropoff"}),
            pickup=self.pickup,
            dropoff=self.dropoff,
        )


class AssignmentNotificationRequest(BaseModel):
    """Request model for an order assignment notification.

    Attributes
    ----------
    token : str | None
        Device registration token of the rider
    order_id : str | int | None
        Assigned order identifier
    delivery_status : str | int | None
        Current delivery status
    assigned_rider_id : str | int | None
        Rider the order was assigned to
    """

    token: str | None = None
    order_id: Identifier | None = None
    delivery_status: Identifier | None = None
    assigned_rider_id: Identifier | None = None

    def to_intent(self) -> AssignmentUpdateIntent:
        return AssignmentUpdateIntent(**self.model_dump())
