import asyncio
from datetime import UTC, datetime

import pytest

from core.application.ports import ClockInterface
from notifications.application.ports import PushGateway
from notifications.domain.entities import NotificationPayload
from notifications.domain.payloads import PayloadBuilder

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53, 589000, tzinfo=UTC)
FIXED_ISO = "2025-03-14T09:26:53.589Z"
MESSAGE_ID = "projects/demo/messages/0:1700000000000000%abc"


class FixedClock(ClockInterface):
    def __init__(self, moment: datetime = FIXED_NOW) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


class RecordingGateway(PushGateway):
    """Call-counting gateway double."""

    def __init__(
        self,
        response: str = MESSAGE_ID,
        error: Exception | None = None,
        delay: float | None = None,
    ) -> None:
        self.response = response
        self.error = error
        self.delay = delay
        self.dry_run = False
        self.calls: list[tuple[str, NotificationPayload]] = []

    async def send(self, token: str, payload: NotificationPayload) -> str:
        self.calls.append((token, payload))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def payload_builder(clock: FixedClock) -> PayloadBuilder:
    return PayloadBuilder(clock=clock)


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()
