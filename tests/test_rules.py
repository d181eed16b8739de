import asyncio
import json

import pytest
from loguru import logger
from pydantic import ValidationError

from notifications.application.rules import DispatchNotificationRule
from notifications.domain.entities import (
    AssignmentUpdateIntent,
    BasicIntent,
    DispatchErrorKind,
    DispatchResult,
    SilentOrderUpdateIntent,
)
from notifications.domain.errors import DEFAULT_UNKNOWN_MESSAGE
from notifications.domain.exceptions import GatewayError
from notifications.domain.payloads import PayloadBuilder
from tests.conftest import MESSAGE_ID, RecordingGateway

pytestmark = pytest.mark.unit


def _silent(**overrides) -> SilentOrderUpdateIntent:
    fields = {
        "token": "T1",
        "order_id": "55",
        "delivery_status": "DELIVERED",
        "updated_by": "sys",
    }
    fields.update(overrides)
    return SilentOrderUpdateIntent(**fields)


def _rule(intent, gateway, payload_builder, timeout_seconds=None) -> DispatchNotificationRule:
    return DispatchNotificationRule(
        intent=intent,
        gateway=gateway,
        payload_builder=payload_builder,
        timeout_seconds=timeout_seconds,
    )


@pytest.mark.asyncio
async def test_successful_dispatch_echoes_payload(
    gateway: RecordingGateway, payload_builder: PayloadBuilder
) -> None:
    result = await _rule(_silent(), gateway, payload_builder).execute()

    assert result.success is True
    assert result.status_code == 200
    assert result.message == "Silent notification sent successfully"
    assert result.body["response"] == MESSAGE_ID
    echoed = result.body["payload"]
    assert echoed["wake_hint"] == "silent"
    assert echoed["badge"] is None
    model = json.loads(echoed["data_fields"]["payload"])
    assert model["description"] == "Order #55 status changed to DELIVERED"

    assert len(gateway.calls) == 1
    token, sent_payload = gateway.calls[0]
    assert token == "T1"
    assert sent_payload.model_dump(mode="json") == echoed


@pytest.mark.asyncio
async def test_missing_order_id_never_reaches_gateway(
    gateway: RecordingGateway, payload_builder: PayloadBuilder
) -> None:
    result = await _rule(_silent(order_id=None), gateway, payload_builder).execute()

    assert result.success is False
    assert result.status_code == 400
    assert result.body["kind"] == DispatchErrorKind.INVALID_ARGUMENT
    assert result.body["retryable"] is False
    assert "order_id" in result.body["message"]
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_blank_fields_count_as_missing(
    gateway: RecordingGateway, payload_builder: PayloadBuilder
) -> None:
    intent = AssignmentUpdateIntent(token="  ", order_id=3, delivery_status="")

    result = await _rule(intent, gateway, payload_builder).execute()

    assert result.status_code == 400
    assert result.message == (
        "Missing required fields: token, delivery_status, assigned_rider_id"
    )
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_unregistered_token_is_gone(payload_builder: PayloadBuilder) -> None:
    gateway = RecordingGateway(
        error=GatewayError(
            "messaging/registration-token-not-registered",
            "Requested entity was not found.",
        )
    )

    result = await _rule(_silent(), gateway, payload_builder).execute()

    assert result.success is False
    assert result.status_code == 410
    assert result.body["kind"] == DispatchErrorKind.TOKEN_NOT_REGISTERED
    assert result.body["retryable"] is False
    assert "Requested entity" not in result.body["message"]
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_unknown_gateway_error_keeps_raw_message(payload_builder: PayloadBuilder) -> None:
    gateway = RecordingGateway(error=GatewayError("unavailable", "FCM is unavailable"))

    result = await _rule(
        BasicIntent(token="T1", title="a", body="b"), gateway, payload_builder
    ).execute()

    assert result.status_code == 500
    assert result.body == {
        "kind": DispatchErrorKind.UNKNOWN,
        "message": "FCM is unavailable",
        "retryable": True,
    }


@pytest.mark.asyncio
async def test_gateway_timeout_is_unknown_and_retryable(payload_builder: PayloadBuilder) -> None:
    gateway = RecordingGateway(delay=1.0)

    result = await _rule(
        BasicIntent(token="T1", title="a", body="b"),
        gateway,
        payload_builder,
        timeout_seconds=0.01,
    ).execute()

    assert result.status_code == 500
    assert result.body["kind"] == DispatchErrorKind.UNKNOWN
    assert result.body["retryable"] is True
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_payload_build_failure_is_reported_not_raised(
    gateway: RecordingGateway, payload_builder: PayloadBuilder
) -> None:
    result = await _rule(_silent(order_id="not-a-number"), gateway, payload_builder).execute()

    assert result.success is False
    assert result.status_code == 500
    assert result.body["kind"] == DispatchErrorKind.UNKNOWN
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_unexpected_gateway_exception_is_not_exposed(
    payload_builder: PayloadBuilder,
) -> None:
    gateway = RecordingGateway(error=RuntimeError("socket exploded at 10.0.0.7"))

    result = await _rule(_silent(), gateway, payload_builder).execute()

    assert result.status_code == 500
    assert result.message == DEFAULT_UNKNOWN_MESSAGE


@pytest.mark.asyncio
async def test_concurrent_dispatches_are_independent(payload_builder: PayloadBuilder) -> None:
    gateway = RecordingGateway(delay=0.01)
    intents = [_silent(order_id=str(n), token=f"T{n}") for n in range(1, 6)]

    results = await asyncio.gather(
        *(_rule(intent, gateway, payload_builder).execute() for intent in intents)
    )

    assert all(result.success for result in results)
    assert sorted(token for token, _ in gateway.calls) == ["T1", "T2", "T3", "T4", "T5"]


def test_dispatch_result_rejects_inconsistent_status() -> None:
    with pytest.raises(ValidationError):
        DispatchResult(success=True, status_code=500, message="nope")

    with pytest.raises(ValidationError):
        DispatchResult(success=False, status_code=200, message="nope")


@pytest.mark.asyncio
async def test_rejected_intent_is_logged_with_token_masked(
    gateway: RecordingGateway, payload_builder: PayloadBuilder
) -> None:
    device_token = "dK3j9xQaT0e:APA91bHqJ7c2Zr5vN8wY1kLmP0oQ3sT6uV9xA2bC4dE7fG"
    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        result = await _rule(
            _silent(token=device_token, order_id=None), gateway, payload_builder
        ).execute()
    finally:
        logger.remove(handler_id)

    assert result.status_code == 400
    logged = "".join(messages)
    assert device_token not in logged
    assert "'token': '***MASKED***'" in logged
    assert "'delivery_status': 'DELIVERED'" in logged
