import asyncio
from datetime import UTC, datetime

import pytest

from core.infrastructure.logging import RequestContextLogger
from core.infrastructure.logging.context import request_context
from core.infrastructure.services import DataSanitizer, SystemClock
from tests.conftest import FixedClock

pytestmark = pytest.mark.unit

DEVICE_TOKEN = "dK3j9xQaT0e:APA91bHqJ7c2Zr5vN8wY1kLmP0oQ3sT6uV9xA2bC4dE7fG"


def test_device_tokens_are_masked_in_text() -> None:
    sanitizer = DataSanitizer()

    sanitized = sanitizer.sanitize_for_logging(f"sending to {DEVICE_TOKEN} now")

    assert DEVICE_TOKEN not in sanitized
    assert "dK3j9xQa***" in sanitized


def test_sensitive_keys_are_masked_in_mappings() -> None:
    sanitizer = DataSanitizer()

    sanitized = sanitizer.sanitize_for_logging(
        {"token": DEVICE_TOKEN, "order_id": "55", "nested": {"private_key": "abc"}}
    )

    assert sanitized == {
        "token": "***MASKED***",
        "order_id": "55",
        "nested": {"private_key": "***MASKED***"},
    }


def test_sensitive_query_params_are_masked() -> None:
    sanitizer = DataSanitizer()

    sanitized = sanitizer.sanitize_for_logging("GET https://fcm.example/v1?auth=s3cr3t&page=2")

    assert "s3cr3t" not in sanitized
    assert "page=2" in sanitized


def test_mask_device_token_handles_missing_token() -> None:
    assert DataSanitizer().mask_device_token(None) == "<none>"


def test_clock_isoformat_uses_milliseconds_and_z_suffix() -> None:
    assert FixedClock().isoformat() == "2025-03-14T09:26:53.589Z"


def test_system_clock_is_timezone_aware() -> None:
    assert SystemClock().now().tzinfo is UTC
    assert SystemClock().now() <= datetime.now(tz=UTC)


def test_request_context_nests_and_resets() -> None:
    with RequestContextLogger(request_id="outer", path="/send/basic"):
        with RequestContextLogger(request_id="inner"):
            assert request_context.get() == {"request_id": "inner", "path": "/send/basic"}
        assert request_context.get()["request_id"] == "outer"

    assert request_context.get() == {}


def test_request_context_supports_async_with() -> None:
    async def run():
        async with RequestContextLogger(command="sendtest") as context:
            return context.request_id, request_context.get()["command"]

    request_id, command = asyncio.run(run())

    assert len(request_id) == 8
    assert command == "sendtest"
