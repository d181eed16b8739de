import json

import pytest
from fastapi.testclient import TestClient

from config.base import Settings, get_settings
from core.infrastructure.factory import get_clock
from main import create_app
from notifications.domain.exceptions import GatewayError
from notifications.infrastructure.factory import get_push_gateway
from tests.conftest import FIXED_ISO, MESSAGE_ID, FixedClock, RecordingGateway

pytestmark = pytest.mark.unit


@pytest.fixture
def client(gateway: RecordingGateway) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_push_gateway] = lambda: gateway
    app.dependency_overrides[get_clock] = lambda: FixedClock()
    app.dependency_overrides[get_settings] = lambda: Settings(
        environment="test", firebase_dry_run=False, gateway_timeout_seconds=1.0
    )
    # Not used as a context manager: the lifespan would initialise firebase
    return TestClient(app, raise_server_exceptions=False)


def test_silent_endpoint_end_to_end(client: TestClient, gateway: RecordingGateway) -> None:
    response = client.post(
        "/send/silent",
        json={"token": "T1", "order_id": "55", "delivery_status": "DELIVERED", "updated_by": "sys"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status_code"] == 200
    assert body["body"]["response"] == MESSAGE_ID

    data_fields = body["body"]["payload"]["data_fields"]
    model = json.loads(data_fields["payload"])
    assert model["description"] == "Order #55 status changed to DELIVERED"
    assert model["payload"]["orderId"] == 55
    assert model["pickup"] == {"lat": 0.0, "lng": 0.0, "name": "Pickup Location"}
    assert data_fields["timestamp"] == FIXED_ISO
    assert len(gateway.calls) == 1
    assert "X-Request-ID" in response.headers


def test_missing_required_field_returns_400(client: TestClient, gateway: RecordingGateway) -> None:
    response = client.post(
        "/send/silent",
        json={"token": "T1", "delivery_status": "DELIVERED", "updated_by": "sys"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["body"]["kind"] == "InvalidArgument"
    assert "order_id" in body["message"]
    assert gateway.calls == []


@pytest.mark.parametrize(
    "code, status_code, kind",
    [
        ("registration-token-not-registered", 410, "TokenNotRegistered"),
        ("mismatched-credential", 403, "CredentialMismatch"),
        ("invalid-registration-token", 400, "InvalidToken"),
        ("internal", 500, "Unknown"),
    ],
)
def test_gateway_errors_are_mirrored_in_http_status(
    client: TestClient, gateway: RecordingGateway, code: str, status_code: int, kind: str
) -> None:
    gateway.error = GatewayError(code, "provider said no")

    response = client.post("/send/basic", json={"token": "T1", "title": "Hi", "body": "There"})

    assert response.status_code == status_code
    assert response.json()["body"]["kind"] == kind
    assert response.json()["status_code"] == status_code


def test_background_endpoint_accepts_camel_case_order_id(
    client: TestClient, gateway: RecordingGateway
) -> None:
    response = client.post(
        "/send/background",
        json={
            "token": "T1",
            "title": "Delivered",
            "body": "Enjoy",
            "orderId": 77,
            "priority": "normal",
        },
    )

    assert response.status_code == 200
    _, payload = gateway.calls[0]
    assert payload.priority == "high"
    assert payload.data_fields["order_no"] == "77"


def test_assignment_and_sound_endpoints(client: TestClient, gateway: RecordingGateway) -> None:
    assignment = client.post(
        "/send/assignment",
        json={"token": "T1", "order_id": 9, "delivery_status": "ASSIGNED", "assigned_rider_id": 4},
    )
    sound = client.post("/send/sound", json={"token": "T2", "title": "Ding", "body": "Dong"})

    assert assignment.status_code == 200
    assert assignment.json()["message"] == "Assignment notification sent successfully"
    assert sound.status_code == 200
    assert sound.json()["body"]["payload"]["badge"] == 5
    assert [token for token, _ in gateway.calls] == ["T1", "T2"]


def test_malformed_body_uses_error_envelope(client: TestClient, gateway: RecordingGateway) -> None:
    response = client.post(
        "/send/silent",
        json={"token": "T1", "order_id": "55", "pickup": "somewhere"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert body["path"] == "/send/silent"
    assert gateway.calls == []


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["data"] == {"environment": "test", "dry_run": False}


def test_numeric_detail_fields_are_accepted(client: TestClient, gateway: RecordingGateway) -> None:
    silent = client.post(
        "/send/silent",
        json={
            "token": "T1",
            "order_id": 55,
            "delivery_status": "PICKED_UP",
            "updated_by": 3,
            "delivery_distance": 2.5,
            "delivery_time": 15,
        },
    )
    assignment = client.post(
        "/send/assignment",
        json={"token": "T2", "order_id": 9, "delivery_status": 2, "assigned_rider_id": 4},
    )

    assert silent.status_code == 200
    assert assignment.status_code == 200
    model = json.loads(silent.json()["body"]["payload"]["data_fields"]["payload"])
    assert model["payload"]["delivery_distance"] == 2.5
    assert model["payload"]["delivery_time"] == 15
    assert assignment.json()["body"]["payload"]["data_fields"]["delivery_status"] == "2"
    assert len(gateway.calls) == 2
