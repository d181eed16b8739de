import pytest

from notifications.domain.entities import DispatchErrorKind
from notifications.domain.errors import DEFAULT_UNKNOWN_MESSAGE, classify, normalize_code

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "code, kind, status_code",
    [
        ("invalid-argument", DispatchErrorKind.INVALID_ARGUMENT, 400),
        ("invalid-registration-token", DispatchErrorKind.INVALID_TOKEN, 400),
        ("registration-token-not-registered", DispatchErrorKind.TOKEN_NOT_REGISTERED, 410),
        ("mismatched-credential", DispatchErrorKind.CREDENTIAL_MISMATCH, 403),
    ],
)
def test_known_codes_are_not_retryable(code: str, kind: DispatchErrorKind, status_code: int) -> None:
    classified = classify(code, "raw provider text")

    assert classified.kind == kind
    assert classified.status_code == status_code
    assert classified.retryable is False
    assert classified.user_message != "raw provider text"


def test_provider_prefix_is_stripped() -> None:
    classified = classify("messaging/registration-token-not-registered", "gone")

    assert classified.kind == DispatchErrorKind.TOKEN_NOT_REGISTERED
    assert classified.status_code == 410


def test_unrecognised_code_surfaces_fallback_message() -> None:
    classified = classify("messaging/quota-exceeded", "Quota exceeded for project")

    assert classified.kind == DispatchErrorKind.UNKNOWN
    assert classified.status_code == 500
    assert classified.retryable is True
    assert classified.user_message == "Quota exceeded for project"


@pytest.mark.parametrize("code", [None, "", "   "])
def test_absent_code_is_unknown(code) -> None:
    classified = classify(code)

    assert classified.kind == DispatchErrorKind.UNKNOWN
    assert classified.status_code == 500
    assert classified.user_message == DEFAULT_UNKNOWN_MESSAGE


def test_normalize_code() -> None:
    assert normalize_code(" Messaging/Invalid-Argument ") == "invalid-argument"
    assert normalize_code("messaging/") is None
    assert normalize_code(None) is None
