from fastapi import status

from .entities import ClassifiedError, DispatchErrorKind

PROVIDER_PREFIX = "messaging/"
DEFAULT_UNKNOWN_MESSAGE = "Unexpected error sending push message."

_TAXONOMY = {
    "invalid-argument": ClassifiedError(
        kind=DispatchErrorKind.INVALID_ARGUMENT,
        status_code=status.HTTP_400_BAD_REQUEST,
        user_message="Invalid argument, check the payload structure.",
        retryable=False,
    ),
    "invalid-registration-token": ClassifiedError(
        kind=DispatchErrorKind.INVALID_TOKEN,
        status_code=status.HTTP_400_BAD_REQUEST,
        user_message="Invalid device token. Please verify the device token.",
        retryable=False,
    ),
    # Token-related failures wait for the client to obtain a fresh token
    "registration-token-not-registered": ClassifiedError(
        kind=DispatchErrorKind.TOKEN_NOT_REGISTERED,
        status_code=status.HTTP_410_GONE,
        user_message="The device token is no longer registered. Device must re-register.",
        retryable=False,
    ),
    "mismatched-credential": ClassifiedError(
        kind=DispatchErrorKind.CREDENTIAL_MISMATCH,
        status_code=status.HTTP_403_FORBIDDEN,
        user_message="Device token does not belong to this messaging project.",
        retryable=False,
    ),
}


def normalize_code(code: str | None) -> str | None:
    """Strip the provider prefix and surrounding noise from a gateway code."""
    if not code:
        return None
    code = code.strip().lower()
    if code.startswith(PROVIDER_PREFIX):
        code = code[len(PROVIDER_PREFIX):]
    return code or None


def classify(code: str | None, fallback_message: str | None = None) -> ClassifiedError:
    """Map a gateway error code onto the dispatch error taxonomy.

    Parameters
    ----------
    code : str | None
        Error code carried by the gateway failure. Both bare codes
        ("invalid-argument") and provider-prefixed codes
        ("messaging/invalid-argument") are recognised.
    fallback_message : str | None
        Raw gateway message, surfaced only for unrecognised codes.

    Returns
    -------
    ClassifiedError
        Kind, HTTP-equivalent status code, user-facing message and
        retryability of the failure. Unrecognised or absent codes classify
        as `Unknown` (500) and are left to the caller's retry policy.
    """
    known = _TAXONOMY.get(normalize_code(code))
    if known is not None:
        return known

    return ClassifiedError(
        kind=DispatchErrorKind.UNKNOWN,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        user_message=fallback_message or DEFAULT_UNKNOWN_MESSAGE,
        retryable=True,
    )
