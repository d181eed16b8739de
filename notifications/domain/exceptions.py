from typing import Iterable


class GatewayError(Exception):
    """Failure reported by the push gateway for a single send.

    Attributes
    ----------
    code : str | None
        Provider error code, e.g. "registration-token-not-registered".
    message : str
        Provider supplied description of the failure.
    """

    def __init__(self, code: str | None, message: str = "") -> None:
        super().__init__(message or code or "Gateway error")
        self.code = code
        self.message = message


class MissingRequiredFieldError(ValueError):
    """Raised before any gateway call when an intent lacks required fields."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")
