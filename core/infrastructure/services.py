import re
from datetime import UTC, datetime
from typing import Any, Dict, List, Pattern
from urllib.parse import urlparse, urlunparse

from ..application.ports import ClockInterface


class DataSanitizer:
    """Data sanitizer for removing/masking sensitive information
    from logs, exceptions, and other outputs.

    Defines a set of patterns and methods to identify and mask
    sensitive data like device registration tokens, credentials and API keys
    before they are logged or exposed.
    """

    def __init__(self):
        self.sensitive_patterns: List[Pattern[str]] = [
            re.compile(r"password", re.IGNORECASE),
            re.compile(r"secret", re.IGNORECASE),
            re.compile(r"token", re.IGNORECASE),
            re.compile(r"private_key", re.IGNORECASE),
            re.compile(r"auth", re.IGNORECASE),
            re.compile(r"credential", re.IGNORECASE),
            re.compile(r"api_key", re.IGNORECASE),
            re.compile(r"session", re.IGNORECASE),
        ]

        # FCM registration tokens: "<instance id>:APA91<opaque>"
        self.device_token_pattern = re.compile(
            r"\b[A-Za-z0-9_-]{8,}:APA91[A-Za-z0-9_-]{20,}"
        )
        self.url_with_params_pattern = re.compile(r"https?://[^\s]+\?[^\s]+")

    def sanitize_for_logging(self, data: Any) -> Any:
        """Sanitize data for logging purposes.

        Recursively processes input data (strings, dicts, lists) to mask
        sensitive information based on predefined patterns.

        Parameters
        ----------
        data: Any
            Data to be sanitized (can be string, dict, list, etc.).

        Returns
        -------
        Any
            Sanitized data with sensitive information masked.
        """
        return self._sanitize_value(data)

    def sanitize_exception_for_logging(self, exception: Exception | str) -> str:
        """Sanitize an exception (or its message) for logging.

        Parameters
        ----------
        exception: Exception | str
            Exception object, or already rendered message, to sanitize.

        Returns
        -------
        str
            Sanitized exception message, or a generic placeholder if
            sanitization fails.
        """
        try:
            if isinstance(exception, BaseException) and exception.args:
                rendered = " ".join(str(arg) for arg in exception.args)
            else:
                rendered = str(exception)
            return self._sanitize_string(rendered)
        except Exception:
            return f"***SANITIZED*** {type(exception).__name__}"

    def mask_device_token(self, token: str | None) -> str:
        """Shorten a device token to a log-safe prefix.

        Parameters
        ----------
        token: str | None
            Device registration token.

        Returns
        -------
        str
            First eight characters followed by a mask, e.g. "dK3j9xQa***".
        """
        if not token:
            return "<none>"
        return f"{str(token)[:8]}***"

    def _is_sensitive_field(self, field_name: str) -> bool:
        """Check if a given field name is considered sensitive.

        Parameters
        ----------
        field_name: str
            Name of the field to check.

        Returns
        -------
        bool
            True if the field name matches any sensitive pattern, False otherwise.
        """
        return any(pattern.search(field_name) for pattern in self.sensitive_patterns)

    def _sanitize_query_params(self, query_string: str) -> str:
        """Mask sensitive values in a URL query string.

        Parameters
        ----------
        query_string: str
            URL query string (e.g., "param1=val1&param2=val2").

        Returns
        -------
        str
            Query string with sensitive parameter values masked.
        """
        sanitized_pairs = []
        for param_pair in query_string.split("&"):
            key, _, value = param_pair.partition("=")
            if self._is_sensitive_field(key):
                value = "***MASKED***"
            sanitized_pairs.append(f"{key}={value}")

        return "&".join(sanitized_pairs)

    def _sanitize_url_with_params(self, url: str) -> str:
        try:
            parsed = urlparse(url)
            if parsed.query:
                return urlunparse(
                    parsed._replace(query=self._sanitize_query_params(parsed.query))
                )
            return url
        except Exception:
            return "***SANITIZED_URL***"

    def _sanitize_string(self, text: str, max_length: int = 1000) -> str:
        """Sanitize a string by masking device tokens and URL parameters.

        Also truncates the string if it exceeds `max_length`.

        Parameters
        ----------
        text: str
            String to sanitize.
        max_length: int, default=1000
            Maximum length of the sanitized string.

        Returns
        -------
        str
            Sanitized and potentially truncated string.
        """
        if not isinstance(text, str):
            text = str(text)

        if len(text) > max_length:
            text = text[:max_length] + "..."

        text = self.device_token_pattern.sub(
            lambda m: self.mask_device_token(m.group()), text
        )
        text = self.url_with_params_pattern.sub(
            lambda m: self._sanitize_url_with_params(m.group()), text
        )

        return text

    def _sanitize_dict(
        self, data: Dict[str, Any], max_depth: int = 5
    ) -> Dict[str, Any]:
        """Recursively sanitize sensitive fields within a dictionary.

        Parameters
        ----------
        data: Dict[str, Any]
            Dictionary to sanitize.
        max_depth: int, default=5
            Maximum recursion depth to prevent infinite loops.

        Returns
        -------
        Dict[str, Any]
            New dictionary with sensitive values masked.
        """
        if max_depth <= 0:
            return {"<max_depth_reached>": "..."}

        sanitized = {}
        for key, value in data.items():
            if self._is_sensitive_field(str(key)):
                sanitized[key] = "***MASKED***"
            else:
                sanitized[key] = self._sanitize_value(value, max_depth - 1)

        return sanitized

    def _sanitize_list(self, data: List[Any], max_depth: int = 5) -> List[Any]:
        if max_depth <= 0:
            return ["<max_depth_reached>"]

        return [self._sanitize_value(item, max_depth - 1) for item in data[:10]]

    def _sanitize_value(self, value: Any, max_depth: int = 5) -> Any:
        """Determine the appropriate sanitization method based on the value type.

        Parameters
        ----------
        value: Any
            Value to sanitize.
        max_depth: int, default=5
            Current recursion depth limit.

        Returns
        -------
        Any
            Sanitized value.
        """
        if value is None:
            return None

        if isinstance(value, dict):
            return self._sanitize_dict(value, max_depth)
        elif isinstance(value, (list, tuple)):
            return self._sanitize_list(list(value), max_depth)
        elif isinstance(value, (int, float, bool)):
            return value
        else:
            return self._sanitize_string(str(value))


class SystemClock(ClockInterface):
    """Wall-clock implementation of `ClockInterface`."""

    def now(self) -> datetime:
        return datetime.now(tz=UTC)
