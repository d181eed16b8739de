from abc import ABC, abstractmethod
from datetime import datetime


class ClockInterface(ABC):
    """Abstract base class for time sources.

    Keeps timestamp generation behind an injectable capability so that
    payload construction stays deterministic under test.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current moment as a timezone-aware datetime.

        Returns:
            Current datetime in UTC.
        """
        pass

    def isoformat(self) -> str:
        """Return the current moment as an ISO-8601 UTC string.

        Uses millisecond precision and a trailing "Z", the format mobile
        clients parse for `updated_on` and `timestamp` fields.

        Returns:
            ISO-8601 formatted timestamp, e.g. "2025-01-31T09:15:00.123Z".
        """
        moment = self.now()
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
