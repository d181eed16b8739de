from typing import Any, Dict

LEVEL_COLORS = {
    "CRITICAL": "<red>",
    "DEBUG": "<white>",
    "ERROR": "<magenta>",
    "INFO": "<blue>",
    "SUCCESS": "<green>",
    "TRACE": "<dim>",
    "WARNING": "<yellow>",
}

# Context keys that are too noisy for file output
OMITTED_CONTEXT_KEYS = {"request_id", "headers", "user_agent"}


class CustomLogFormat:
    """Manage custom log formatting for console and file outputs.

    Takes a Loguru record dictionary and formats it
    into human-readable strings for different logging sinks, including
    colorization for console output and contextual data for file output.
    """

    def __init__(self, record: Dict[str, Any]) -> None:
        """Initializes the CustomLogFormat with a Loguru record.

        Args:
            record: A dictionary representing the Loguru log record.
        """
        self.record = record
        self.time_str = self.record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-4]
        self.level = self.record["level"].name
        self.level_color = LEVEL_COLORS.get(self.level, "<white>")
        self.closing_color = f"</{self.level_color.strip('<>')}>"

        function = self.record["function"]
        if function == "<module>":
            function = "\\<module\\>"
        self.location = f"{self.record['file']}:{function}:{self.record['line']}"

        request_id = self.record["extra"].get("request_id")
        self.request_tag = f"[{request_id}] " if request_id else ""

    def _escape(self, text: str) -> str:
        """Escape loguru color markup and format braces inside the message."""
        return (
            str(text)
            .replace("{", "{{")
            .replace("}", "}}")
            .replace("<", "\\<")
        )

    def log_console_format(self) -> str:
        """Format the log record for console output.

        Includes timestamp, colored level, request id, file location, and message.

        Returns
        -------
        str
            Formatted string suitable for console logging.
        """
        return (
            f"<dim><bold>{self.time_str}</bold></dim> | "
            f"<level>{self.level_color}{self.level:8}{self.closing_color}</level> | "
            f"<cyan>{self.location}</cyan> - {self.request_tag}"
            f"<level>{self.level_color}{self._escape(self.record['message'])}{self.closing_color}</level>"
            "\n{exception}"
        )

    def log_file_format(self) -> str:
        """Format the log record for file output.

        Includes timestamp, level, request id, file location, message,
        and extra context data (e.g., client ip, method, path).

        Returns
        -------
        str
            Formatted string suitable for file logging.
        """
        context_parts = [
            f"{key}={value}"
            for key, value in self.record["extra"].items()
            if key not in OMITTED_CONTEXT_KEYS
        ]
        context_string = f" | {', '.join(context_parts)}" if context_parts else ""

        return (
            f"{self.time_str} | {self.level:8} | {self.location} - "
            f"{self.request_tag}{self._escape(self.record['message'])}"
            f"{self._escape(context_string)}"
            "\n{exception}"
        )
