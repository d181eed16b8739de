import contextvars
import uuid
from typing import Any, Dict

request_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "request_context", default={}
)


class RequestContextLogger:
    """Context manager for adding request-specific information to logs.

    Helps track every log line that belongs to the same inbound request or
    CLI invocation. Usable with both `with` and `async with`; nested contexts
    extend the enclosing one instead of replacing it.
    """

    def __init__(self, request_id: str | None = None, **context):
        self.request_id = request_id or str(uuid.uuid4())[:8]
        self.context = {"request_id": self.request_id, **context}
        self.token = None

    def __enter__(self):
        """Enter the context, set the request context.

        Returns
        -------
        RequestContextLogger
            Instance of `RequestContextLogger`.
        """
        self.token = request_context.set({**request_context.get({}), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit the context, reset the request context."""
        if self.token is not None:
            request_context.reset(self.token)
            self.token = None

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.__exit__(exc_type, exc_val, exc_tb)
