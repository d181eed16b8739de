from typing import Any

from fastapi import status
from pydantic import BaseModel


class StandardResponse(BaseModel):
    """Base response model for non-dispatch API operations.

    Attributes
    ----------
    success: bool, default=True
        Boolean indicating if API request was successful.
    data: Any, default=None
        Actual response data payload.
    """

    success: bool = True
    data: Any = None


class SuccessResponse(StandardResponse):
    """Standard response model for successful API operations (HTTP 200 OK).

    Inherits `success` and `data` from `StandardResponse`.

    Attributes
    ----------
    message: str, default="Resource action successful"
        Descriptive success message.
    status_code: int, default=200
        HTTP status code.
    """

    message: str = "Resource action successful"
    status_code: int = status.HTTP_200_OK
