from fastapi import APIRouter, Depends, status

from config.base import Settings, get_settings

from .responses import SuccessResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=SuccessResponse, status_code=status.HTTP_200_OK)
async def health(settings: Settings = Depends(get_settings)):
    """Report that the service is up.

    Returns
    -------
    SuccessResponse
        Environment name and whether messages are sent in dry-run mode.
    """
    return SuccessResponse(
        data={
            "environment": settings.environment,
            "dry_run": settings.firebase_dry_run,
        },
        message="Push dispatch service is running",
    )
