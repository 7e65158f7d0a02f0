"""Liveness endpoint."""

from fastapi import APIRouter

from collegeadmin.api.models import APIResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=APIResponse[dict[str, str]])
def health() -> APIResponse[dict[str, str]]:
    """Report that the service is up."""
    return APIResponse(data={"status": "ok"})
