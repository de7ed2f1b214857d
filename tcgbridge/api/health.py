"""
Health check endpoints.

Provides liveness and readiness probes with an admin API connectivity check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from tcgbridge.shopify.admin_client import ShopifyAdminClient, get_admin_client

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    admin_api: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    admin: Annotated[ShopifyAdminClient, Depends(get_admin_client)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns ready if the Shopify Admin API accepts our credentials.
    Returns 503 otherwise.
    """
    if await admin.check_connection():
        return HealthResponse(status="ready", admin_api="connected")

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", admin_api="disconnected")
