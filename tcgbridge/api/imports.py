"""
Product import endpoints.

POST /imports runs one import to completion and returns its result.
GET /imports/{card_id} is the read model the UI polls while rendering.

Status codes for POST /imports:
- 200: succeeded or partial (a product exists)
- 409: an import of the same card is already running
- 422: the card failed validation (nothing was sent to Shopify)
- 502: collection lookup or product creation failed
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from tcgbridge.api.schemas import CardRecordModel, ImportResultResponse, ImportStatusResponse
from tcgbridge.models.card import UiSelections
from tcgbridge.models.import_result import ImportStatus
from tcgbridge.services.import_coordinator import ImportCoordinator
from tcgbridge.services.status_tracker import get_status_tracker
from tcgbridge.shopify.admin_client import get_admin_client

router = APIRouter(prefix="/imports", tags=["imports"])

STATUS_CODES: dict[ImportStatus, int] = {
    ImportStatus.SUCCEEDED: 200,
    ImportStatus.PARTIAL: 200,
    ImportStatus.PENDING: 409,
    ImportStatus.FAILED_VALIDATION: 422,
    ImportStatus.FAILED_REMOTE: 502,
}


class ImportCardRequest(BaseModel):
    """Request model for importing one card."""

    card: CardRecordModel
    selected_price_tier: str | None = Field(
        default=None,
        description="Price tier the merchant picked, e.g. 'holofoil'",
    )


class RunningImportsResponse(BaseModel):
    """Cards with an import in flight."""

    running: list[str]
    any_running: bool


# Default coordinator instance
_coordinator: ImportCoordinator | None = None


def get_import_coordinator() -> ImportCoordinator:
    """
    Get the default import coordinator.

    Shares the process-wide status tracker and admin client.
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = ImportCoordinator(get_status_tracker(), get_admin_client())
    return _coordinator


@router.post(
    "",
    response_model=ImportResultResponse,
    responses={
        409: {"model": ImportResultResponse},
        422: {"model": ImportResultResponse},
        502: {"model": ImportResultResponse},
    },
)
async def import_card(
    body: ImportCardRequest,
    response: Response,
    coordinator: Annotated[ImportCoordinator, Depends(get_import_coordinator)],
) -> ImportResultResponse:
    """Import a card as a Shopify product."""
    result = await coordinator.on_import_requested(
        body.card.to_record(),
        UiSelections(selected_price_tier=body.selected_price_tier),
    )
    response.status_code = STATUS_CODES[result.status]
    if result.status is ImportStatus.PENDING:
        return ImportResultResponse(
            status=result.status.value,
            error_message=f"An import of card '{body.card.id}' is already running",
        )
    return ImportResultResponse.from_result(result)


@router.get("", response_model=RunningImportsResponse)
async def running_imports(
    coordinator: Annotated[ImportCoordinator, Depends(get_import_coordinator)],
) -> RunningImportsResponse:
    """List cards with an import in flight."""
    running = coordinator.tracker.running_ids()
    return RunningImportsResponse(
        running=running,
        any_running=coordinator.tracker.is_any_running(),
    )


@router.get("/{card_id}", response_model=ImportStatusResponse)
async def import_status(
    card_id: str,
    coordinator: Annotated[ImportCoordinator, Depends(get_import_coordinator)],
) -> ImportStatusResponse:
    """Current import state for a card; 'idle' if never imported."""
    return ImportStatusResponse.from_snapshot(card_id, coordinator.get_status(card_id))
