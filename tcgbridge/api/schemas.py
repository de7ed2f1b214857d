"""
Request and response models shared by the API routers.

The admin UI posts search results back exactly as it received them, so
CardRecordModel is both the search response item and the import input.
"""

from typing import Any

from pydantic import BaseModel, Field

from tcgbridge.models.card import CardRecord
from tcgbridge.models.import_result import ImportResult
from tcgbridge.services.status_tracker import StatusSnapshot


class CardRecordModel(BaseModel):
    """A card search result."""

    id: str = Field(..., description="External card id, e.g. 'swsh4-25'")
    title: str | None = None
    description: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    set_name: str | None = None
    card_number: str | None = None
    rarity: str | None = None
    artist: str | None = None
    hp: Any = None
    types: Any = None
    image_url: str | None = None
    price_candidates: dict[str, Any] | None = None
    selected_price_tier: str | None = None
    price: Any = None
    marketplace_url: str | None = None
    marketplace_prices: Any = None
    series: str | None = None
    printed_total: int | None = None
    release_date: str | None = None

    @classmethod
    def from_record(cls, record: CardRecord) -> "CardRecordModel":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            vendor=record.vendor,
            product_type=record.product_type,
            set_name=record.set_name,
            card_number=record.card_number,
            rarity=record.rarity,
            artist=record.artist,
            hp=record.hp,
            types=record.types,
            image_url=record.image_url,
            price_candidates=record.price_candidates,
            selected_price_tier=record.selected_price_tier,
            price=record.price,
            marketplace_url=record.marketplace_url,
            marketplace_prices=record.marketplace_prices,
            series=record.series,
            printed_total=record.printed_total,
            release_date=record.release_date,
        )

    def to_record(self) -> CardRecord:
        return CardRecord(**self.model_dump())


class StepFailureModel(BaseModel):
    step: str
    message: str


class ImportResultResponse(BaseModel):
    """Outcome of one import."""

    status: str
    product_id: str | None = None
    product_handle: str | None = None
    product_admin_url: str | None = None
    error_message: str | None = None
    failed_steps: list[str] = Field(default_factory=list)
    step_failures: list[StepFailureModel] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResultResponse":
        return cls.model_validate(result.to_dict())


class ImportStatusResponse(BaseModel):
    """Import state of one card, as the UI renders it."""

    card_id: str
    state: str
    result: ImportResultResponse | None = None

    @classmethod
    def from_snapshot(cls, card_id: str, snapshot: StatusSnapshot) -> "ImportStatusResponse":
        return cls(
            card_id=card_id,
            state=snapshot.state.value,
            result=ImportResultResponse.from_result(snapshot.result) if snapshot.result else None,
        )
