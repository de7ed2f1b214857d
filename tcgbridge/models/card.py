import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    One search result from the external trading-card API.

    Produced by the search collaborator and handed to the import workflow
    untouched. Any attribute may be missing or oddly typed; the sanitizer
    is the only place that interprets them.

    Attributes:
        id: Opaque external identifier (e.g. "swsh4-25"). Sole key for
            import status tracking.
        types: Card energy types, either a list or an already-serialized
            JSON array string.
        price_candidates: Price tier name -> decimal value (or a raw
            TCGplayer tier object with "market"/"mid" keys).
        selected_price_tier: Tier the merchant picked before importing.
        price: Legacy single base price, used when no tier resolves.
        marketplace_prices: Raw TCGplayer price map, stored verbatim as a
            JSON metafield.
    """

    id: str
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


@dataclass(frozen=True, slots=True)
class UiSelections:
    """Choices the merchant made on a search result before clicking import."""

    selected_price_tier: str | None = None


@dataclass(frozen=True, slots=True)
class ImportRequest:
    """
    Sanitized, validated input to the import orchestrator.

    Built once per import click by sanitize(), consumed by the
    orchestrator, then discarded.

    INVARIANT: title, set_name and card_number are non-empty.
    """

    source_id: str
    title: str
    set_name: str
    card_number: str
    description: str = ""
    vendor: str = ""
    product_type: str = "Trading Card"
    rarity: str = ""
    artist: str = ""
    hp: str = "0"
    types: str = "[]"
    image_url: str = ""
    price: Decimal | None = Decimal("0")
    marketplace_url: str = ""
    marketplace_prices: str = "{}"

    @property
    def type_list(self) -> list[str]:
        """Decoded `types` as a list of strings."""
        return [str(t) for t in json.loads(self.types)]

    def as_card_record(self) -> CardRecord:
        """
        Re-express this request as a card record.

        Sanitizing the result yields an identical request, which is what
        makes sanitize() idempotent.
        """
        return CardRecord(
            id=self.source_id,
            title=self.title,
            description=self.description,
            vendor=self.vendor,
            product_type=self.product_type,
            set_name=self.set_name,
            card_number=self.card_number,
            rarity=self.rarity,
            artist=self.artist,
            hp=self.hp,
            types=self.types,
            image_url=self.image_url,
            price=self.price,
            marketplace_url=self.marketplace_url,
            marketplace_prices=self.marketplace_prices,
        )
