"""
Pokémon TCG API search client.

Queries https://pokemontcg.io for cards by name and maps each result to
a CardRecord the import workflow can consume.

API docs: https://docs.pokemontcg.io/api-reference/cards/search-cards
"""

from decimal import Decimal
from typing import Any

import httpx

from tcgbridge.config import settings
from tcgbridge.models.card import CardRecord
from tcgbridge.models.failure import SearchError
from tcgbridge.services.sanitizer import to_decimal

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 250

VENDOR = "Pokemon TCG"
PRODUCT_TYPE = "Trading Card"


def build_search_query(term: str) -> str:
    """Prefix name search, e.g. 'char' -> 'name:"char*"'."""
    escaped = term.strip().replace('"', "")
    return f'name:"{escaped}*"'


def _price_candidates(prices: dict[str, Any]) -> dict[str, Decimal]:
    """Tier name -> market price (mid as fallback), dropping unpriced tiers."""
    candidates: dict[str, Decimal] = {}
    for tier, values in prices.items():
        number = to_decimal(values)
        if number is not None:
            candidates[tier] = number
    return candidates


def card_to_record(card: dict[str, Any]) -> CardRecord:
    """
    Map one Pokémon TCG API card object to a CardRecord.

    Args:
        card: Card object from the /v2/cards response

    Returns:
        CardRecord with set details, TCGplayer link and price tiers
    """
    card_set = card.get("set") or {}
    images = card.get("images") or {}
    tcgplayer = card.get("tcgplayer") or {}
    prices = tcgplayer.get("prices") or {}

    name = card.get("name", "")
    rarity = card.get("rarity")
    set_name = card_set.get("name", "")

    return CardRecord(
        id=str(card["id"]),
        title=name,
        description=f"{name} - {rarity or 'Unknown'} Pokemon Card from {set_name} Set",
        vendor=VENDOR,
        product_type=PRODUCT_TYPE,
        set_name=set_name,
        card_number=card.get("number"),
        rarity=rarity,
        artist=card.get("artist"),
        hp=card.get("hp"),
        types=list(card.get("types") or []),
        image_url=images.get("small") or images.get("large"),
        price_candidates=_price_candidates(prices),
        marketplace_url=tcgplayer.get("url"),
        marketplace_prices=prices or None,
        series=card_set.get("series"),
        printed_total=card_set.get("printedTotal"),
        release_date=card_set.get("releaseDate"),
    )


class PokemonTcgClient:
    """
    Client for the Pokémon TCG card search API.

    An API key is optional; without one the API applies a lower rate limit.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = (base_url or settings.pokemon_tcg_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.pokemon_tcg_api_key
        self.timeout = timeout

    async def search(self, term: str, page_size: int = DEFAULT_PAGE_SIZE) -> list[CardRecord]:
        """
        Search cards by name prefix, newest sets first.

        Args:
            term: Card name or name prefix
            page_size: Results to return (1-250)

        Returns:
            Matching cards as CardRecords

        Raises:
            SearchError: If the term is empty, or the request fails
        """
        if not term or not term.strip():
            raise SearchError("Please enter a search term")

        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        params: dict[str, str | int] = {
            "q": build_search_query(term),
            "pageSize": page_size,
            "orderBy": "-set.releaseDate",
        }
        headers = {"X-Api-Key": self.api_key} if self.api_key else {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/cards", params=params, headers=headers
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise SearchError(
                "Failed to fetch Pokemon cards",
                detail=f"HTTP {e.response.status_code}",
            ) from e
        except httpx.RequestError as e:
            raise SearchError("Failed to fetch Pokemon cards", detail=str(e)) from e
        except ValueError as e:
            raise SearchError("Failed to fetch Pokemon cards", detail="Invalid JSON") from e

        cards = data.get("data", []) if isinstance(data, dict) else None
        if not isinstance(cards, list):
            raise SearchError("Failed to fetch Pokemon cards", detail="Unexpected response shape")

        return [
            card_to_record(card) for card in cards if isinstance(card, dict) and card.get("id")
        ]
