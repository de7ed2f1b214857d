"""
Card search endpoints.

Proxies the Pokémon TCG API so the embedded admin UI gets results already
shaped as importable card records.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from tcgbridge.api.schemas import CardRecordModel
from tcgbridge.search.pokemon_tcg import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PokemonTcgClient

router = APIRouter(prefix="/cards", tags=["cards"])


class CardSearchResponse(BaseModel):
    """Response model for a card search."""

    query: str
    cards: list[CardRecordModel]
    count: int


def get_search_client() -> PokemonTcgClient:
    return PokemonTcgClient()


@router.get("/search", response_model=CardSearchResponse)
async def search_cards(
    client: Annotated[PokemonTcgClient, Depends(get_search_client)],
    q: Annotated[str, Query(min_length=1, description="Card name or name prefix")],
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> CardSearchResponse:
    """
    Search cards by name, newest sets first.

    Upstream failures surface as a classified 502 (see main.py).
    """
    records = await client.search(q, page_size=page_size)
    cards = [CardRecordModel.from_record(r) for r in records]
    return CardSearchResponse(query=q, cards=cards, count=len(cards))
