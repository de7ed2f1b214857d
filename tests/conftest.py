from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from tcgbridge.api import imports as imports_module
from tcgbridge.models.card import CardRecord
from tcgbridge.services import status_tracker as tracker_module
from tcgbridge.shopify.admin_client import (
    CreatedProduct,
    ShopifyAdminClient,
    StagedTarget,
    reset_admin_client,
)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset process-wide singletons between tests.

    The status tracker in particular lives for the whole process, so a
    running entry left by one test would block imports in the next.
    """
    tracker_module._tracker = None
    reset_admin_client()
    imports_module._coordinator = None
    yield
    tracker_module._tracker = None
    reset_admin_client()
    imports_module._coordinator = None


@pytest.fixture
def charizard() -> CardRecord:
    """A complete card record as produced by the search client."""
    return CardRecord(
        id="swsh4-25",
        title="Charizard",
        description="Charizard - Rare Holo Pokemon Card from Vivid Voltage Set",
        vendor="Pokemon TCG",
        product_type="Trading Card",
        set_name="Vivid Voltage",
        card_number="25",
        rarity="Rare Holo",
        artist="Ryuta Fuse",
        hp="170",
        types=["Fire"],
        image_url="https://images.pokemontcg.io/swsh4/25.png",
        price_candidates={"holofoil": Decimal("12.5"), "reverseHolofoil": Decimal("15.0")},
        marketplace_url="https://prices.pokemontcg.io/tcgplayer/swsh4-25",
        marketplace_prices={"holofoil": {"low": 9.0, "mid": 11.0, "market": 12.5}},
        series="Sword & Shield",
        printed_total=185,
        release_date="2020/11/13",
    )


@pytest.fixture
def admin() -> AsyncMock:
    """Admin API client mock where every remote call succeeds."""
    client = AsyncMock(spec=ShopifyAdminClient)
    client.resolve_collection_by_title.return_value = "gid://shopify/Collection/1"
    client.create_product.return_value = CreatedProduct(
        id="gid://shopify/Product/1001", handle="pokemon-tcg-charizard"
    )
    client.create_staged_upload.return_value = StagedTarget(
        url="https://shopify-staged-uploads.storage.googleapis.com/",
        parameters=[("key", "tmp/1/charizard.png"), ("policy", "abc")],
        resource_url="https://shopify-staged-uploads.storage.googleapis.com/tmp/1/charizard.png",
    )
    client.fetch_image.return_value = b"\x89PNG fake image"
    client.list_variant_ids.return_value = ["gid://shopify/ProductVariant/1"]
    client.product_admin_url = MagicMock(
        return_value="https://test-shop.myshopify.com/admin/products/1001"
    )
    return client
