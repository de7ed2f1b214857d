"""Tests for the product import endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from tcgbridge.api.imports import get_import_coordinator
from tcgbridge.config import Settings
from tcgbridge.main import app
from tcgbridge.models.failure import AdminApiError
from tcgbridge.services.import_coordinator import ImportCoordinator
from tcgbridge.services.status_tracker import StatusTracker


@pytest.fixture
def coordinator(admin: AsyncMock) -> ImportCoordinator:
    return ImportCoordinator(StatusTracker(), admin, Settings(shopify_shop_domain="test-shop"))


@pytest.fixture
async def client(coordinator: ImportCoordinator):
    app.dependency_overrides[get_import_coordinator] = lambda: coordinator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def card_payload() -> dict:
    """A card as the UI posts it back from search results."""
    return {
        "id": "swsh4-25",
        "title": "Charizard",
        "description": "Charizard - Rare Holo Pokemon Card from Vivid Voltage Set",
        "vendor": "Pokemon TCG",
        "set_name": "Vivid Voltage",
        "card_number": "25",
        "rarity": "Rare Holo",
        "hp": "170",
        "types": ["Fire"],
        "image_url": "https://images.pokemontcg.io/swsh4/25.png",
        "price_candidates": {"holofoil": 12.5, "reverseHolofoil": 15.0},
    }


class TestImportCard:
    async def test_success(self, client: AsyncClient, card_payload: dict) -> None:
        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "succeeded"
        assert data["product_id"] == "gid://shopify/Product/1001"
        assert data["product_admin_url"] == "https://test-shop.myshopify.com/admin/products/1001"
        assert data["failed_steps"] == []

    async def test_selected_tier_used(
        self, client: AsyncClient, admin: AsyncMock, card_payload: dict
    ) -> None:
        await client.post(
            "/imports",
            json={"card": card_payload, "selected_price_tier": "reverseHolofoil"},
        )

        _, prices = admin.bulk_update_variant_prices.await_args.args
        assert prices == [("gid://shopify/ProductVariant/1", "15.00")]

    async def test_partial(
        self, client: AsyncClient, admin: AsyncMock, card_payload: dict
    ) -> None:
        admin.set_metafields.side_effect = AdminApiError("boom")

        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "partial"
        assert data["failed_steps"] == ["metadata"]
        assert data["step_failures"] == [{"step": "metadata", "message": "boom"}]

    async def test_oversized_hp_imports_as_zero(
        self, client: AsyncClient, admin: AsyncMock, card_payload: dict
    ) -> None:
        """A huge numeric HP is stored as 0 rather than failing the request."""
        card_payload["hp"] = "1e5000"

        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 200
        _, fields = admin.set_metafields.await_args.args
        hp = next(f for f in fields if f["key"] == "hp")
        assert hp["value"] == "0"

    async def test_validation_failure(
        self, client: AsyncClient, admin: AsyncMock, card_payload: dict
    ) -> None:
        card_payload["card_number"] = "  "

        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 422
        data = response.json()
        assert data["status"] == "failed-validation"
        assert data["error_message"] == "Missing required fields: card_number"
        admin.resolve_collection_by_title.assert_not_awaited()

    async def test_remote_failure(
        self, client: AsyncClient, admin: AsyncMock, card_payload: dict
    ) -> None:
        admin.resolve_collection_by_title.return_value = None

        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 502
        data = response.json()
        assert data["status"] == "failed-remote"
        assert data["product_id"] is None

    async def test_already_running(
        self,
        client: AsyncClient,
        coordinator: ImportCoordinator,
        admin: AsyncMock,
        card_payload: dict,
    ) -> None:
        coordinator.tracker.begin("swsh4-25")

        response = await client.post("/imports", json={"card": card_payload})

        assert response.status_code == 409
        data = response.json()
        assert data["status"] == "pending"
        assert "already running" in data["error_message"]
        admin.create_product.assert_not_awaited()


class TestImportStatus:
    async def test_idle_for_unknown_card(self, client: AsyncClient) -> None:
        response = await client.get("/imports/base1-4")

        assert response.status_code == 200
        assert response.json() == {"card_id": "base1-4", "state": "idle", "result": None}

    async def test_reflects_completed_import(
        self, client: AsyncClient, card_payload: dict
    ) -> None:
        await client.post("/imports", json={"card": card_payload})

        response = await client.get("/imports/swsh4-25")

        data = response.json()
        assert data["state"] == "succeeded"
        assert data["result"]["product_handle"] == "pokemon-tcg-charizard"

    async def test_running_imports(
        self, client: AsyncClient, coordinator: ImportCoordinator
    ) -> None:
        coordinator.tracker.begin("swsh4-25")

        response = await client.get("/imports")

        assert response.json() == {"running": ["swsh4-25"], "any_running": True}
