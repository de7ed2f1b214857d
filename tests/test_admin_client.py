"""Tests for the Shopify Admin API client."""

import json

import httpx
import pytest
import respx

from tcgbridge.config import Settings
from tcgbridge.models.failure import AdminApiError, ConfigurationError, UserErrorsError
from tcgbridge.shopify import admin_client as admin_client_module
from tcgbridge.shopify.admin_client import (
    ShopifyAdminClient,
    StagedTarget,
    get_admin_client,
    normalize_shop_domain,
)

GRAPHQL_URL = "https://test-shop.myshopify.com/admin/api/2024-10/graphql.json"
IMAGE_URL = "https://images.pokemontcg.io/swsh4/25.png"
STAGED_URL = "https://shopify-staged-uploads.storage.googleapis.com/"


@pytest.fixture
def client() -> ShopifyAdminClient:
    return ShopifyAdminClient(shop_domain="test-shop", access_token="shpat_test")


def _data(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"data": data})


def _sent(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


class TestNormalizeShopDomain:
    @pytest.mark.parametrize(
        ("shop", "expected"),
        [
            ("test-shop", "https://test-shop.myshopify.com"),
            ("test-shop.myshopify.com", "https://test-shop.myshopify.com"),
            ("https://test-shop.myshopify.com/", "https://test-shop.myshopify.com"),
            ("shop.example.com", "https://shop.example.com"),
        ],
    )
    def test_normalizes(self, shop: str, expected: str) -> None:
        assert normalize_shop_domain(shop) == expected


class TestExecute:
    @respx.mock
    async def test_sends_token_and_returns_data(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(return_value=_data({"shop": {"name": "Test"}}))

        data = await client.execute("query { shop { name } }", {"a": 1})

        assert data == {"shop": {"name": "Test"}}
        request = route.calls.last.request
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        assert _sent(route)["variables"] == {"a": 1}

    @respx.mock
    async def test_graphql_errors_raise(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(
            return_value=httpx.Response(200, json={"errors": [{"message": "Field 'x' missing"}]})
        )

        with pytest.raises(AdminApiError, match="returned errors"):
            await client.execute("query { x }")

    @respx.mock
    async def test_http_error_raises(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(return_value=httpx.Response(500, text="oops"))

        with pytest.raises(AdminApiError, match="HTTP 500"):
            await client.execute("query { shop { name } }")

    @respx.mock
    async def test_rate_limit_raises(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(return_value=httpx.Response(429))

        with pytest.raises(AdminApiError, match="rate limit"):
            await client.execute("query { shop { name } }")

    @respx.mock
    async def test_network_error_raises(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(AdminApiError, match="Network error"):
            await client.execute("query { shop { name } }")

    @respx.mock
    async def test_check_connection(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(return_value=_data({"shop": {"name": "Test"}}))
        assert await client.check_connection() is True

        respx.post(GRAPHQL_URL).mock(return_value=httpx.Response(401))
        assert await client.check_connection() is False


class TestResolveCollection:
    @respx.mock
    async def test_prefers_exact_title(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {
                    "collections": {
                        "edges": [
                            {"node": {"id": "gid://c/2", "title": "Trading Cards Sale"}},
                            {"node": {"id": "gid://c/1", "title": "collectible trading cards"}},
                        ]
                    }
                }
            )
        )

        collection_id = await client.resolve_collection_by_title("Collectible Trading Cards")

        assert collection_id == "gid://c/1"
        assert _sent(route)["variables"]["query"] == 'title:"Collectible Trading Cards"'

    @respx.mock
    async def test_not_found(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(return_value=_data({"collections": {"edges": []}}))

        assert await client.resolve_collection_by_title("Missing") is None


class TestCreateProduct:
    @respx.mock
    async def test_returns_created_product(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {
                    "productCreate": {
                        "product": {"id": "gid://shopify/Product/1001", "handle": "charizard"},
                        "userErrors": [],
                    }
                }
            )
        )

        product = await client.create_product({"title": "Charizard"})

        assert product.id == "gid://shopify/Product/1001"
        assert product.handle == "charizard"
        assert _sent(route)["variables"]["input"] == {"title": "Charizard"}

    @respx.mock
    async def test_user_errors_raise(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {
                    "productCreate": {
                        "product": None,
                        "userErrors": [{"field": ["title"], "message": "Title can't be blank"}],
                    }
                }
            )
        )

        with pytest.raises(UserErrorsError) as exc_info:
            await client.create_product({"title": ""})

        assert exc_info.value.message == "productCreate: Title can't be blank"


class TestImageTransfer:
    @respx.mock
    async def test_staged_upload_target(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {
                    "stagedUploadsCreate": {
                        "stagedTargets": [
                            {
                                "url": STAGED_URL,
                                "resourceUrl": f"{STAGED_URL}tmp/1/charizard.png",
                                "parameters": [
                                    {"name": "key", "value": "tmp/1/charizard.png"},
                                    {"name": "policy", "value": "abc"},
                                ],
                            }
                        ],
                        "userErrors": [],
                    }
                }
            )
        )

        target = await client.create_staged_upload("charizard.png", "image/png")

        assert target.url == STAGED_URL
        assert target.parameters == [("key", "tmp/1/charizard.png"), ("policy", "abc")]
        assert target.resource_url.endswith("tmp/1/charizard.png")

    @respx.mock
    async def test_fetch_image(self, client: ShopifyAdminClient) -> None:
        respx.get(IMAGE_URL).mock(return_value=httpx.Response(200, content=b"png-bytes"))

        assert await client.fetch_image(IMAGE_URL) == b"png-bytes"

    @respx.mock
    async def test_fetch_image_404(self, client: ShopifyAdminClient) -> None:
        respx.get(IMAGE_URL).mock(return_value=httpx.Response(404))

        with pytest.raises(AdminApiError, match="HTTP 404"):
            await client.fetch_image(IMAGE_URL)

    @respx.mock
    async def test_upload_sends_parameters_and_file(self, client: ShopifyAdminClient) -> None:
        route = respx.post(STAGED_URL).mock(return_value=httpx.Response(204))
        target = StagedTarget(
            url=STAGED_URL,
            parameters=[("key", "tmp/1/charizard.png")],
            resource_url=f"{STAGED_URL}tmp/1/charizard.png",
        )

        await client.upload_to_staged_target(target, b"png-bytes", "charizard.png", "image/png")

        body = route.calls.last.request.content
        assert b'name="key"' in body
        assert b"tmp/1/charizard.png" in body
        assert b'filename="charizard.png"' in body
        assert b"png-bytes" in body

    @respx.mock
    async def test_upload_rejected(self, client: ShopifyAdminClient) -> None:
        respx.post(STAGED_URL).mock(return_value=httpx.Response(403, text="denied"))
        target = StagedTarget(url=STAGED_URL, parameters=[], resource_url="x")

        with pytest.raises(AdminApiError, match="HTTP 403"):
            await client.upload_to_staged_target(target, b"", "a.png", "image/png")

    @respx.mock
    async def test_attach_media_user_errors(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {
                    "productCreateMedia": {
                        "media": [],
                        "mediaUserErrors": [{"field": ["media"], "message": "Invalid source"}],
                    }
                }
            )
        )

        with pytest.raises(UserErrorsError, match="Invalid source"):
            await client.attach_media("gid://shopify/Product/1", "https://x/y.png", alt="x")


class TestMetafieldsAndVariants:
    @respx.mock
    async def test_set_metafields_adds_owner(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(
            return_value=_data({"metafieldsSet": {"metafields": [], "userErrors": []}})
        )

        await client.set_metafields(
            "gid://shopify/Product/1",
            [{"namespace": "pokemon_tcg", "key": "hp", "type": "number_integer", "value": "170"}],
        )

        sent = _sent(route)["variables"]["metafields"]
        assert sent[0]["ownerId"] == "gid://shopify/Product/1"
        assert sent[0]["value"] == "170"

    @respx.mock
    async def test_list_variant_ids(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(
            return_value=_data(
                {"product": {"variants": {"nodes": [{"id": "gid://v/1"}, {"id": "gid://v/2"}]}}}
            )
        )

        variant_ids = await client.list_variant_ids("gid://shopify/Product/1")

        assert variant_ids == ["gid://v/1", "gid://v/2"]
        assert _sent(route)["variables"]["first"] == 100

    @pytest.mark.parametrize("limit", [0, 101])
    async def test_list_variant_ids_limit_bounds(
        self, client: ShopifyAdminClient, limit: int
    ) -> None:
        with pytest.raises(ValueError, match="between 1 and 100"):
            await client.list_variant_ids("gid://shopify/Product/1", limit=limit)

    @respx.mock
    async def test_list_variant_ids_missing_product(self, client: ShopifyAdminClient) -> None:
        respx.post(GRAPHQL_URL).mock(return_value=_data({"product": None}))

        with pytest.raises(AdminApiError, match="Product not found"):
            await client.list_variant_ids("gid://shopify/Product/404")

    @respx.mock
    async def test_bulk_update_prices(self, client: ShopifyAdminClient) -> None:
        route = respx.post(GRAPHQL_URL).mock(
            return_value=_data({"productVariantsBulkUpdate": {"userErrors": []}})
        )

        await client.bulk_update_variant_prices("gid://p/1", [("gid://v/1", "12.50")])

        variables = _sent(route)["variables"]
        assert variables == {
            "productId": "gid://p/1",
            "variants": [{"id": "gid://v/1", "price": "12.50"}],
        }


class TestDefaultClient:
    def test_product_admin_url(self, client: ShopifyAdminClient) -> None:
        assert (
            client.product_admin_url("gid://shopify/Product/1001")
            == "https://test-shop.myshopify.com/admin/products/1001"
        )

    def test_from_settings(self) -> None:
        config = Settings(
            shopify_shop_domain="other-shop",
            shopify_access_token="t",
            shopify_api_version="2025-01",
        )

        client = ShopifyAdminClient.from_settings(config)

        assert client.graphql_url == (
            "https://other-shop.myshopify.com/admin/api/2025-01/graphql.json"
        )

    @pytest.mark.parametrize(
        ("domain", "token", "missing"),
        [
            ("", "t", ["shopify_shop_domain"]),
            ("test-shop", "  ", ["shopify_access_token"]),
            ("", "", ["shopify_shop_domain", "shopify_access_token"]),
        ],
    )
    def test_from_settings_requires_credentials(
        self, domain: str, token: str, missing: list[str]
    ) -> None:
        """Blank credentials fail fast instead of building https://.myshopify.com."""
        config = Settings(shopify_shop_domain=domain, shopify_access_token=token)

        with pytest.raises(ConfigurationError) as exc_info:
            ShopifyAdminClient.from_settings(config)

        assert exc_info.value.missing_settings == missing
        assert exc_info.value.status_code == 503

    def test_singleton(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            admin_client_module,
            "settings",
            Settings(shopify_shop_domain="test-shop", shopify_access_token="t"),
        )

        assert get_admin_client() is get_admin_client()
