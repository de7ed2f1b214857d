"""
Shopify Admin API client.

Typed async operations over the GraphQL Admin API, plus the two plain
HTTP transfers the image step needs (fetching the source image and
posting it to a staged upload target).

Every remote failure surfaces as AdminApiError, or UserErrorsError when
Shopify rejected the input of an otherwise successful request.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from tcgbridge.config import MAX_VARIANTS_PER_PRODUCT, Settings, settings
from tcgbridge.models.failure import AdminApiError, ConfigurationError, UserErrorsError
from tcgbridge.shopify.queries import (
    CREATE_MEDIA_MUTATION,
    CREATE_PRODUCT_MUTATION,
    FIND_COLLECTION_QUERY,
    METAFIELDS_SET_MUTATION,
    SHOP_QUERY,
    STAGED_UPLOADS_CREATE_MUTATION,
    VARIANT_IDS_QUERY,
    VARIANTS_BULK_UPDATE_MUTATION,
)

logger = logging.getLogger(__name__)

USER_AGENT = "TCGBridge/1.0"


@dataclass(frozen=True, slots=True)
class CreatedProduct:
    """Identity of a newly created product."""

    id: str
    handle: str | None


@dataclass(frozen=True, slots=True)
class StagedTarget:
    """
    A temporary signed upload destination.

    Attributes:
        url: Where to POST the bytes
        parameters: Form fields that must accompany the upload, in order
        resource_url: Reference to pass as originalSource when attaching
    """

    url: str
    parameters: list[tuple[str, str]]
    resource_url: str


def normalize_shop_domain(shop: str) -> str:
    """
    Normalize a shop identifier to an https base URL.

    "my-shop" -> "https://my-shop.myshopify.com"
    """
    shop = shop.strip().rstrip("/")
    if not shop.startswith(("https://", "http://")):
        shop = f"https://{shop}"
    host = shop.split("://", 1)[1]
    if "." not in host:
        shop = f"{shop}.myshopify.com"
    return shop


def _check_user_errors(operation: str, payload: dict[str, Any], key: str = "userErrors") -> None:
    errors = payload.get(key) or []
    if errors:
        raise UserErrorsError(operation, errors)


class ShopifyAdminClient:
    """
    Client for the Shopify GraphQL Admin API.

    Opens a short-lived httpx.AsyncClient per call; timeouts are per
    transfer kind (admin API, image fetch, staged upload).
    """

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2024-10",
        timeout: float = 30.0,
        image_fetch_timeout: float = 15.0,
        image_upload_timeout: float = 15.0,
    ) -> None:
        """
        Initialize the admin client.

        Args:
            shop_domain: Shop handle or domain ("my-shop" or "my-shop.myshopify.com")
            access_token: Admin API access token
            api_version: Admin API version segment
            timeout: Admin API request timeout in seconds
            image_fetch_timeout: Source image download timeout in seconds
            image_upload_timeout: Staged upload timeout in seconds
        """
        self.shop_url = normalize_shop_domain(shop_domain)
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self.image_fetch_timeout = image_fetch_timeout
        self.image_upload_timeout = image_upload_timeout

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "ShopifyAdminClient":
        """
        Build a client from application settings.

        Raises:
            ConfigurationError: If the shop domain or access token is blank
        """
        config = config or settings
        missing = [
            name
            for name in ("shopify_shop_domain", "shopify_access_token")
            if not getattr(config, name).strip()
        ]
        if missing:
            raise ConfigurationError(missing)

        return cls(
            shop_domain=config.shopify_shop_domain,
            access_token=config.shopify_access_token,
            api_version=config.shopify_api_version,
            timeout=config.admin_api_timeout,
            image_fetch_timeout=config.image_fetch_timeout,
            image_upload_timeout=config.image_upload_timeout,
        )

    @property
    def graphql_url(self) -> str:
        return f"{self.shop_url}/admin/api/{self.api_version}/graphql.json"

    def product_admin_url(self, product_id: str) -> str:
        """Admin edit link for a product GID (gid://shopify/Product/123)."""
        numeric_id = product_id.rsplit("/", 1)[-1]
        return f"{self.shop_url}/admin/products/{numeric_id}"

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Execute a GraphQL document and return its `data` object.

        Raises:
            AdminApiError: On network failure, non-2xx status, or
                top-level GraphQL errors
        """
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
            "User-Agent": USER_AGENT,
        }
        payload = {"query": query, "variables": variables or {}}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.graphql_url, headers=headers, json=payload)
        except httpx.RequestError as exc:
            raise AdminApiError(f"Network error calling Shopify Admin API: {exc}") from exc

        if response.status_code == 429:
            raise AdminApiError("Shopify Admin API rate limit exceeded", detail="HTTP 429")
        if not response.is_success:
            raise AdminApiError(
                f"Shopify Admin API returned HTTP {response.status_code}",
                detail=response.text[:500],
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise AdminApiError("Shopify Admin API returned invalid JSON") from exc

        if body.get("errors"):
            logger.error("GraphQL errors: %s", body["errors"])
            raise AdminApiError("Shopify Admin API returned errors", detail=str(body["errors"]))

        data = body.get("data")
        if not isinstance(data, dict):
            raise AdminApiError("Shopify Admin API returned no data")
        return data

    async def check_connection(self) -> bool:
        """
        Check that the admin API accepts our credentials.

        Returns:
            True if the shop query succeeds, False otherwise
        """
        try:
            data = await self.execute(SHOP_QUERY)
        except AdminApiError:
            return False
        return bool((data.get("shop") or {}).get("name"))

    async def resolve_collection_by_title(self, title: str) -> str | None:
        """
        Find a collection GID by title.

        Prefers an exact (case-insensitive) title match among the search
        hits, falling back to the first hit.

        Returns:
            Collection GID, or None if no collection matches
        """
        escaped = title.replace('"', '\\"')
        data = await self.execute(FIND_COLLECTION_QUERY, {"query": f'title:"{escaped}"'})
        edges = (data.get("collections") or {}).get("edges") or []
        nodes = [edge["node"] for edge in edges if edge.get("node")]
        if not nodes:
            return None

        for node in nodes:
            if str(node.get("title", "")).casefold() == title.casefold():
                return str(node["id"])
        return str(nodes[0]["id"])

    async def create_product(self, product_input: dict[str, Any]) -> CreatedProduct:
        """
        Create a product.

        Raises:
            UserErrorsError: If Shopify rejects the input
            AdminApiError: On transport failure or missing product in response
        """
        data = await self.execute(CREATE_PRODUCT_MUTATION, {"input": product_input})
        payload = data.get("productCreate") or {}
        _check_user_errors("productCreate", payload)

        product = payload.get("product") or {}
        if not product.get("id"):
            raise AdminApiError("productCreate returned no product")
        return CreatedProduct(id=str(product["id"]), handle=product.get("handle"))

    async def create_staged_upload(self, filename: str, mime_type: str) -> StagedTarget:
        """Request a staged upload target for one image file."""
        data = await self.execute(
            STAGED_UPLOADS_CREATE_MUTATION,
            {
                "input": [
                    {
                        "filename": filename,
                        "mimeType": mime_type,
                        "httpMethod": "POST",
                        "resource": "IMAGE",
                    }
                ]
            },
        )
        payload = data.get("stagedUploadsCreate") or {}
        _check_user_errors("stagedUploadsCreate", payload)

        targets = payload.get("stagedTargets") or []
        if not targets:
            raise AdminApiError("stagedUploadsCreate returned no targets")

        target = targets[0]
        return StagedTarget(
            url=str(target["url"]),
            parameters=[(str(p["name"]), str(p["value"])) for p in target.get("parameters") or []],
            resource_url=str(target["resourceUrl"]),
        )

    async def fetch_image(self, url: str) -> bytes:
        """
        Download source image bytes.

        Raises:
            AdminApiError: On network failure or non-2xx status
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.image_fetch_timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            raise AdminApiError(f"Failed to fetch image '{url}': {exc}") from exc

        if not response.is_success:
            raise AdminApiError(f"Failed to fetch image '{url}': HTTP {response.status_code}")
        return response.content

    async def upload_to_staged_target(
        self,
        target: StagedTarget,
        content: bytes,
        filename: str,
        mime_type: str,
    ) -> None:
        """
        POST bytes to a staged upload target as multipart form data.

        The target's parameters must precede the file field.
        """
        files = {"file": (filename, content, mime_type)}
        try:
            async with httpx.AsyncClient(timeout=self.image_upload_timeout) as client:
                response = await client.post(target.url, data=dict(target.parameters), files=files)
        except httpx.RequestError as exc:
            raise AdminApiError(f"Network error uploading image: {exc}") from exc

        if not response.is_success:
            raise AdminApiError(
                f"Failed to upload image: HTTP {response.status_code}",
                detail=response.text[:500],
            )

    async def attach_media(self, product_id: str, resource_url: str, alt: str) -> None:
        """Attach an uploaded image to a product."""
        data = await self.execute(
            CREATE_MEDIA_MUTATION,
            {
                "productId": product_id,
                "media": [
                    {
                        "alt": alt,
                        "mediaContentType": "IMAGE",
                        "originalSource": resource_url,
                    }
                ],
            },
        )
        payload = data.get("productCreateMedia") or {}
        _check_user_errors("productCreateMedia", payload, key="mediaUserErrors")

    async def set_metafields(self, owner_id: str, fields: list[dict[str, str]]) -> None:
        """Set metafields on an owner resource in one batched call."""
        metafields = [{**field, "ownerId": owner_id} for field in fields]
        data = await self.execute(METAFIELDS_SET_MUTATION, {"metafields": metafields})
        payload = data.get("metafieldsSet") or {}
        _check_user_errors("metafieldsSet", payload)

    async def list_variant_ids(
        self, product_id: str, limit: int = MAX_VARIANTS_PER_PRODUCT
    ) -> list[str]:
        """
        List variant GIDs for a product.

        Raises:
            ValueError: If limit is outside 1..100
        """
        if not 1 <= limit <= MAX_VARIANTS_PER_PRODUCT:
            raise ValueError(f"limit must be between 1 and {MAX_VARIANTS_PER_PRODUCT}")

        data = await self.execute(VARIANT_IDS_QUERY, {"id": product_id, "first": limit})
        product = data.get("product")
        if product is None:
            raise AdminApiError(f"Product not found: {product_id}")

        nodes = (product.get("variants") or {}).get("nodes") or []
        return [str(node["id"]) for node in nodes]

    async def bulk_update_variant_prices(
        self, product_id: str, prices: list[tuple[str, str]]
    ) -> None:
        """
        Update variant prices in one call.

        Args:
            product_id: Product GID
            prices: (variant GID, price string) pairs
        """
        variants = [{"id": variant_id, "price": price} for variant_id, price in prices]
        data = await self.execute(
            VARIANTS_BULK_UPDATE_MUTATION,
            {"productId": product_id, "variants": variants},
        )
        payload = data.get("productVariantsBulkUpdate") or {}
        _check_user_errors("productVariantsBulkUpdate", payload)


# Default client instance
_client: ShopifyAdminClient | None = None


def get_admin_client() -> ShopifyAdminClient:
    """
    Get the default admin client instance.

    Returns:
        Singleton ShopifyAdminClient built from settings
    """
    global _client
    if _client is None:
        _client = ShopifyAdminClient.from_settings()
    return _client


def reset_admin_client() -> None:
    """Drop the default client so the next call rebuilds it from settings."""
    global _client
    _client = None
