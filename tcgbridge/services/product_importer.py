"""
Product import orchestration.

Materializes one sanitized card as one Shopify product through an
ordered sequence of remote calls:

    1. Resolve target collection   (fatal)
    2. Create base product         (fatal)
    3. Upload and attach image     (non-fatal, only with an image URL)
    4. Set structured metadata     (non-fatal)
    5. Price variants              (non-fatal, only with a numeric price)

Steps 1-2 are hard dependencies: failure means failed-remote and no
product. Once step 2 succeeds the product is durable. Failures in steps
3-5 are captured as StepFailure values and the run ends partial.

INVARIANT: import_product() never raises for remote failures. Steps run
strictly in order; nothing is rolled back.
"""

import logging
import mimetypes
import re
from collections.abc import Awaitable
from decimal import Decimal
from typing import Any, Protocol

from tcgbridge.config import MAX_VARIANTS_PER_PRODUCT, Settings, settings
from tcgbridge.models.card import ImportRequest
from tcgbridge.models.failure import KnownError, RemoteFatalError
from tcgbridge.models.import_result import ImportResult, ImportStep, StepFailure
from tcgbridge.services.metafields import build_card_metafields
from tcgbridge.shopify.admin_client import CreatedProduct, StagedTarget

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

IMAGE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class AdminClient(Protocol):
    """The admin API operations the import workflow depends on."""

    async def resolve_collection_by_title(self, title: str) -> str | None: ...

    async def create_product(self, product_input: dict[str, Any]) -> CreatedProduct: ...

    async def create_staged_upload(self, filename: str, mime_type: str) -> StagedTarget: ...

    async def fetch_image(self, url: str) -> bytes: ...

    async def upload_to_staged_target(
        self, target: StagedTarget, content: bytes, filename: str, mime_type: str
    ) -> None: ...

    async def attach_media(self, product_id: str, resource_url: str, alt: str) -> None: ...

    async def set_metafields(self, owner_id: str, fields: list[dict[str, str]]) -> None: ...

    async def list_variant_ids(self, product_id: str, limit: int = ...) -> list[str]: ...

    async def bulk_update_variant_prices(
        self, product_id: str, prices: list[tuple[str, str]]
    ) -> None: ...

    def product_admin_url(self, product_id: str) -> str: ...


def _error_message(exc: Exception) -> str:
    if isinstance(exc, KnownError):
        return exc.message
    return str(exc) or type(exc).__name__


def sanitize_filename(name: str) -> str:
    """
    Make a storage-safe file name.

    "Charizard ex.jpg" -> "charizard_ex_jpg"
    """
    name = re.sub(r"[^a-z0-9_-]", "_", name, flags=re.IGNORECASE)
    name = re.sub(r"_+", "_", name)
    return name.strip("_").lower()


def image_file_details(image_url: str, title: str) -> tuple[str, str]:
    """
    Derive the staged upload filename and MIME type for a source image.

    Returns:
        (filename, mime_type); MIME type guessed from the URL extension,
        defaulting to JPEG
    """
    path = image_url.split("?", 1)[0]
    mime_type, _ = mimetypes.guess_type(path)
    if mime_type is None or not mime_type.startswith("image/"):
        mime_type = DEFAULT_IMAGE_MIME_TYPE

    extension = (
        IMAGE_EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ".jpg"
    )

    stem = sanitize_filename(title) or "card"
    return f"{stem}{extension}", mime_type


def format_product_title(source: str, request: ImportRequest) -> str:
    """Conventional product title: '<Source> | <card name> | <set> / <card number>'."""
    return f"{source} | {request.title} | {request.set_name} / {request.card_number}"


def format_price(price: Decimal) -> str:
    return f"{price:.2f}"


class ProductImporter:
    """
    Runs the import workflow for one card at a time.

    Stateless between runs; the caller serializes retries for the same
    card through the status tracker.
    """

    def __init__(self, admin_client: AdminClient, config: Settings | None = None) -> None:
        self.admin = admin_client
        self.config = config or settings

    async def import_product(self, request: ImportRequest) -> ImportResult:
        """
        Import one card as a product.

        Args:
            request: Sanitized import request

        Returns:
            ImportResult: succeeded, partial, or failed-remote
        """
        logger.info(
            "product_import_started",
            extra={"source_id": request.source_id, "title": request.title},
        )

        try:
            collection_id = await self._resolve_collection()
            product = await self._create_product(request, collection_id)
        except RemoteFatalError as exc:
            logger.error(
                "product_import_failed",
                extra={"source_id": request.source_id, "step": exc.step, "error": exc.message},
            )
            return ImportResult.failed_remote(ImportStep(exc.step), exc.message)

        failures: list[StepFailure] = []

        if request.image_url:
            await self._run_step(
                ImportStep.IMAGE, self._attach_image(product.id, request), failures
            )

        await self._run_step(ImportStep.METADATA, self._set_metadata(product.id, request), failures)

        if request.price is None or not request.price.is_finite():
            logger.info(
                "price_step_skipped",
                extra={"source_id": request.source_id, "price": str(request.price)},
            )
        else:
            await self._run_step(
                ImportStep.PRICE, self._set_prices(product.id, request.price), failures
            )

        result = ImportResult.from_steps(
            product_id=product.id,
            product_handle=product.handle,
            failures=failures,
            product_admin_url=self.admin.product_admin_url(product.id),
        )
        logger.info(
            "product_import_finished",
            extra={
                "source_id": request.source_id,
                "product_id": product.id,
                "status": result.status.value,
                "failed_steps": sorted(s.value for s in result.failed_steps),
            },
        )
        return result

    # =========================================================================
    # FATAL STEPS
    # =========================================================================

    async def _resolve_collection(self) -> str:
        title = self.config.target_collection_title
        try:
            collection_id = await self.admin.resolve_collection_by_title(title)
        except Exception as exc:
            raise RemoteFatalError(
                ImportStep.COLLECTION.value,
                f"Could not resolve collection '{title}': {_error_message(exc)}",
            ) from exc

        if not collection_id:
            raise RemoteFatalError(
                ImportStep.COLLECTION.value,
                f"Collection '{title}' not found",
            )
        return collection_id

    async def _create_product(self, request: ImportRequest, collection_id: str) -> CreatedProduct:
        tags = [*request.type_list, self.config.product_title_source]
        product_input = {
            "title": format_product_title(self.config.product_title_source, request),
            "descriptionHtml": request.description,
            "vendor": request.vendor,
            "productType": request.product_type,
            "status": self.config.product_status,
            "collectionsToJoin": [collection_id],
            "tags": tags,
        }

        try:
            product = await self.admin.create_product(product_input)
        except Exception as exc:
            raise RemoteFatalError(
                ImportStep.PRODUCT.value,
                f"Product creation failed: {_error_message(exc)}",
            ) from exc

        logger.info(
            "product_created",
            extra={"source_id": request.source_id, "product_id": product.id},
        )
        return product

    # =========================================================================
    # ENRICHMENT STEPS
    # =========================================================================

    async def _run_step(
        self,
        step: ImportStep,
        work: Awaitable[None],
        failures: list[StepFailure],
    ) -> None:
        """Await one enrichment step, recording (not raising) its failure."""
        try:
            await work
        except Exception as exc:
            message = _error_message(exc)
            logger.warning(
                "import_step_failed",
                extra={"step": step.value, "error": message},
            )
            failures.append(StepFailure(step=step, message=message))

    async def _attach_image(self, product_id: str, request: ImportRequest) -> None:
        filename, mime_type = image_file_details(request.image_url, request.title)

        target = await self.admin.create_staged_upload(filename, mime_type)
        content = await self.admin.fetch_image(request.image_url)
        await self.admin.upload_to_staged_target(target, content, filename, mime_type)
        await self.admin.attach_media(
            product_id,
            target.resource_url,
            alt=f"{request.title} - {request.set_name}",
        )

    async def _set_metadata(self, product_id: str, request: ImportRequest) -> None:
        fields = build_card_metafields(
            request,
            namespace=self.config.metafield_namespace,
            marketplace_namespace=self.config.marketplace_metafield_namespace,
        )
        await self.admin.set_metafields(product_id, fields)

    async def _set_prices(self, product_id: str, price: Decimal) -> None:
        variant_ids = await self.admin.list_variant_ids(product_id, limit=MAX_VARIANTS_PER_PRODUCT)
        if not variant_ids:
            raise ValueError("Product has no variants to price")

        amount = format_price(price)
        await self.admin.bulk_update_variant_prices(
            product_id, [(variant_id, amount) for variant_id in variant_ids]
        )


async def import_product(
    request: ImportRequest,
    admin_client: AdminClient,
    config: Settings | None = None,
) -> ImportResult:
    """Run the import workflow once with a throwaway ProductImporter."""
    return await ProductImporter(admin_client, config).import_product(request)
