"""
TCGBridge services.

The product import workflow: sanitization, orchestration and status tracking.
"""

from tcgbridge.services.import_coordinator import ImportCoordinator
from tcgbridge.services.metafields import (
    CARD_METAFIELDS,
    MetafieldSpec,
    build_card_metafields,
    coerce_value,
)
from tcgbridge.services.product_importer import (
    AdminClient,
    ProductImporter,
    format_product_title,
    import_product,
)
from tcgbridge.services.sanitizer import resolve_price, sanitize
from tcgbridge.services.status_tracker import (
    StatusSnapshot,
    StatusTracker,
    TrackerState,
    get_status_tracker,
)

__all__ = [
    # Sanitizer (pre-flight, pure)
    "resolve_price",
    "sanitize",
    # Structured metadata
    "CARD_METAFIELDS",
    "MetafieldSpec",
    "build_card_metafields",
    "coerce_value",
    # Orchestrator
    "AdminClient",
    "ProductImporter",
    "format_product_title",
    "import_product",
    # Status tracking
    "StatusSnapshot",
    "StatusTracker",
    "TrackerState",
    "get_status_tracker",
    # UI boundary
    "ImportCoordinator",
]
