from tcgbridge.shopify.admin_client import (
    CreatedProduct,
    ShopifyAdminClient,
    StagedTarget,
    get_admin_client,
    normalize_shop_domain,
    reset_admin_client,
)

__all__ = [
    "CreatedProduct",
    "ShopifyAdminClient",
    "StagedTarget",
    "get_admin_client",
    "normalize_shop_domain",
    "reset_admin_client",
]
