from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TCGBridge"
    debug: bool = False

    # Shopify Admin API (offline access token for the installed app)
    shopify_shop_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-10"

    # Product creation policy
    # DRAFT keeps imports off the storefront until a merchant publishes them
    product_status: Literal["DRAFT", "ACTIVE"] = "DRAFT"
    target_collection_title: str = "Collectible Trading Cards"
    product_title_source: str = "Pokémon TCG"

    metafield_namespace: str = "pokemon_tcg"
    marketplace_metafield_namespace: str = "tcgplayer"

    pokemon_tcg_api_url: str = "https://api.pokemontcg.io/v2"
    pokemon_tcg_api_key: str = ""

    # Transport timeouts (seconds)
    admin_api_timeout: float = 30.0
    image_fetch_timeout: float = 15.0
    image_upload_timeout: float = 15.0


settings = Settings()


# =============================================================================
# IMPORT WORKFLOW CONSTANTS
# =============================================================================

# Price tiers tried in order when the merchant made no explicit selection
PRICE_TIER_PRIORITY: tuple[str, ...] = (
    "holofoil",
    "normal",
    "reverseHolofoil",
    "1stEditionHolofoil",
    "firstEdition",
)

# Shopify caps a single variants connection page at 100 nodes
MAX_VARIANTS_PER_PRODUCT = 100
