"""
Structured card metadata for imported products.

Builds the single batched metafieldsSet payload that carries a card's
attributes. Each field is coerced according to its Shopify metafield
type before submission; a value that is empty after coercion is left
out, since Shopify rejects blank metafield values.

The metafield definitions themselves are created once, outside this
application.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tcgbridge.models.card import ImportRequest
from tcgbridge.services.sanitizer import sanitize_hp, serialize_price_map, serialize_types

TEXT = "single_line_text_field"
INTEGER = "number_integer"
TEXT_LIST = "list.single_line_text_field"
JSON = "json"
URL = "url"


@dataclass(frozen=True, slots=True)
class MetafieldSpec:
    """How one ImportRequest attribute maps to a product metafield."""

    key: str
    type: str
    attribute: str
    marketplace: bool = False


CARD_METAFIELDS: tuple[MetafieldSpec, ...] = (
    MetafieldSpec("set_name", TEXT, "set_name"),
    MetafieldSpec("card_number", TEXT, "card_number"),
    MetafieldSpec("rarity", TEXT, "rarity"),
    MetafieldSpec("hp", INTEGER, "hp"),
    MetafieldSpec("types", TEXT_LIST, "types"),
    MetafieldSpec("artist", TEXT, "artist"),
    MetafieldSpec("url", URL, "marketplace_url", marketplace=True),
    MetafieldSpec("prices", JSON, "marketplace_prices", marketplace=True),
)


def _coerce_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _coerce_integer(value: Any) -> str:
    return sanitize_hp(value)


def _coerce_list(value: Any) -> str:
    serialized = serialize_types(value)
    return "" if serialized == "[]" else serialized


def _coerce_json(value: Any) -> str:
    serialized = serialize_price_map(value)
    return "" if serialized == "{}" else serialized


def _coerce_url(value: Any) -> str:
    text = _coerce_text(value)
    if text.startswith(("https://", "http://")):
        return text
    return ""


COERCERS: dict[str, Callable[[Any], str]] = {
    TEXT: _coerce_text,
    INTEGER: _coerce_integer,
    TEXT_LIST: _coerce_list,
    JSON: _coerce_json,
    URL: _coerce_url,
}


def coerce_value(metafield_type: str, value: Any) -> str:
    """
    Coerce a value to the string form Shopify expects for a metafield type.

    Raises:
        ValueError: If the metafield type is not supported
    """
    coercer = COERCERS.get(metafield_type)
    if coercer is None:
        raise ValueError(f"Unsupported metafield type: {metafield_type}")
    return coercer(value)


def build_card_metafields(
    request: ImportRequest,
    namespace: str,
    marketplace_namespace: str,
) -> list[dict[str, str]]:
    """
    Build metafieldsSet inputs for an imported card.

    Args:
        request: Sanitized import request
        namespace: Namespace for card attributes (e.g. "pokemon_tcg")
        marketplace_namespace: Namespace for marketplace data (e.g. "tcgplayer")

    Returns:
        MetafieldsSetInput dicts without ownerId, empty values omitted.
    """
    fields: list[dict[str, str]] = []

    for spec in CARD_METAFIELDS:
        value = coerce_value(spec.type, getattr(request, spec.attribute))
        if not value:
            continue

        fields.append(
            {
                "namespace": marketplace_namespace if spec.marketplace else namespace,
                "key": spec.key,
                "type": spec.type,
                "value": value,
            }
        )

    return fields

