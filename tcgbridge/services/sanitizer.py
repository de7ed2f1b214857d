"""
Card record sanitization.

Turns a raw CardRecord (as produced by the search collaborator, or as
posted by the admin UI) into the exact ImportRequest shape the import
orchestrator requires:

- Free text trimmed, missing -> ""
- hp -> validated integer string, default "0"
- types -> compact JSON array string, default "[]"
- price -> one resolved Decimal (selected tier, tier priority, legacy
  price, then 0)

INVARIANT: sanitize() is pure and idempotent. A record that fails
validation never reaches the remote store.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any

from tcgbridge.config import PRICE_TIER_PRIORITY
from tcgbridge.models.card import CardRecord, ImportRequest, UiSelections
from tcgbridge.models.failure import ValidationError

# Required after trimming, reported in this order
REQUIRED_FIELDS: tuple[str, ...] = ("title", "set_name", "card_number")

DEFAULT_PRODUCT_TYPE = "Trading Card"

# Keys inside a raw TCGplayer tier object, in preference order
TIER_VALUE_KEYS: tuple[str, ...] = ("market", "mid", "low", "high")

# HP values with more integer digits than this are rejected as "0"
MAX_HP_DIGITS = 6

# Prices with more integer digits than this are treated as unparseable
MAX_PRICE_DIGITS = 12

_JSON_SEPARATORS = (",", ":")


def _clean_text(value: Any) -> str:
    """Trim a free-text value; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=_JSON_SEPARATORS, ensure_ascii=False)


def sanitize_hp(value: Any) -> str:
    """
    Coerce an HP value to an integer string.

    Accepts ints, numeric strings and integral floats ("60.0").
    Anything unparseable, or longer than MAX_HP_DIGITS digits, becomes "0".
    """
    if value is None or isinstance(value, bool):
        return "0"

    if isinstance(value, int):
        return str(value) if abs(value) < 10**MAX_HP_DIGITS else "0"

    text = str(value).strip()
    if not text:
        return "0"

    try:
        number = Decimal(text)
    except InvalidOperation:
        return "0"

    # adjusted() is the exponent of the leading digit; checked before int()
    if not number.is_finite() or number.adjusted() >= MAX_HP_DIGITS:
        return "0"
    return str(int(number))


def serialize_types(value: Any) -> str:
    """
    Normalize card types to a compact JSON array string.

    A JSON array string passes through (re-serialized so equal lists
    always produce equal strings). A native list or tuple is serialized.
    Everything else becomes "[]".
    """
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return "[]"
        if not isinstance(parsed, list):
            return "[]"
        return _to_json([str(item) for item in parsed])

    if isinstance(value, (list, tuple)):
        return _to_json([str(item) for item in value])

    return "[]"


def serialize_price_map(value: Any) -> str:
    """Normalize the raw marketplace price map to a JSON object string."""
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return "{}"
        return _to_json(parsed) if isinstance(parsed, dict) else "{}"

    if isinstance(value, dict):
        return _to_json(value)

    return "{}"


def _bounded(number: Decimal) -> Decimal | None:
    if not number.is_finite() or number.adjusted() >= MAX_PRICE_DIGITS:
        return None
    return number


def to_decimal(value: Any) -> Decimal | None:
    """
    Parse a price value.

    Accepts numbers, numeric strings, and raw TCGplayer tier objects
    ({"market": 12.5, "mid": 11.0, ...}). Returns None when no finite
    number of at most MAX_PRICE_DIGITS integer digits can be extracted.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, dict):
        for key in TIER_VALUE_KEYS:
            number = to_decimal(value.get(key))
            if number is not None:
                return number
        return None

    if isinstance(value, (Decimal, int)):
        return _bounded(Decimal(value))

    try:
        # str() first so floats keep their shortest repr (12.5, not 12.4999...)
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None

    return _bounded(number)


def resolve_price(
    candidates: dict[str, Any] | None,
    selected_tier: str | None = None,
    legacy_price: Any = None,
) -> Decimal:
    """
    Resolve the single price an imported product is listed at.

    Order:
    1. The merchant's selected tier, if it exists in candidates
    2. The first non-zero candidate in PRICE_TIER_PRIORITY order
    3. The legacy single price field
    4. Zero
    """
    candidates = candidates or {}

    if selected_tier and selected_tier in candidates:
        selected = to_decimal(candidates[selected_tier])
        if selected is not None:
            return selected

    for tier in PRICE_TIER_PRIORITY:
        if tier not in candidates:
            continue
        number = to_decimal(candidates[tier])
        if number is not None and number > 0:
            return number

    legacy = to_decimal(legacy_price)
    if legacy is not None:
        return legacy

    return Decimal("0")


def sanitize(record: CardRecord, selections: UiSelections | None = None) -> ImportRequest:
    """
    Sanitize and validate a card record for import.

    Args:
        record: Raw card record from the search collaborator or the UI
        selections: Merchant choices; its price tier overrides the one on
            the record

    Returns:
        ImportRequest ready for the orchestrator.

    Raises:
        ValidationError: If any of title, set_name, card_number is empty
            after trimming. Lists every missing field.
    """
    title = _clean_text(record.title)
    set_name = _clean_text(record.set_name)
    card_number = _clean_text(record.card_number)

    present = {"title": title, "set_name": set_name, "card_number": card_number}
    missing = [name for name in REQUIRED_FIELDS if not present[name]]
    if missing:
        raise ValidationError(missing)

    selected_tier = record.selected_price_tier
    if selections is not None and selections.selected_price_tier:
        selected_tier = selections.selected_price_tier

    return ImportRequest(
        source_id=_clean_text(record.id),
        title=title,
        set_name=set_name,
        card_number=card_number,
        description=_clean_text(record.description),
        vendor=_clean_text(record.vendor),
        product_type=_clean_text(record.product_type) or DEFAULT_PRODUCT_TYPE,
        rarity=_clean_text(record.rarity),
        artist=_clean_text(record.artist),
        hp=sanitize_hp(record.hp),
        types=serialize_types(record.types),
        image_url=_clean_text(record.image_url),
        price=resolve_price(record.price_candidates, selected_tier, record.price),
        marketplace_url=_clean_text(record.marketplace_url),
        marketplace_prices=serialize_price_map(record.marketplace_prices),
    )
