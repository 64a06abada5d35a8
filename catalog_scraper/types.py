from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple, Union


NO_NAME = "No name available"
NO_PRICE = "No price available"
NO_CATEGORY = "No category available"
NO_DESCRIPTION = "No description available"
NO_IMAGE = "No image available"

FIELDS: Tuple[str, ...] = ("name", "price", "description", "category", "image_path")

SENTINELS: Dict[str, str] = {
    "name": NO_NAME,
    "price": NO_PRICE,
    "description": NO_DESCRIPTION,
    "category": NO_CATEGORY,
    "image_path": NO_IMAGE,
}

ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

PriceLike = Union[str, int, float, Decimal, None]


class ConfigError(Exception):
    """Required configuration is missing or malformed."""


def format_price(value: PriceLike) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return f"{value:.2f}"
    return str(value).strip() or None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


@dataclass(frozen=True)
class Item:
    name: str = NO_NAME
    price: str = NO_PRICE
    description: str = NO_DESCRIPTION
    category: str = NO_CATEGORY
    image_path: str = NO_IMAGE

    def __post_init__(self) -> None:
        # Every field ends up holding either real content or its sentinel
        for field_name in FIELDS:
            raw = getattr(self, field_name)
            value = format_price(raw) if field_name == "price" else _clean(raw)
            object.__setattr__(self, field_name, value or SENTINELS[field_name])

    def to_dict(self) -> Dict[str, str]:
        return {field_name: getattr(self, field_name) for field_name in FIELDS}

    def updated(self, patch: "ItemPatch") -> "Item":
        """Return a copy with every field set in ``patch`` replaced."""
        changes = {k: v for k, v in patch.to_dict().items() if v is not None}
        return replace(self, **changes)

    def is_valid(self) -> bool:
        return self.name != NO_NAME and self.price != NO_PRICE

    def __str__(self) -> str:
        return (
            f"{self.name} ({self.category}) - Price: {self.price}, "
            f"Description: {self.description}, Image: {self.image_path}"
        )


@dataclass(frozen=True)
class ItemPatch:
    name: Optional[str] = None
    price: PriceLike = None
    description: Optional[str] = None
    category: Optional[str] = None
    image_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


SELECTOR_KEYS: Dict[str, str] = {
    "name": "product_name_selector",
    "price": "product_price_selector",
    "category": "product_category_selector",
    "description": "product_description_selector",
    "image_path": "product_image_selector",
}


@dataclass(frozen=True)
class SelectorConfig:
    start_page: str
    product_name_selector: str
    product_price_selector: str
    product_category_selector: str
    product_description_selector: str
    product_image_selector: str

    def selector_for(self, field_name: str) -> str:
        return getattr(self, SELECTOR_KEYS[field_name])

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "SelectorConfig":
        data = data or {}
        required = ["start_page", *SELECTOR_KEYS.values()]
        missing = [key for key in required if not str(data.get(key) or "").strip()]
        if missing:
            raise ConfigError(f"missing web scraping settings: {', '.join(missing)}")
        start_page = str(data["start_page"]).strip()
        if not ABSOLUTE_URL_RE.match(start_page):
            raise ConfigError(f"start_page must be an absolute http(s) URL: {start_page!r}")
        values = {key: str(data[key]).strip() for key in required}
        return cls(**values)
