from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

from .fetch import Page
from .types import (
    NO_CATEGORY,
    NO_DESCRIPTION,
    NO_IMAGE,
    NO_NAME,
    NO_PRICE,
    Item,
    SelectorConfig,
)


def _text(el) -> str:
    return (el.get_text(separator=" ", strip=True) if el else "").strip()


def _attr(el, name: str) -> str:
    value = el.get(name) if el is not None else None
    return str(value).strip() if value else ""


class FieldExtractor:
    """Match-or-sentinel extraction, one selector lookup per field."""

    def __init__(self, selectors: SelectorConfig) -> None:
        self.selectors = selectors

    def _lookup_text(self, page: Page, field_name: str, sentinel: str) -> str:
        el = page.soup.select_one(self.selectors.selector_for(field_name))
        return _text(el) or sentinel

    def extract_name(self, page: Page) -> str:
        return self._lookup_text(page, "name", NO_NAME)

    def extract_price(self, page: Page) -> str:
        return self._lookup_text(page, "price", NO_PRICE)

    def extract_category(self, page: Page) -> str:
        return self._lookup_text(page, "category", NO_CATEGORY)

    def extract_description(self, page: Page) -> str:
        return self._lookup_text(page, "description", NO_DESCRIPTION)

    def extract_image(self, page: Page) -> str:
        el = page.soup.select_one(self.selectors.selector_for("image_path"))
        src = _attr(el, "src")
        if not src:
            return NO_IMAGE
        return urljoin(page.url, src)

    def extract(self, page: Page) -> Item:
        return Item(
            name=self.extract_name(page),
            price=self.extract_price(page),
            category=self.extract_category(page),
            description=self.extract_description(page),
            image_path=self.extract_image(page),
        )


def extract_fields(html: str, url: str, selectors: SelectorConfig) -> Optional[Item]:
    """Extract an item from raw HTML; ``None`` when it fails the validity gate."""
    item = FieldExtractor(selectors).extract(Page(url=url, html=html))
    return item if item.is_valid() else None
