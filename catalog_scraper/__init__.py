"""
Product catalog scraper package.

Exports:
- Item: immutable product record
- Cart: ordered item collection with text/JSON/CSV/YAML/Excel export
- scrape_to_files: high-level function to crawl a start page and export the products
"""

from .cart import Cart, IndexNotFound
from .cli import scrape_to_files
from .types import Item, ItemPatch, SelectorConfig

__all__ = ["Cart", "IndexNotFound", "Item", "ItemPatch", "SelectorConfig", "scrape_to_files"]
