"""
Per-item file exporters.

Every exporter writes exactly one file for one item under
``<output_dir>/<category>/<name>.<ext>``, where both the category directory
and the base name go through :func:`sanitize_filename`.
"""

from __future__ import annotations

import csv
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .types import Item


CSV_HEADERS = ["Name", "Category", "Price", "Description", "Image Path"]
CURRENCY_SYMBOL = "$"
CURRENCY_PREFIXES = ("$", "€", "£", "¥", "₴", "₽")
FALLBACK_NAME = "unnamed"

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_UNSAFE_PRODUCT_RE = re.compile(r"[^A-Za-z0-9_]")


def sanitize_filename(name: str) -> str:
    """Lower-case, collapse whitespace to ``_`` and drop everything outside ``[A-Za-z0-9_-]``."""
    return _UNSAFE_RE.sub("", _WHITESPACE_RE.sub("_", str(name).lower()))


def sanitize_product_name(name: str) -> str:
    base = _UNSAFE_PRODUCT_RE.sub("", _WHITESPACE_RE.sub("_", str(name).lower()))
    return f"{base or FALLBACK_NAME}.yaml"


@dataclass(frozen=True)
class ExportTarget:
    output_dir: Path
    category: str
    base_name: str

    @classmethod
    def for_item(cls, output_dir: Union[str, Path], item: Item) -> "ExportTarget":
        return cls(
            output_dir=Path(output_dir),
            category=sanitize_filename(item.category) or FALLBACK_NAME,
            base_name=sanitize_filename(item.name) or FALLBACK_NAME,
        )

    @property
    def directory(self) -> Path:
        return self.output_dir / self.category

    def path(self, ext: str) -> Path:
        return self.directory / f"{self.base_name}.{ext}"

    def with_suffix_number(self, number: int) -> "ExportTarget":
        return ExportTarget(self.output_dir, self.category, f"{self.base_name}_{number}")


def display_price(price: str) -> str:
    if price.startswith(CURRENCY_PREFIXES):
        return price
    return f"{CURRENCY_SYMBOL}{price}"


def write_text(item: Item, target: ExportTarget) -> Path:
    path = target.path("txt")
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        f"Name: {item.name}",
        f"Price: {display_price(item.price)}",
        f"Category: {item.category}",
        f"Description: {item.description}",
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_json(item: Item, target: ExportTarget) -> Path:
    path = target.path("json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(item.to_dict(), f, ensure_ascii=False, indent=2)
    return path


def write_csv(item: Item, target: ExportTarget) -> Path:
    path = target.path("csv")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        w = csv.writer(f)
        w.writerow(CSV_HEADERS)
        w.writerow([item.name, item.category, item.price, item.description, item.image_path])
    return path


def write_yaml(item: Item, target: ExportTarget) -> Path:
    path = target.path("yml")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(item.to_dict(), f, sort_keys=False, allow_unicode=True)
    return path


WRITERS = {
    "text": write_text,
    "json": write_json,
    "csv": write_csv,
    "yaml": write_yaml,
}

EXTENSIONS = {
    "text": "txt",
    "json": "json",
    "csv": "csv",
    "yaml": "yml",
}


def create_product_file(yaml_root: Union[str, Path], category: str, product: Mapping[str, Any]) -> Path:
    """
    Write a single product straight from a raw payload, without building an
    ``Item``: ``<yaml_root>/products/<category>/<name>.yaml``.
    """
    category_dir = Path(yaml_root) / "products" / (sanitize_filename(category) or FALLBACK_NAME)
    category_dir.mkdir(parents=True, exist_ok=True)
    path = category_dir / sanitize_product_name(product.get("name") or "")
    data = {
        "name": product.get("name"),
        "price": product.get("price"),
        "description": product.get("description"),
        "media": product.get("media"),
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
    return path
