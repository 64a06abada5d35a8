from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Union

from .excel_writer import write_items_to_excel
from .exporters import EXTENSIONS, WRITERS, ExportTarget, create_product_file
from .factory import generate_fake_items
from .logs import LoggingContext
from .types import Item, ItemPatch


EMPTY_CART_MESSAGE = "No items to save. The cart is empty."
TABLE_RULE = "-" * 72
TABLE_HEADER = "| Name                      | Category   | Price    | Description        |"


class IndexNotFound(IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Item not found at index {index} (cart has {size} items)")
        self.index = index
        self.size = size


class Cart:
    """Ordered, exclusively owned collection of items with file export."""

    def __init__(self, log: Optional[LoggingContext] = None, items: Optional[Iterable[Item]] = None) -> None:
        self.log = log or LoggingContext.default()
        self._items: List[Item] = list(items or [])
        self.log.app.info("Action: New cart initialized with %d items", len(self._items))

    @classmethod
    def from_fake(cls, count: int = 5, log: Optional[LoggingContext] = None, seed: Optional[int] = None) -> "Cart":
        cart = cls(log=log)
        for item in generate_fake_items(count, seed=seed):
            cart.add(item)
        return cart

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Item:
        return self._items[index]

    def is_empty(self) -> bool:
        return not self._items

    def add(self, item: Item) -> None:
        self._items.append(item)
        self.log.app.info("Action: Item added: %s, Price: %s", item.name, item.price)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            self.log.error.error("Item not found at index %d (cart has %d items)", index, len(self._items))
            raise IndexNotFound(index, len(self._items))

    def remove_at(self, index: int) -> Item:
        self._check_index(index)
        removed = self._items.pop(index)
        self.log.app.info("Action: Removed item from cart: %s", removed.name)
        return removed

    def update_at(self, index: int, patch: ItemPatch) -> Item:
        self._check_index(index)
        updated = self._items[index].updated(patch)
        self._items[index] = updated
        self.log.app.info("Action: Item updated: %s", updated.name)
        return updated

    def clear(self) -> None:
        self._items.clear()
        self.log.app.info("Action: Cart cleared")

    def _check_empty(self) -> bool:
        if self.is_empty():
            self.log.error.error(EMPTY_CART_MESSAGE)
            return True
        return False

    def show_all_items(self) -> str:
        if self.is_empty():
            self.log.app.info("Action: Displayed empty cart")
            return "The cart is empty."
        rows = [TABLE_RULE, TABLE_HEADER, TABLE_RULE]
        for item in self._items:
            rows.append(
                f"| {item.name[:25].ljust(25)} | {item.category[:10].ljust(10)} "
                f"| {item.price[:8].ljust(8)} | {item.description[:18].ljust(18)} |"
            )
        rows.append(TABLE_RULE)
        return "\n".join(rows)

    def _export(self, output_dir: Union[str, Path], fmt: str) -> List[Path]:
        if self._check_empty():
            return []
        writer: Callable[[Item, ExportTarget], Path] = WRITERS[fmt]
        ext = EXTENSIONS[fmt]
        used: Set[Path] = set()
        written: List[Path] = []
        for item in self._items:
            target = ExportTarget.for_item(output_dir, item)
            number = 1
            candidate = target
            while candidate.path(ext) in used:
                number += 1
                candidate = target.with_suffix_number(number)
            if candidate is not target:
                self.log.error.warning(
                    "File name collision for %r: %s is taken, writing %s",
                    item.name,
                    target.path(ext),
                    candidate.path(ext),
                )
            used.add(candidate.path(ext))
            try:
                path = writer(item, candidate)
            except OSError as exc:
                self.log.error.error("Failed to save %s as %s: %s", item.name, fmt, exc)
                continue
            written.append(path)
            self.log.app.info("Action: Item saved to %s file: %s", fmt, path)
        return written

    def export_as_text(self, output_dir: Union[str, Path]) -> List[Path]:
        return self._export(output_dir, "text")

    def export_as_json(self, output_dir: Union[str, Path]) -> List[Path]:
        return self._export(output_dir, "json")

    def export_as_csv(self, output_dir: Union[str, Path]) -> List[Path]:
        return self._export(output_dir, "csv")

    def export_as_yaml(self, output_dir: Union[str, Path]) -> List[Path]:
        return self._export(output_dir, "yaml")

    def export_as_product_files(self, yaml_root: Union[str, Path]) -> List[Path]:
        """One `<yaml_root>/products/<category>/<name>.yaml` file per item."""
        if self._check_empty():
            return []
        written: List[Path] = []
        for item in self._items:
            product = {
                "name": item.name,
                "price": item.price,
                "description": item.description,
                "media": [item.image_path],
            }
            try:
                path = create_product_file(yaml_root, item.category, product)
            except OSError as exc:
                self.log.error.error("Failed to create product file for %s: %s", item.name, exc)
                continue
            written.append(path)
            self.log.app.info("Processed File: Created product file: %s", path)
        return written

    def export_as_excel(self, out_path: Union[str, Path], template_path: Optional[str] = None) -> Optional[Path]:
        if self._check_empty():
            return None
        try:
            path = write_items_to_excel(self._items, out_path, template_path=template_path)
        except OSError as exc:
            self.log.error.error("Failed to save workbook %s: %s", out_path, exc)
            return None
        self.log.app.info("Action: Cart saved to workbook: %s", path)
        return path

    def export(self, output_dir: Union[str, Path], formats: Sequence[str]) -> Dict[str, List[Path]]:
        """Run the per-item exporters named in ``formats`` (any of text, json, csv, yaml)."""
        unknown = [fmt for fmt in formats if fmt not in WRITERS]
        if unknown:
            raise ValueError(f"unknown export formats: {', '.join(unknown)}")
        return {fmt: self._export(output_dir, fmt) for fmt in formats}
