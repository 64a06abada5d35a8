from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional, Union

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .types import Item


DEFAULT_HEADERS = [
    "Name",
    "Category",
    "Price",
    "Description",
    "Image Path",
]


def _open_products_sheet(template_path: Optional[str]) -> tuple[Workbook, Worksheet]:
    """Start from the template workbook when it exists, otherwise from a blank "Products" sheet."""
    if template_path and os.path.exists(template_path):
        wb = load_workbook(template_path)
        return wb, wb.active
    wb = Workbook()
    wb.active.title = "Products"
    return wb, wb.active


def write_items_to_excel(
    items: Iterable[Item],
    out_path: Union[str, Path],
    template_path: Optional[str] = None,
    headers: Optional[list[str]] = None,
) -> Path:
    headers = headers or DEFAULT_HEADERS

    # A template is only read; the result always goes to out_path
    wb, ws = _open_products_sheet(template_path)

    if ws.max_row == 1 and ws.max_column == 1 and (ws.cell(row=1, column=1).value is None):
        for col_idx, title in enumerate(headers, start=1):
            ws.cell(row=1, column=col_idx).value = title

    start_row = ws.max_row + 1
    for idx, item in enumerate(items, start=start_row):
        ws.cell(row=idx, column=1).value = item.name
        ws.cell(row=idx, column=2).value = item.category
        ws.cell(row=idx, column=3).value = item.price
        ws.cell(row=idx, column=4).value = item.description
        ws.cell(row=idx, column=5).value = item.image_path

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    wb.save(out)
    return out
