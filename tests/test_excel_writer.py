"""Tests for catalog_scraper/excel_writer.py."""

from openpyxl import Workbook, load_workbook

from catalog_scraper.excel_writer import write_items_to_excel
from catalog_scraper.types import Item


class TestWriteItemsToExcel:
    def test_new_workbook(self, tmp_path):
        path = write_items_to_excel([Item(name="A", price=1)], tmp_path / "nested" / "p.xlsx")
        ws = load_workbook(path).active
        assert ws.title == "Products"
        assert ws.cell(row=2, column=1).value == "A"

    def test_template_rows_are_kept_and_template_untouched(self, tmp_path):
        template = tmp_path / "template.xlsx"
        wb = Workbook()
        wb.active.append(["Name", "Category", "Price", "Description", "Image Path"])
        wb.active.append(["Existing", "Old", "5.00", "", ""])
        wb.save(template)

        path = write_items_to_excel([Item(name="New", price=2)], tmp_path / "out.xlsx", template_path=str(template))

        rows = list(load_workbook(path).active.iter_rows(values_only=True))
        assert [r[0] for r in rows] == ["Name", "Existing", "New"]
        assert load_workbook(template).active.max_row == 2
