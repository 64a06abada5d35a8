"""Tests for the Cart collection in catalog_scraper/cart.py."""

import csv
import logging

import pytest
import yaml
from openpyxl import load_workbook

from catalog_scraper.cart import EMPTY_CART_MESSAGE, Cart, IndexNotFound
from catalog_scraper.types import Item, ItemPatch


@pytest.fixture
def cart(log):
    cart = Cart(log=log)
    cart.add(Item(name="A", category="Vitamins", price=25.99, description="Vitamin A"))
    cart.add(Item(name="B", category="Supplements", price=19.99, description="Fish oil"))
    return cart


def all_files(root):
    return sorted(p for p in root.rglob("*") if p.is_file())


class TestCollection:
    def test_insertion_order(self, cart):
        assert [i.name for i in cart] == ["A", "B"]
        assert len(cart) == 2
        assert cart[1].name == "B"

    def test_remove_at_returns_item(self, cart):
        removed = cart.remove_at(0)
        assert removed.name == "A"
        assert [i.name for i in cart] == ["B"]

    def test_remove_at_out_of_range(self, cart, caplog):
        with pytest.raises(IndexNotFound) as excinfo:
            cart.remove_at(5)
        assert excinfo.value.index == 5
        assert isinstance(excinfo.value, IndexError)
        assert len(cart) == 2
        assert "Item not found at index 5" in caplog.text

    def test_negative_index_is_out_of_range(self, cart):
        with pytest.raises(IndexNotFound):
            cart.remove_at(-1)

    def test_clear(self, cart):
        cart.clear()
        assert cart.is_empty()
        assert list(cart) == []

    def test_update_at(self, cart):
        updated = cart.update_at(1, ItemPatch(price=21))
        assert updated.price == "21.00"
        assert cart[1].price == "21.00"
        assert cart[1].name == "B"

    def test_items_not_aliased(self, log):
        source = [Item(name="A", price=1)]
        cart = Cart(log=log, items=source)
        cart.add(Item(name="B", price=2))
        assert len(source) == 1

    def test_show_all_items(self, cart):
        table = cart.show_all_items()
        assert "| A " in table
        assert "Supplements" not in table  # truncated to the column width
        assert "Supplement" in table
        assert "25.99" in table

    def test_show_empty(self, log):
        assert Cart(log=log).show_all_items() == "The cart is empty."

    def test_from_fake(self, log):
        cart = Cart.from_fake(3, log=log, seed=42)
        assert len(cart) == 3
        assert all(item.is_valid() for item in cart)


class TestExport:
    def test_remove_then_csv_scenario(self, cart, tmp_path):
        cart.remove_at(0)
        out = tmp_path / "out"
        paths = cart.export_as_csv(out)

        assert paths == [out / "supplements" / "b.csv"]
        assert all_files(out) == [out / "supplements" / "b.csv"]
        with open(paths[0], newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["Name", "Category", "Price", "Description", "Image Path"]
        assert rows[1][:3] == ["B", "Supplements", "19.99"]
        assert len(rows) == 2

    @pytest.mark.parametrize("method", ["export_as_text", "export_as_json", "export_as_csv", "export_as_yaml"])
    def test_empty_cart_writes_nothing(self, log, tmp_path, caplog, method):
        out = tmp_path / "out"
        assert getattr(Cart(log=log), method)(out) == []
        assert not out.exists()
        assert EMPTY_CART_MESSAGE in caplog.text

    def test_empty_cart_excel(self, log, tmp_path):
        assert Cart(log=log).export_as_excel(tmp_path / "p.xlsx") is None
        assert list(tmp_path.iterdir()) == []

    def test_one_file_per_item_per_format(self, cart, tmp_path):
        result = cart.export(tmp_path, ["text", "json", "csv", "yaml"])
        assert {fmt: len(paths) for fmt, paths in result.items()} == {"text": 2, "json": 2, "csv": 2, "yaml": 2}
        assert sorted(p.name for p in (tmp_path / "vitamins").iterdir()) == ["a.csv", "a.json", "a.txt", "a.yml"]

    def test_export_is_idempotent(self, cart, tmp_path):
        first = cart.export_as_json(tmp_path)
        before = [p.read_bytes() for p in first]
        second = cart.export_as_json(tmp_path)
        assert first == second
        assert [p.read_bytes() for p in second] == before

    def test_unknown_format(self, cart, tmp_path):
        with pytest.raises(ValueError):
            cart.export(tmp_path, ["xml"])

    def test_colliding_names_do_not_overwrite(self, log, tmp_path, caplog):
        cart = Cart(log=log)
        cart.add(Item(name="Widget!", price=1, category="Tools"))
        cart.add(Item(name="Widget?", price=2, category="Tools"))
        with caplog.at_level(logging.WARNING):
            paths = cart.export_as_json(tmp_path)
        assert [p.name for p in paths] == ["widget.json", "widget_2.json"]
        assert "collision" in caplog.text

    def test_write_failure_does_not_abort_batch(self, log, tmp_path):
        (tmp_path / "broken").write_text("a file where a directory is expected")
        cart = Cart(log=log)
        cart.add(Item(name="A", price=1, category="Broken"))
        cart.add(Item(name="B", price=2, category="Fine"))
        paths = cart.export_as_text(tmp_path)
        assert paths == [tmp_path / "fine" / "b.txt"]

    def test_product_files(self, cart, tmp_path):
        paths = cart.export_as_product_files(tmp_path)
        assert paths == [
            tmp_path / "products" / "vitamins" / "a.yaml",
            tmp_path / "products" / "supplements" / "b.yaml",
        ]
        data = yaml.safe_load(paths[1].read_text(encoding="utf-8"))
        assert data == {"name": "B", "price": "19.99", "description": "Fish oil", "media": ["No image available"]}

    def test_empty_cart_product_files(self, log, tmp_path):
        assert Cart(log=log).export_as_product_files(tmp_path) == []
        assert list(tmp_path.iterdir()) == []

    def test_excel(self, cart, tmp_path):
        path = cart.export_as_excel(tmp_path / "products.xlsx")
        ws = load_workbook(path).active
        rows = list(ws.iter_rows(values_only=True))
        assert rows[0] == ("Name", "Category", "Price", "Description", "Image Path")
        assert rows[1][:3] == ("A", "Vitamins", "25.99")
        assert len(rows) == 3
