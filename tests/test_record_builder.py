"""
Test unitari per record builder.
"""
import pytest

from ingest.column_mapper import PhraseColumnMap, TokenColumnMap
from ingest.header_detector import HeaderLocation
from ingest.record_builder import (
    build_inventory_record,
    build_inventory_records,
    build_sales_record,
    build_sales_records,
    is_valid_sales_record,
)
from ingest.types import SalesRecord


@pytest.fixture
def sales_map():
    return TokenColumnMap(["Product", "Qty", "Sales"])


class TestInventoryBuilder:
    """Test per costruzione record inventario."""

    def test_full_row(self):
        header = ["Part", "Description", "UOM", "On Hand", "Allocated", "Not Available",
                  "Drop Ship", "Available", "On Order", "Committed", "Short"]
        row = ["P-1", "Oil", "ea", "10", "1", "2", "3", "4", "5", "6", "7"]
        record = build_inventory_record(row, PhraseColumnMap(header), "Kapra", "inv.xlsx")

        assert record.part == "P-1"
        assert record.uom == "ea"
        assert (record.on_hand, record.allocated, record.not_available, record.drop_ship) == (10, 1, 2, 3)
        assert (record.available, record.on_order, record.committed, record.short) == (4, 5, 6, 7)
        assert record.location == "Kapra"
        assert record.source_file_name == "inv.xlsx"

    def test_missing_columns_default(self):
        record = build_inventory_record(["P-1"], PhraseColumnMap(["Part"]), None, "inv.csv")

        assert record.description is None
        assert record.uom is None
        assert record.on_hand == 0
        assert record.short == 0
        assert record.location is None

    def test_numeric_part_rendered_as_text(self):
        record = build_inventory_record([100.0], PhraseColumnMap(["Part"]), None, "inv.xlsx")
        assert record.part == "100"

    def test_no_row_dropped(self):
        location = HeaderLocation(
            row_index=0,
            header=["Part", "On Hand"],
            data_rows=[["P-1", "3"], ["", ""], ["Total", "abc"]]
        )
        records = build_inventory_records(location, PhraseColumnMap(location.header), "A", "f.csv")

        assert len(records) == 3
        assert records[1].part == ""
        assert records[2].on_hand == 0

    def test_to_row_columns(self):
        record = build_inventory_record(["P-1"], PhraseColumnMap(["Part"]), "A", "f.csv")
        assert set(record.to_row()) == {
            "part", "description", "uom", "on_hand", "allocated", "not_available",
            "drop_ship", "available", "on_order", "committed", "short",
            "location", "source_file_name",
        }


class TestSalesBuilder:
    """Test per costruzione record vendite."""

    def test_valid_row(self, sales_map):
        record = build_sales_record(["  Soap Bar ", "10", "$120.00"], sales_map, "10/31/2025")
        assert record == SalesRecord(product="Soap Bar", qty=10, sales=120, period="10/31/2025")

    @pytest.mark.parametrize("product", ["UPC 012345", "upc", "Upc-99"])
    def test_upc_continuation_dropped(self, sales_map, product):
        assert build_sales_record([product, "100", "500"], sales_map, "p") is None

    def test_upc_inside_name_kept(self, sales_map):
        record = build_sales_record(["Soap UPC", "1", "0"], sales_map, "p")
        assert record.product == "Soap UPC"

    def test_empty_product_dropped(self, sales_map):
        assert build_sales_record(["", "5", "5"], sales_map, "p") is None
        assert build_sales_record([None, "5", "5"], sales_map, "p") is None

    def test_zero_qty_and_sales_dropped(self, sales_map):
        assert build_sales_record(["Soap", "0", "0"], sales_map, "p") is None

    def test_sales_only_kept(self, sales_map):
        record = build_sales_record(["Soap", "0", "12.5"], sales_map, "p")
        assert record.sales == 12.5

    def test_negative_values_dropped(self, sales_map):
        assert build_sales_record(["Returns", -3, -20.0], sales_map, "p") is None

    def test_is_valid_sales_record(self):
        assert not is_valid_sales_record(SalesRecord(product="Soap", qty=0, sales=0))
        assert is_valid_sales_record(SalesRecord(product="Soap", qty=0, sales=12.5))
        assert is_valid_sales_record(SalesRecord(product="Soap", qty=1, sales=0))
        assert not is_valid_sales_record(SalesRecord(product="", qty=5, sales=5))

    def test_build_sales_records(self, sales_map):
        location = HeaderLocation(
            row_index=0,
            header=["Product", "Qty", "Sales"],
            data_rows=[["Soap", "1", "2"], ["UPC 1", "1", "2"], ["Total", "", ""], []]
        )
        records = build_sales_records(location, sales_map, "p")

        assert [r.product for r in records] == ["Soap"]
