"""Gün sonu kapanış testleri."""

from datetime import date

from src.models.inventory import Sale
from src.services.day_closing import summarize


class TestSummarize:

    def test_totals(self):
        sales = [
            Sale(sale_id="s1", product_id="p1", quantity=2, total_value=10.5),
            Sale(sale_id="s2", product_id="p2", quantity=3, total_value=4.25),
        ]
        assert summarize(sales) == {"total_sales": 5, "total_value": 14.75}

    def test_empty(self):
        assert summarize([]) == {"total_sales": 0, "total_value": 0.0}


class TestCloseDay:

    def test_close_uses_sales_of_the_day(self, inventory, product):
        inventory.sales.record_sale(product.product_id, 2, sale_date="2026-03-01T10:00:00+00:00")
        inventory.sales.record_sale(product.product_id, 1, sale_date="2026-03-02T10:00:00+00:00")

        closing = inventory.closings.close_day(date(2026, 3, 1))
        assert closing.date == "2026-03-01"
        assert closing.total_sales == 2
        assert closing.total_value == 25.0
        assert closing.closed_by == "user-1"

    def test_list_newest_first(self, inventory):
        inventory.closings.close_day(date(2026, 3, 1), sales=[])
        inventory.closings.close_day(date(2026, 3, 3), sales=[])
        inventory.closings.close_day(date(2026, 3, 2), sales=[])

        dates = [c.date for c in inventory.closings.list_closings()]
        assert dates == ["2026-03-03", "2026-03-02", "2026-03-01"]
