"""Ürün servisi testleri - CRUD ve atomik stok işlemleri."""

import pytest
from botocore.exceptions import ClientError

from src.services.base_service import NotFoundError, StockUpdateError, ValidationError
from src.services.product_service import MAX_STOCK_UPDATE_ATTEMPTS


class TestProductCrud:

    def test_list_embeds_supplier(self, inventory, product, supplier):
        products = inventory.products.list_products()
        assert [p.product_id for p in products] == [product.product_id]
        assert products[0].supplier.name == supplier.name
        assert products[0].unit == "pieces"

    def test_partial_update(self, inventory, product):
        inventory.products.update_product(product.product_id, min_stock=3, sku="")
        updated = inventory.products.get_product(product.product_id)
        assert updated.min_stock == 3
        assert updated.sku is None
        assert updated.max_stock == 50

    def test_update_unknown_field(self, inventory, product):
        with pytest.raises(ValueError):
            inventory.products.update_product(product.product_id, color="red")

    def test_update_missing_product(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.products.update_product("yok", name="X")

    def test_delete(self, inventory, product):
        inventory.products.delete_product(product.product_id)
        assert inventory.products.get_product(product.product_id) is None
        assert inventory.products.list_products() == []

    def test_delete_missing(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.products.delete_product("yok")

    def test_cache_invalidated_by_mutation(self, inventory, product):
        inventory.products.list_products()
        inventory.products.update_product(product.product_id, name="Zeytinyağı 2L")
        assert inventory.products.list_products()[0].name == "Zeytinyağı 2L"


class TestStockOperations:

    def test_increment(self, inventory, product):
        assert inventory.products.increment_stock(product.product_id, 7) == 12

    def test_increment_missing_product(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.products.increment_stock("yok", 1)

    def test_increment_requires_positive(self, inventory, product):
        with pytest.raises(ValidationError):
            inventory.products.increment_stock(product.product_id, 0)

    def test_decrement(self, inventory, product):
        assert inventory.products.decrement_stock_floor(product.product_id, 2) == 3

    def test_decrement_exact(self, inventory, product):
        assert inventory.products.decrement_stock_floor(product.product_id, 5) == 0

    def test_decrement_floors_at_zero(self, inventory, product):
        assert inventory.products.decrement_stock_floor(product.product_id, 99) == 0
        assert inventory.products.get_product(product.product_id).current_stock == 0

    def test_decrement_missing_product(self, inventory):
        assert inventory.products.decrement_stock_floor("yok", 1) is None


class TestStockAlerts:

    def test_low_stock_alert(self, inventory, product):
        alerts = inventory.products.stock_alerts(refresh=True)
        assert len(alerts) == 1
        assert alerts[0].alert_type.value == "low_stock"
        assert alerts[0].product.name == "Zeytinyağı 1L"


class TestConcurrentStockWrites:
    """İki koşullu güncelleme de çakışırsa azaltma yeniden denenir."""

    def _conflicting_update(self, table, monkeypatch):
        calls = []

        def update_item(**kwargs):
            calls.append(kwargs)
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException", "Message": "çakışma"}},
                "UpdateItem",
            )

        monkeypatch.setattr(table, "update_item", update_item)
        return calls

    def test_gives_up_after_max_attempts(self, inventory, product, monkeypatch):
        calls = self._conflicting_update(inventory.products.products_table, monkeypatch)
        with pytest.raises(StockUpdateError):
            inventory.products.decrement_stock_floor(product.product_id, 2)
        assert len(calls) == 2 * MAX_STOCK_UPDATE_ATTEMPTS

    def test_succeeds_when_conflict_clears(self, inventory, product, monkeypatch):
        table = inventory.products.products_table
        real_update = table.update_item
        attempts = []

        def update_item(**kwargs):
            attempts.append(kwargs)
            if len(attempts) <= 2:
                raise ClientError(
                    {"Error": {"Code": "ConditionalCheckFailedException", "Message": "çakışma"}},
                    "UpdateItem",
                )
            return real_update(**kwargs)

        monkeypatch.setattr(table, "update_item", update_item)
        assert inventory.products.decrement_stock_floor(product.product_id, 2) == 3
        assert len(attempts) == 3

    def test_other_errors_propagate(self, inventory, product, monkeypatch):
        def update_item(**kwargs):
            raise ClientError({"Error": {"Code": "InternalServerError", "Message": "arıza"}}, "UpdateItem")

        monkeypatch.setattr(inventory.products.products_table, "update_item", update_item)
        with pytest.raises(ClientError):
            inventory.products.decrement_stock_floor(product.product_id, 2)
