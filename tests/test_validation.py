"""Form validasyon testleri."""

from src.models.inventory import Product, SaleLine
from src.services import validation


def _create_product(**overrides):
    values = dict(
        product_id="p1", name="Un", category="Gıda", current_stock=5,
        min_stock=10, max_stock=50, unit="kg",
    )
    values.update(overrides)
    return Product(**values)


class TestProductValidation:

    def _data(self, **overrides):
        data = {
            "name": "Un", "category": "Gıda", "supplier_id": "s1",
            "current_stock": 0, "min_stock": 5, "max_stock": 20, "unit_price": 1.5,
        }
        data.update(overrides)
        return data

    def test_valid(self):
        assert validation.validate_product(self._data()).is_valid is True

    def test_required_fields(self):
        result = validation.validate_product(self._data(name=" ", category="", supplier_id=None))
        assert set(result.errors) == {"name", "category", "supplier_id"}

    def test_max_must_exceed_min(self):
        result = validation.validate_product(self._data(max_stock=5))
        assert "max_stock" in result.errors

    def test_negative_values(self):
        result = validation.validate_product(self._data(current_stock=-1, min_stock=-1, unit_price=-2))
        assert {"current_stock", "min_stock", "unit_price"} <= set(result.errors)


class TestSupplierValidation:

    def test_valid(self):
        data = {"name": "Anadolu", "contact": "Mehmet", "email": "a@b.co", "phone": "+90 (555) 111-22-33"}
        assert validation.validate_supplier(data).is_valid is True

    def test_bad_email_and_phone(self):
        data = {"name": "Anadolu", "contact": "Mehmet", "email": "geçersiz", "phone": "abc"}
        result = validation.validate_supplier(data)
        assert set(result.errors) == {"email", "phone"}

    def test_optional_fields_may_be_empty(self):
        assert validation.validate_supplier({"name": "A", "contact": "B", "email": ""}).is_valid is True


class TestSaleLineValidation:

    def test_insufficient_stock(self):
        result = validation.validate_sale_lines([SaleLine("p1", 6)], [_create_product()])
        assert result.errors["line_0"].startswith("Yetersiz stok")
        assert "general" in result.errors

    def test_one_valid_line_is_enough_for_general(self):
        result = validation.validate_sale_lines(
            [SaleLine("p1", 2), SaleLine("", 1)], [_create_product()]
        )
        assert "general" not in result.errors
        assert "line_1" in result.errors
        assert result.is_valid is False

    def test_valid(self):
        assert validation.validate_sale_lines([SaleLine("p1", 5)], [_create_product()]).is_valid is True


class TestReplenishmentValidation:

    def test_quantity_bounds(self):
        product = _create_product()
        assert validation.validate_replenishment_quantity(product, 0).is_valid is False
        assert validation.validate_replenishment_quantity(product, 51).is_valid is False
        assert validation.validate_replenishment_quantity(product, 50).is_valid is True

    def test_batch_selection(self):
        assert validation.validate_batch_selection({}).errors == {"selection": "En az bir ürün seçilmelidir"}
        result = validation.validate_batch_selection({"p1": 3, "p2": 0})
        assert set(result.errors) == {"quantity_p2"}

    def test_suggested_quantity(self):
        assert validation.suggested_replenishment_quantity(_create_product()) == 20
        assert validation.suggested_replenishment_quantity(_create_product(current_stock=40)) == 10
