"""Inventory MCP sunucusu testleri."""

import asyncio
import json

import pytest
from botocore.exceptions import EndpointConnectionError

from mcp_servers import inventory_server as server


@pytest.fixture
def wired(inventory):
    server.set_inventory(inventory)
    yield inventory
    server.set_inventory(None)


def _add_product(supplier_id, **overrides):
    data = {
        "name": "Zeytinyağı 1L", "category": "Gıda", "current_stock": 5,
        "min_stock": 10, "max_stock": 50, "unit_price": 12.5, "supplier_id": supplier_id,
    }
    data.update(overrides)
    return server.add_product(data)


class TestTools:

    def test_tool_list(self):
        tools = asyncio.run(server.list_tools())
        names = {t.name for t in tools}
        assert {"record_sales", "create_replenishment_request", "update_request_status", "close_day"} <= names

    def test_call_tool_returns_json(self, wired):
        contents = asyncio.run(server.call_tool("list_suppliers", {}))
        body = json.loads(contents[0].text)
        assert body["success"] is True
        assert body["data"][0]["name"] == "default"

    def test_unknown_tool(self):
        with pytest.raises(ValueError):
            asyncio.run(server.call_tool("yok", {}))


class TestProductTools:

    def test_add_product_validation(self, wired):
        result = _add_product("", max_stock=0)
        assert result["success"] is False
        assert {"supplier_id", "max_stock"} <= set(result["errors"])

    def test_add_and_update(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        created = _add_product(supplier_id)
        assert created["success"] is True

        product_id = created["data"]["product_id"]
        updated = server.update_product(product_id, {"product_id": product_id, "min_stock": 60})
        assert updated["success"] is False
        assert "max_stock" in updated["errors"]

    def test_stock_alerts(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        _add_product(supplier_id)
        alerts = server.list_stock_alerts()
        assert alerts["count"] == 1
        assert alerts["data"][0]["suggested_quantity"] == 20


class TestSalesTools:

    def test_oversell_blocked_by_validation(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]
        result = server.record_sales([{"product_id": product_id, "quantity": 9}])
        assert result["success"] is False
        assert "line_0" in result["errors"]

    def test_record_and_close_day(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]
        assert server.record_sales([{"product_id": product_id, "quantity": 2}])["success"] is True

        closing = server.close_day()
        assert closing["data"]["total_sales"] == 2
        assert closing["data"]["total_value"] == 25.0

    def test_bad_date(self, wired):
        assert server.close_day("dün")["success"] is False


class TestReplenishmentTools:

    def test_request_lifecycle(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]

        created = server.create_replenishment_request(product_id, 20)
        assert created["success"] is True
        assert created["data"]["supplier_id"] == supplier_id

        request_id = created["data"]["request_id"]
        approved = server.update_request_status(request_id, "approved")
        assert approved["data"]["status"] == "completed"
        assert wired.products.get_product(product_id).current_stock == 25

        again = server.update_request_status(request_id, "approved")
        assert again["success"] is False

        assert server.delete_replenishment_request(request_id)["success"] is True
        assert server.list_replenishment_requests(refresh=True)["count"] == 0

    def test_quantity_over_max(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]
        result = server.create_replenishment_request(product_id, 51)
        assert result["success"] is False
        assert "quantity" in result["errors"]

    def test_batch(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]
        result = server.create_batch_replenishment(supplier_id, {product_id: 5})
        assert result["count"] == 1

        missing = server.create_batch_replenishment(supplier_id, {"yok": 5})
        assert missing["success"] is False

    def test_default_quantity_is_suggestion(self, wired):
        supplier_id = wired.suppliers.find_default_supplier().supplier_id
        product_id = _add_product(supplier_id)["data"]["product_id"]
        created = server.create_replenishment_request(product_id)
        assert created["success"] is True
        assert created["data"]["quantity"] == 20

    def test_connection_failure_reported(self, wired, monkeypatch):
        def unreachable(**kwargs):
            raise EndpointConnectionError(endpoint_url="https://dynamodb.us-west-2.amazonaws.com")

        monkeypatch.setattr(wired.products.products_table, "get_item", unreachable)
        result = server.create_replenishment_request("p1", 5)
        assert result["success"] is False
        assert "dynamodb" in result["error"]
