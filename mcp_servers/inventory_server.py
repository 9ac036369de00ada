"""
Inventory MCP Server

Ürün, tedarikçi, satış, gün sonu ve ikmal talebi işlemlerini MCP araçları
olarak sunar. Kimlik ve aktif profil ayarlardan gelir
(INVENTORY_USER_ID, INVENTORY_PROFILE_ID).
"""

import json
import logging
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
import env_loader  # noqa: F401

from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from mcp.server import Server
from mcp.types import Tool, TextContent

from src.app import InventoryApp, build_app
from src.models.inventory import ReplenishmentItem, SaleLine, to_native
from src.services.base_service import InventoryError, ValidationError
from src.services import validation

logger = logging.getLogger(__name__)

app = Server("inventory")

_inventory: Optional[InventoryApp] = None


def get_inventory() -> InventoryApp:
    """Servisleri ilk çağrıda kurar ve aktif profil için ilk yüklemeyi yapar."""
    global _inventory
    if _inventory is None:
        logger.info("Envanter servisleri kuruluyor")
        _inventory = build_app()
        _inventory.bootstrap()
    return _inventory


def set_inventory(inventory: Optional[InventoryApp]) -> None:
    global _inventory
    _inventory = inventory


def _result(data):
    return [TextContent(type="text", text=json.dumps(to_native(data), indent=2, ensure_ascii=False, default=str))]


def _ok(data) -> Dict:
    if isinstance(data, list):
        return {"success": True, "count": len(data), "data": data}
    return {"success": True, "data": data}


def _invalid(result: validation.ValidationResult) -> Dict:
    return {"success": False, "error": "Validasyon hatası", "errors": result.errors}


def _failure(e: Exception) -> Dict:
    response = {"success": False, "error": str(e)}
    if isinstance(e, ValidationError) and e.errors:
        response["errors"] = e.errors
    return response


def _as_dict(obj) -> Dict:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return asdict(obj)


_STR = {"type": "string"}
_INT = {"type": "integer"}
_NUM = {"type": "number"}


def _schema(properties: Optional[Dict] = None, required: Optional[List[str]] = None) -> Dict:
    schema = {"type": "object", "properties": properties or {}}
    if required:
        schema["required"] = required
    return schema


_PRODUCT_FIELDS = {
    "name": _STR, "category": _STR, "current_stock": _INT, "min_stock": _INT,
    "max_stock": _INT, "unit_price": _NUM, "supplier_id": _STR, "unit": _STR,
    "sku": _STR, "description": _STR,
}
_SUPPLIER_FIELDS = {"name": _STR, "contact": _STR, "phone": _STR, "email": _STR, "address": _STR}


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [
        Tool(name="list_profiles", description="List the user's profiles (stores/branches)",
             inputSchema=_schema()),
        Tool(name="create_profile", description="Create a profile",
             inputSchema=_schema({"name": _STR, "address": _STR}, ["name"])),
        Tool(name="select_profile", description="Select the active profile",
             inputSchema=_schema({"profile_id": _STR}, ["profile_id"])),
        Tool(name="list_suppliers", description="List suppliers of the active profile",
             inputSchema=_schema()),
        Tool(name="add_supplier", description="Add a supplier",
             inputSchema=_schema(_SUPPLIER_FIELDS, ["name", "contact"])),
        Tool(name="update_supplier", description="Update supplier fields",
             inputSchema=_schema({"supplier_id": _STR, **_SUPPLIER_FIELDS}, ["supplier_id"])),
        Tool(name="delete_supplier", description="Delete a supplier",
             inputSchema=_schema({"supplier_id": _STR}, ["supplier_id"])),
        Tool(name="list_products", description="List products with their suppliers",
             inputSchema=_schema()),
        Tool(name="add_product", description="Add a product",
             inputSchema=_schema(_PRODUCT_FIELDS, ["name", "category", "max_stock", "supplier_id"])),
        Tool(name="update_product", description="Update product fields",
             inputSchema=_schema({"product_id": _STR, **_PRODUCT_FIELDS}, ["product_id"])),
        Tool(name="delete_product", description="Delete a product",
             inputSchema=_schema({"product_id": _STR}, ["product_id"])),
        Tool(name="list_stock_alerts", description="List low / out of stock alerts",
             inputSchema=_schema()),
        Tool(name="record_sales", description="Record sales and decrease stock",
             inputSchema=_schema({"lines": {"type": "array", "items": _schema(
                 {"product_id": _STR, "quantity": _INT}, ["product_id", "quantity"])}}, ["lines"])),
        Tool(name="list_sales", description="List sales, optionally for a date (YYYY-MM-DD)",
             inputSchema=_schema({"date": _STR})),
        Tool(name="close_day", description="Close the day and store the sales summary",
             inputSchema=_schema({"date": _STR})),
        Tool(name="list_day_closings", description="List day closings, newest first",
             inputSchema=_schema()),
        Tool(name="create_replenishment_request", description="Request stock from a supplier (quantity defaults to the suggested amount)",
             inputSchema=_schema({"product_id": _STR, "quantity": _INT, "supplier_id": _STR, "notes": _STR},
                                 ["product_id"])),
        Tool(name="create_batch_replenishment", description="Request several products from one supplier",
             inputSchema=_schema({"supplier_id": _STR, "items": {"type": "object", "additionalProperties": _INT}},
                                 ["supplier_id", "items"])),
        Tool(name="list_replenishment_requests", description="List replenishment requests, newest first",
             inputSchema=_schema({"refresh": {"type": "boolean"}})),
        Tool(name="update_request_status", description="Approve, reject or complete a request",
             inputSchema=_schema({"request_id": _STR, "status": {"type": "string", "enum": ["approved", "rejected", "completed"]},
                                  "notes": _STR}, ["request_id", "status"])),
        Tool(name="delete_replenishment_request", description="Delete a replenishment request",
             inputSchema=_schema({"request_id": _STR}, ["request_id"])),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    handlers = {
        "list_profiles": lambda a: list_profiles(),
        "create_profile": lambda a: create_profile(a["name"], a.get("address")),
        "select_profile": lambda a: select_profile(a["profile_id"]),
        "list_suppliers": lambda a: list_suppliers(),
        "add_supplier": lambda a: add_supplier(a),
        "update_supplier": lambda a: update_supplier(a["supplier_id"], a),
        "delete_supplier": lambda a: delete_supplier(a["supplier_id"]),
        "list_products": lambda a: list_products(),
        "add_product": lambda a: add_product(a),
        "update_product": lambda a: update_product(a["product_id"], a),
        "delete_product": lambda a: delete_product(a["product_id"]),
        "list_stock_alerts": lambda a: list_stock_alerts(),
        "record_sales": lambda a: record_sales(a["lines"]),
        "list_sales": lambda a: list_sales(a.get("date")),
        "close_day": lambda a: close_day(a.get("date")),
        "list_day_closings": lambda a: list_day_closings(),
        "create_replenishment_request": lambda a: create_replenishment_request(
            a["product_id"], a.get("quantity"), a.get("supplier_id"), a.get("notes")),
        "create_batch_replenishment": lambda a: create_batch_replenishment(a["supplier_id"], a["items"]),
        "list_replenishment_requests": lambda a: list_replenishment_requests(a.get("refresh", False)),
        "update_request_status": lambda a: update_request_status(a["request_id"], a["status"], a.get("notes")),
        "delete_replenishment_request": lambda a: delete_replenishment_request(a["request_id"]),
    }
    handler = handlers.get(name)
    if not handler:
        raise ValueError(f"Unknown tool: {name}")
    return _result(handler(arguments))


# --- Implementation ---

def list_profiles() -> Dict:
    try:
        profiles = get_inventory().profiles.list_profiles(refresh=True)
        return _ok([_as_dict(p) for p in profiles])
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def create_profile(name: str, address: Optional[str] = None) -> Dict:
    if not name or not name.strip():
        return {"success": False, "error": "Profil adı zorunludur"}
    try:
        profile = get_inventory().profiles.create_profile(name.strip(), address)
        return _ok(_as_dict(profile))
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def select_profile(profile_id: str) -> Dict:
    try:
        inventory = get_inventory()
        profile = inventory.profiles.select_profile(profile_id)
        inventory.bootstrap()
        return _ok(_as_dict(profile))
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def list_suppliers() -> Dict:
    try:
        suppliers = get_inventory().suppliers.list_suppliers(refresh=True)
        return _ok([_as_dict(s) for s in suppliers])
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def add_supplier(data: Dict) -> Dict:
    checked = validation.validate_supplier(data)
    if not checked.is_valid:
        return _invalid(checked)
    try:
        supplier = get_inventory().suppliers.add_supplier(
            name=data["name"].strip(),
            contact=data["contact"].strip(),
            phone=data.get("phone"),
            email=data.get("email"),
            address=data.get("address"),
        )
        return _ok(_as_dict(supplier))
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def update_supplier(supplier_id: str, data: Dict) -> Dict:
    inventory = get_inventory()
    updates = {k: v for k, v in data.items() if k in _SUPPLIER_FIELDS}
    try:
        current = inventory.suppliers.get_supplier(supplier_id)
        if current is None:
            return {"success": False, "error": f"Tedarikçi bulunamadı: {supplier_id}"}
        checked = validation.validate_supplier({**_as_dict(current), **updates})
        if not checked.is_valid:
            return _invalid(checked)
        inventory.suppliers.update_supplier(supplier_id, **updates)
        return _ok(_as_dict(inventory.suppliers.get_supplier(supplier_id)))
    except (InventoryError, ClientError, BotoCoreError, ValueError) as e:
        return _failure(e)


def delete_supplier(supplier_id: str) -> Dict:
    try:
        get_inventory().suppliers.delete_supplier(supplier_id)
        return _ok({"supplier_id": supplier_id})
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def list_products() -> Dict:
    try:
        products = get_inventory().products.list_products(refresh=True)
        return _ok([p.to_dict() for p in products])
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def add_product(data: Dict) -> Dict:
    fields = {k: v for k, v in data.items() if k in _PRODUCT_FIELDS}
    checked = validation.validate_product(fields)
    if not checked.is_valid:
        return _invalid(checked)
    try:
        product = get_inventory().products.add_product(**fields)
        return _ok(product.to_dict())
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def update_product(product_id: str, data: Dict) -> Dict:
    inventory = get_inventory()
    updates = {k: v for k, v in data.items() if k in _PRODUCT_FIELDS}
    try:
        current = inventory.products.get_product(product_id)
        if current is None:
            return {"success": False, "error": f"Ürün bulunamadı: {product_id}"}
        checked = validation.validate_product({**current.to_dict(), **updates})
        if not checked.is_valid:
            return _invalid(checked)
        inventory.products.update_product(product_id, **updates)
        return _ok(inventory.products.get_product(product_id).to_dict())
    except (InventoryError, ClientError, BotoCoreError, ValueError) as e:
        return _failure(e)


def delete_product(product_id: str) -> Dict:
    try:
        get_inventory().products.delete_product(product_id)
        return _ok({"product_id": product_id})
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def list_stock_alerts() -> Dict:
    try:
        inventory = get_inventory()
        alerts = inventory.products.stock_alerts(refresh=True)
        return _ok(inventory.products.monitor.notify_low_stock(alerts))
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def record_sales(lines: List[Dict]) -> Dict:
    inventory = get_inventory()
    sale_lines = [SaleLine(product_id=line.get("product_id", ""), quantity=line.get("quantity", 0)) for line in lines]
    try:
        checked = validation.validate_sale_lines(sale_lines, inventory.products.list_products(refresh=True))
        if not checked.is_valid:
            return _invalid(checked)
        sales = inventory.sales.record_sales(sale_lines)
        return _ok([_as_dict(s) for s in sales])
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def list_sales(day: Optional[str] = None) -> Dict:
    try:
        inventory = get_inventory()
        if day:
            sales = inventory.sales.sales_for_date(date.fromisoformat(day))
        else:
            sales = inventory.sales.list_sales(refresh=True)
        return _ok([_as_dict(s) for s in sales])
    except (InventoryError, ClientError, BotoCoreError, ValueError) as e:
        return _failure(e)


def close_day(day: Optional[str] = None) -> Dict:
    try:
        closing = get_inventory().closings.close_day(date.fromisoformat(day) if day else None)
        return _ok(_as_dict(closing))
    except (InventoryError, ClientError, BotoCoreError, ValueError) as e:
        return _failure(e)


def list_day_closings() -> Dict:
    try:
        closings = get_inventory().closings.list_closings()
        return _ok([_as_dict(c) for c in closings])
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)


def create_replenishment_request(
    product_id: str,
    quantity: Optional[int] = None,
    supplier_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict:
    """Miktar verilmezse ürün için önerilen ikmal miktarı kullanılır."""
    inventory = get_inventory()
    try:
        product = inventory.products.get_product(product_id)
    except (ClientError, BotoCoreError) as e:
        return _failure(e)
    if product is None:
        return {"success": False, "error": f"Ürün bulunamadı: {product_id}"}

    if quantity is None:
        quantity = validation.suggested_replenishment_quantity(product)
    checked = validation.validate_replenishment_quantity(product, quantity)
    if not checked.is_valid:
        return _invalid(checked)
    supplier_id = supplier_id or product.supplier_id
    if not supplier_id:
        return {"success": False, "error": "Bir tedarikçi seçilmelidir"}

    request = inventory.replenishment.create_request(product_id, quantity, supplier_id, notes)
    if request is None:
        return {"success": False, "error": inventory.replenishment.last_error}
    return _ok(request.to_dict())


def create_batch_replenishment(supplier_id: str, items: Dict[str, int]) -> Dict:
    checked = validation.validate_batch_selection(items)
    if not checked.is_valid:
        return _invalid(checked)

    inventory = get_inventory()
    try:
        products = {p.product_id: p for p in inventory.products.list_products()}
    except (InventoryError, ClientError, BotoCoreError) as e:
        return _failure(e)
    missing = [pid for pid in items if pid not in products]
    if missing:
        return {"success": False, "error": f"Ürün bulunamadı: {', '.join(missing)}"}

    batch = [
        ReplenishmentItem(product_id=pid, name=products[pid].name, quantity=qty)
        for pid, qty in items.items()
    ]
    requests = inventory.replenishment.create_batch_request(supplier_id, batch)
    if requests is None:
        return {"success": False, "error": inventory.replenishment.last_error}
    return _ok([r.to_dict() for r in requests])


def list_replenishment_requests(refresh: bool = False) -> Dict:
    service = get_inventory().replenishment
    requests = service.list_requests(refresh=refresh)
    if service.last_error:
        return {"success": False, "error": service.last_error}
    return _ok([r.to_dict() for r in requests])


def update_request_status(request_id: str, status: str, notes: Optional[str] = None) -> Dict:
    service = get_inventory().replenishment
    if not service.update_status(request_id, status, notes):
        return {"success": False, "error": service.last_error}
    request = service.get_request(request_id)
    return _ok(request.to_dict() if request else {"request_id": request_id})


def delete_replenishment_request(request_id: str) -> Dict:
    service = get_inventory().replenishment
    if not service.delete_request(request_id):
        return {"success": False, "error": service.last_error}
    return _ok({"request_id": request_id})


if __name__ == "__main__":
    import asyncio
    from mcp.server.stdio import stdio_server

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    async def run():
        async with stdio_server() as (read, write):
            await app.run(read, write, app.create_initialization_options())

    asyncio.run(run())
