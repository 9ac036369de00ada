"""Ürün servisi - CRUD ve atomik stok güncellemeleri.

Stok değişiklikleri oku-değiştir-yaz yerine DynamoDB koşullu güncelleme
ifadeleriyle yapılır:
- artış: `ADD current_stock :qty`
- azalış: `current_stock - :qty` (stok >= qty ise), aksi halde 0'a sabitleme
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from src.models.inventory import Product, StockAlert, Supplier, to_dynamo, to_native, utc_now_iso
from src.services.base_service import (
    BaseService,
    NotFoundError,
    StockUpdateError,
    ValidationError,
    error_code,
    new_id,
)
from src.services.stock_monitor import StockMonitor

logger = logging.getLogger(__name__)

MAX_STOCK_UPDATE_ATTEMPTS = 5

_UPDATABLE_FIELDS = (
    "name", "category", "current_stock", "min_stock", "max_stock",
    "unit_price", "supplier_id", "description", "sku", "unit",
)
_NULLABLE_FIELDS = ("supplier_id", "description", "sku")


class ProductService(BaseService):
    """Aktif profile ait ürünleri yönetir."""

    service_name = "ProductService"

    def __init__(self, *args: Any, monitor: Optional[StockMonitor] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.monitor = monitor or StockMonitor()

    # --- Okuma ---

    def list_products(self, refresh: bool = False) -> list[Product]:
        """Ürünleri tedarikçileri gömülü olarak en yeniden eskiye döndürür."""
        if not refresh:
            cached = self.context.get_cached("products")
            if cached is not None:
                return cached

        items = self.query_profile_scoped(self.products_table)
        suppliers = self._suppliers_by_id({i.get("supplier_id") for i in items})
        products = [
            Product.from_item(i, supplier=suppliers.get(i.get("supplier_id")))
            for i in items
        ]
        self.context.store("products", products)
        return products

    def get_product(self, product_id: str) -> Optional[Product]:
        item = self.get_item(self.products_table, {"product_id": product_id})
        return Product.from_item(item) if item else None

    def stock_alerts(self, refresh: bool = False) -> list[StockAlert]:
        return self.monitor.detect_alerts(self.list_products(refresh=refresh))

    # --- Mutasyonlar ---

    def add_product(
        self,
        name: str,
        category: str,
        current_stock: int = 0,
        min_stock: int = 0,
        max_stock: int = 0,
        unit_price: float = 0.0,
        supplier_id: Optional[str] = None,
        unit: str = "pieces",
        sku: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Product:
        user_id, profile_id = self.require_scope()
        product = Product(
            product_id=new_id(),
            name=name,
            category=category,
            current_stock=current_stock,
            min_stock=min_stock,
            max_stock=max_stock,
            unit_price=unit_price,
            supplier_id=supplier_id or None,
            unit=unit,
            sku=sku or None,
            description=description or None,
            user_id=user_id,
            profile_id=profile_id,
        )
        self.products_table.put_item(Item=product.to_item())
        logger.info("Ürün eklendi: %s (%s)", product.name, product.product_id)
        self._reload()
        return product

    def update_product(self, product_id: str, **updates: Any) -> None:
        """Kısmi güncelleme; yalnızca verilen alanlar yazılır."""
        unknown = set(updates) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Güncellenemeyen alanlar: {sorted(unknown)}")

        fields = {}
        for name in _UPDATABLE_FIELDS:
            if name in updates:
                value = updates[name]
                if name in _NULLABLE_FIELDS:
                    value = value or None
                fields[name] = value
        if not fields:
            return
        fields["updated_at"] = utc_now_iso()

        try:
            self.update_fields(
                self.products_table,
                {"product_id": product_id},
                to_dynamo(fields),
                condition=self.owner_condition("product_id"),
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(f"Ürün bulunamadı: {product_id}") from e
            logger.error("Ürün güncelleme hatası: %s", e)
            raise
        self._reload()

    def delete_product(self, product_id: str) -> None:
        self.delete_owned(self.products_table, {"product_id": product_id})
        logger.info("Ürün silindi: %s", product_id)
        self._reload()

    # --- Atomik stok işlemleri ---

    def increment_stock(self, product_id: str, quantity: int) -> int:
        """Stoğu tek bir ADD ifadesiyle artırır, yeni stoğu döndürür."""
        if quantity <= 0:
            raise ValidationError("Artış miktarı pozitif olmalıdır", {"quantity": str(quantity)})
        try:
            resp = self.products_table.update_item(
                Key={"product_id": product_id},
                UpdateExpression="ADD current_stock :qty SET updated_at = :ts",
                ConditionExpression=Attr("product_id").exists(),
                ExpressionAttributeValues={":qty": quantity, ":ts": utc_now_iso()},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(f"Ürün bulunamadı: {product_id}") from e
            raise
        self.context.invalidate("products")
        return to_native(resp["Attributes"]["current_stock"])

    def decrement_stock_floor(self, product_id: str, quantity: int) -> Optional[int]:
        """Stoğu `max(0, stok - miktar)` olacak şekilde koşullu olarak azaltır.

        Ürün yoksa None döndürür. Eşzamanlı bir yazım iki koşulu da boşa
        çıkarırsa çift yeniden denenir.
        """
        if quantity <= 0:
            raise ValidationError("Azaltma miktarı pozitif olmalıdır", {"quantity": str(quantity)})

        key = {"product_id": product_id}
        for attempt in range(1, MAX_STOCK_UPDATE_ATTEMPTS + 1):
            ts = utc_now_iso()
            try:
                resp = self.products_table.update_item(
                    Key=key,
                    UpdateExpression="SET current_stock = current_stock - :qty, updated_at = :ts",
                    ConditionExpression=Attr("product_id").exists() & Attr("current_stock").gte(quantity),
                    ExpressionAttributeValues={":qty": quantity, ":ts": ts},
                    ReturnValues="UPDATED_NEW",
                )
                self.context.invalidate("products")
                return to_native(resp["Attributes"]["current_stock"])
            except ClientError as e:
                if error_code(e) != "ConditionalCheckFailedException":
                    raise

            try:
                self.products_table.update_item(
                    Key=key,
                    UpdateExpression="SET current_stock = :zero, updated_at = :ts",
                    ConditionExpression=Attr("product_id").exists() & Attr("current_stock").lt(quantity),
                    ExpressionAttributeValues={":zero": 0, ":ts": ts},
                )
                self.context.invalidate("products")
                return 0
            except ClientError as e:
                if error_code(e) != "ConditionalCheckFailedException":
                    raise

            if self.get_item(self.products_table, key) is None:
                logger.warning("Stok düşülemedi, ürün bulunamadı: %s", product_id)
                return None
            logger.warning("Stok güncellemesi çakıştı (%s), deneme %d", product_id, attempt)

        raise StockUpdateError(f"Stok güncellenemedi: {product_id}")

    # --- Yardımcılar ---

    def _suppliers_by_id(self, supplier_ids: set) -> dict[str, Supplier]:
        ids = [s for s in supplier_ids if s]
        if not ids:
            return {}
        cached = self.context.get_cached("suppliers")
        if cached is not None:
            known = {s.supplier_id: s for s in cached}
            if all(s in known for s in ids):
                return known

        result: dict[str, Supplier] = {}
        for supplier_id in ids:
            item = self.get_item(self.suppliers_table, {"supplier_id": supplier_id})
            if item:
                result[supplier_id] = Supplier.from_item(item)
        return result

    def _reload(self) -> None:
        self.context.invalidate("products")
        self.list_products(refresh=True)
