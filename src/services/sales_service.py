"""Satış kayıt servisi.

Satırlar önce toplu olarak yazılır, ardından her satış için sırayla
ürün stoğu `max(0, stok - miktar)` olacak şekilde düşülür.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Any, Optional

from src.models.inventory import Sale, SaleLine, utc_now_iso
from src.services.base_service import BaseService, NotFoundError, ValidationError, new_id
from src.services.product_service import ProductService

logger = logging.getLogger(__name__)


class SalesService(BaseService):
    """Satışları kaydeder ve stoğu günceller."""

    service_name = "SalesService"

    def __init__(self, *args: Any, products: Optional[ProductService] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.products = products or ProductService(
            self.context,
            self.settings,
            dynamodb_resource=self.dynamodb,
            dynamodb_client=self.dynamodb_client,
        )

    def list_sales(self, refresh: bool = False) -> list[Sale]:
        if not refresh:
            cached = self.context.get_cached("sales")
            if cached is not None:
                return cached
        items = self.query_profile_scoped(self.sales_table)
        sales = [Sale.from_item(i) for i in items]
        self.context.store("sales", sales)
        return sales

    def sales_for_date(self, day: Optional[date_type] = None, refresh: bool = True) -> list[Sale]:
        """Verilen günün (varsayılan: bugün, UTC) satışlarını döndürür."""
        prefix = (day or date_type.fromisoformat(utc_now_iso()[:10])).isoformat()
        return [s for s in self.list_sales(refresh=refresh) if s.sale_date.startswith(prefix)]

    def record_sale(self, product_id: str, quantity: int, sale_date: Optional[str] = None) -> Sale:
        return self.record_sales([SaleLine(product_id=product_id, quantity=quantity)], sale_date)[0]

    def record_sales(self, lines: list[SaleLine], sale_date: Optional[str] = None) -> list[Sale]:
        """Satışları yazar ve her satış için stoğu tabana sabitleyerek düşer.

        Toplam değer, satış anındaki birim fiyat ile istemci tarafında
        hesaplanır.
        """
        user_id, profile_id = self.require_scope()
        if not lines:
            return []
        for idx, line in enumerate(lines):
            if line.quantity <= 0:
                raise ValidationError(
                    "Satış miktarı pozitif olmalıdır",
                    {f"line_{idx}": "Miktar 0'dan büyük olmalıdır"},
                )

        prices = {p.product_id: p.unit_price for p in self.products.list_products()}
        timestamp = sale_date or utc_now_iso()
        sales = []
        for line in lines:
            if line.product_id not in prices:
                product = self.products.get_product(line.product_id)
                if product is None:
                    raise NotFoundError(f"Ürün bulunamadı: {line.product_id}")
                prices[line.product_id] = product.unit_price
            sales.append(
                Sale(
                    sale_id=new_id(),
                    product_id=line.product_id,
                    quantity=line.quantity,
                    total_value=round(line.quantity * prices[line.product_id], 2),
                    sale_date=timestamp,
                    user_id=user_id,
                    profile_id=profile_id,
                )
            )

        with self.sales_table.batch_writer() as batch:
            for sale in sales:
                batch.put_item(Item=sale.to_item())
        logger.info("%d satış kaydedildi", len(sales))

        for sale in sales:
            new_stock = self.products.decrement_stock_floor(sale.product_id, sale.quantity)
            logger.debug("Stok güncellendi: %s -> %s", sale.product_id, new_stock)

        self.products.list_products(refresh=True)
        self.context.invalidate("sales")
        self.list_sales(refresh=True)
        return sales
