"""Stok Uyarıları - ürünlerin mevcut/minimum stok durumundan türetilir.

Uyarılar kalıcı değildir; her ürün listesi yüklendiğinde yeniden hesaplanır.
"""

from __future__ import annotations

import logging
from typing import Iterable

from src.models.inventory import AlertSeverity, AlertType, Product, StockAlert
from src.services.validation import suggested_replenishment_quantity

logger = logging.getLogger(__name__)


class StockMonitor:
    """Ürün listesinden düşük / tükenmiş stok uyarıları üretir."""

    def detect_alerts(self, products: Iterable[Product]) -> list[StockAlert]:
        """Stok <= 0 ise `out_of_stock`, stok <= minimum ise `low_stock` uyarısı üretir."""
        alerts: list[StockAlert] = []

        for product in products:
            if product.current_stock <= 0:
                alert_type = AlertType.OUT_OF_STOCK
            elif product.current_stock <= product.min_stock:
                alert_type = AlertType.LOW_STOCK
            else:
                continue

            alerts.append(
                StockAlert(
                    alert_id=f"alert-{product.product_id}",
                    product_id=product.product_id,
                    alert_type=alert_type,
                    severity=self.calculate_severity(product.current_stock, product.min_stock),
                    current_stock=product.current_stock,
                    min_stock=product.min_stock,
                    product=product,
                )
            )

        if alerts:
            logger.info("%d ürün minimum stok seviyesinde veya altında", len(alerts))
        return alerts

    @staticmethod
    def calculate_severity(quantity: int, threshold: int) -> AlertSeverity:
        """Stok seviyesine göre uyarı şiddetini hesaplar."""
        if quantity <= 0:
            return AlertSeverity.CRITICAL
        if threshold <= 0:
            return AlertSeverity.LOW
        ratio = quantity / threshold
        if ratio < 0.25:
            return AlertSeverity.HIGH
        if ratio < 0.5:
            return AlertSeverity.MEDIUM
        return AlertSeverity.LOW

    def notify_low_stock(self, alerts: list[StockAlert]) -> list[dict]:
        """Uyarıları ikmal talebi önerisine dönüştürülebilecek bildirimlere çevirir."""
        notifications = []
        for alert in alerts:
            product = alert.product
            suggested = suggested_replenishment_quantity(product) if product is not None else 0
            notifications.append(
                {
                    "type": "low_stock_notification",
                    "product_id": alert.product_id,
                    "product_name": product.name if product else "",
                    "alert_type": alert.alert_type.value,
                    "severity": alert.severity.value,
                    "current_stock": alert.current_stock,
                    "min_stock": alert.min_stock,
                    "suggested_quantity": suggested,
                }
            )
        return notifications
