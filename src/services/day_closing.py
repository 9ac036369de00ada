"""Gün sonu kapanış servisi."""

from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Any, Iterable, Optional

from boto3.dynamodb.conditions import Key

from src.models.inventory import DayClosing, Sale, utc_now_iso
from src.services.base_service import BaseService, new_id
from src.services.sales_service import SalesService

logger = logging.getLogger(__name__)


def summarize(sales: Iterable[Sale]) -> dict:
    """Satış listesinden toplam adet ve toplam değer üretir."""
    total_sales = 0
    total_value = 0.0
    for sale in sales:
        total_sales += sale.quantity
        total_value += sale.total_value
    return {"total_sales": total_sales, "total_value": round(total_value, 2)}


class DayClosingService(BaseService):
    """Günlük satış özetlerini kaydeder ve listeler."""

    service_name = "DayClosingService"

    def __init__(self, *args: Any, sales: Optional[SalesService] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.sales = sales or SalesService(
            self.context,
            self.settings,
            dynamodb_resource=self.dynamodb,
            dynamodb_client=self.dynamodb_client,
        )

    def close_day(
        self,
        day: Optional[date_type] = None,
        sales: Optional[list[Sale]] = None,
    ) -> DayClosing:
        """Günü kapatır; satış listesi verilmezse o günün profil satışları kullanılır."""
        user_id = self.require_user()
        day = day or date_type.fromisoformat(utc_now_iso()[:10])
        if sales is None:
            sales = self.sales.sales_for_date(day)

        totals = summarize(sales)
        closing = DayClosing(
            closing_id=new_id(),
            date=day.isoformat(),
            total_sales=totals["total_sales"],
            total_value=totals["total_value"],
            closed_by=user_id,
            profile_id=self.context.profile_id,
        )
        self.closings_table.put_item(Item=closing.to_item())
        logger.info(
            "Gün kapatıldı: %s (%d adet, %.2f)",
            closing.date, closing.total_sales, closing.total_value,
        )
        return closing

    def list_closings(self) -> list[DayClosing]:
        """Kullanıcının kapanışlarını tarihe göre yeniden eskiye döndürür."""
        user_id = self.require_user()
        items = self.query_all(
            self.closings_table,
            IndexName="ClosedByDateIndex",
            KeyConditionExpression=Key("closed_by").eq(user_id),
            ScanIndexForward=False,
        )
        return [DayClosing.from_item(i) for i in items]
