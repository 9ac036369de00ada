from src.services.base_service import BaseService
from src.services.context import SessionContext
from src.services.day_closing import DayClosingService
from src.services.notifier import WebhookNotifier
from src.services.product_service import ProductService
from src.services.profile_service import ProfileService
from src.services.replenishment import ReplenishmentService
from src.services.sales_service import SalesService
from src.services.stock_monitor import StockMonitor
from src.services.supplier_service import SupplierService

__all__ = [
    "BaseService",
    "DayClosingService",
    "ProductService",
    "ProfileService",
    "ReplenishmentService",
    "SalesService",
    "SessionContext",
    "StockMonitor",
    "SupplierService",
    "WebhookNotifier",
]
