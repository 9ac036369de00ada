"""Servis bileşimi - tüm servisleri ortak bağlam ve AWS istemcileriyle kurar."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import boto3

from src.config import Settings, load_settings
from src.models.inventory import AuthUser
from src.services.context import SessionContext
from src.services.day_closing import DayClosingService
from src.services.notifier import WebhookNotifier
from src.services.product_service import ProductService
from src.services.profile_service import ProfileService
from src.services.replenishment import ReplenishmentService
from src.services.sales_service import SalesService
from src.services.supplier_service import SupplierService

logger = logging.getLogger(__name__)


@dataclass
class InventoryApp:
    settings: Settings
    context: SessionContext
    profiles: ProfileService
    suppliers: SupplierService
    products: ProductService
    sales: SalesService
    closings: DayClosingService
    replenishment: ReplenishmentService

    def bootstrap(self) -> None:
        """Aktif profil için ilk yükleme: varsayılan tedarikçi + koleksiyonlar."""
        if self.context.user is None or self.context.profile is None:
            return
        self.suppliers.list_suppliers(refresh=True)
        self.suppliers.ensure_default_supplier(phone=self.settings.user_phone)
        self.products.list_products(refresh=True)
        self.sales.list_sales(refresh=True)


def build_app(
    settings: Optional[Settings] = None,
    user: Optional[AuthUser] = None,
    dynamodb_resource: Optional[Any] = None,
    dynamodb_client: Optional[Any] = None,
    http: Optional[Any] = None,
) -> InventoryApp:
    """Servisleri tek bir bağlam ve paylaşılan istemcilerle oluşturur.

    Kullanıcı verilmezse ayarlardaki kimlik (INVENTORY_USER_ID) kullanılır;
    ayarlarda profil varsa aktif profil olarak seçilir.
    """
    settings = settings or load_settings()
    if user is None and settings.user_id:
        user = AuthUser(
            user_id=settings.user_id,
            email=settings.user_email,
            metadata={"username": settings.username, "phone": settings.user_phone},
        )

    dynamodb_resource = dynamodb_resource or boto3.resource(
        "dynamodb", region_name=settings.region_name, endpoint_url=settings.endpoint_url
    )
    dynamodb_client = dynamodb_client or boto3.client(
        "dynamodb", region_name=settings.region_name, endpoint_url=settings.endpoint_url
    )
    clients = {"dynamodb_resource": dynamodb_resource, "dynamodb_client": dynamodb_client}

    context = SessionContext(user=user)
    profiles = ProfileService(context, settings, **clients)
    suppliers = SupplierService(context, settings, **clients)
    products = ProductService(context, settings, **clients)
    sales = SalesService(context, settings, products=products, **clients)
    closings = DayClosingService(context, settings, sales=sales, **clients)
    notifier = WebhookNotifier(settings.webhook_url, timeout=settings.webhook_timeout, http=http)
    replenishment = ReplenishmentService(
        context, settings, suppliers=suppliers, notifier=notifier, **clients
    )

    app = InventoryApp(
        settings=settings,
        context=context,
        profiles=profiles,
        suppliers=suppliers,
        products=products,
        sales=sales,
        closings=closings,
        replenishment=replenishment,
    )

    if user is not None and settings.profile_id:
        app.profiles.select_profile(settings.profile_id)
    logger.info("Envanter servisleri hazır (region: %s)", settings.region_name)
    return app
