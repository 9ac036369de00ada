"""Envanter ve tedarik veri modelleri.

DynamoDB satırları ile uygulama içi nesneler arasındaki dönüşümler
(`from_item` / `to_item`) burada tutulur.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


def utc_now_iso() -> str:
    """Şu anki zamanı ISO-8601 (UTC) olarak döndürür."""
    return datetime.now(timezone.utc).isoformat()


def to_native(obj: Any) -> Any:
    """Decimal ve iç içe yapıları Python tiplerine çevirir."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: to_native(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_native(i) for i in obj]
    return obj


def to_dynamo(obj: Any) -> Any:
    """float değerleri DynamoDB'nin kabul ettiği Decimal'e çevirir."""
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_dynamo(i) for i in obj]
    return obj


def _drop_none(item: dict) -> dict:
    return {k: v for k, v in item.items() if v is not None}


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class AlertType(str, Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class AuthUser:
    """Uzak servisin oturumundan gelen kimlik kaydı."""

    user_id: str
    email: str = ""
    metadata: dict = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.metadata.get("username") or self.email or "Admin"


@dataclass
class Profile:
    profile_id: str
    user_id: str
    name: str
    address: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_item(cls, item: dict) -> "Profile":
        item = to_native(item)
        return cls(
            profile_id=item["profile_id"],
            user_id=item["user_id"],
            name=item.get("name", ""),
            address=item.get("address"),
            created_at=item.get("created_at", ""),
        )

    def to_item(self) -> dict:
        return _drop_none(asdict(self))


@dataclass
class Supplier:
    supplier_id: str
    name: str
    contact: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    user_id: str = ""
    profile_id: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_item(cls, item: dict) -> "Supplier":
        item = to_native(item)
        return cls(
            supplier_id=item["supplier_id"],
            name=item.get("name", ""),
            contact=item.get("contact", ""),
            phone=item.get("phone") or None,
            email=item.get("email") or None,
            address=item.get("address") or None,
            user_id=item.get("user_id", ""),
            profile_id=item.get("profile_id", ""),
            created_at=item.get("created_at", ""),
        )

    def to_item(self) -> dict:
        return _drop_none(asdict(self))


@dataclass
class Product:
    product_id: str
    name: str
    category: str
    current_stock: int = 0
    min_stock: int = 0
    max_stock: int = 0
    unit_price: float = 0.0
    supplier_id: Optional[str] = None
    unit: str = "pieces"
    sku: Optional[str] = None
    description: Optional[str] = None
    user_id: str = ""
    profile_id: str = ""
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    supplier: Optional[Supplier] = None

    @classmethod
    def from_item(cls, item: dict, supplier: Optional[Supplier] = None) -> "Product":
        item = to_native(item)
        return cls(
            product_id=item["product_id"],
            name=item.get("name", ""),
            category=item.get("category", ""),
            current_stock=item.get("current_stock", 0),
            min_stock=item.get("min_stock", 0),
            max_stock=item.get("max_stock", 0),
            unit_price=item.get("unit_price", 0.0),
            supplier_id=item.get("supplier_id") or None,
            unit=item.get("unit", "pieces"),
            sku=item.get("sku") or None,
            description=item.get("description") or None,
            user_id=item.get("user_id", ""),
            profile_id=item.get("profile_id", ""),
            created_at=item.get("created_at", ""),
            updated_at=item.get("updated_at", ""),
            supplier=supplier,
        )

    def to_item(self) -> dict:
        data = asdict(self)
        data.pop("supplier")
        return to_dynamo(_drop_none(data))

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.supplier is None:
            data.pop("supplier")
        return data


@dataclass
class Sale:
    sale_id: str
    product_id: str
    quantity: int
    total_value: float
    sale_date: str = field(default_factory=utc_now_iso)
    user_id: str = ""
    profile_id: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_item(cls, item: dict) -> "Sale":
        item = to_native(item)
        return cls(
            sale_id=item["sale_id"],
            product_id=item.get("product_id", ""),
            quantity=item.get("quantity", 0),
            total_value=item.get("total_value", 0.0),
            sale_date=item.get("sale_date", ""),
            user_id=item.get("user_id", ""),
            profile_id=item.get("profile_id", ""),
            created_at=item.get("created_at", ""),
        )

    def to_item(self) -> dict:
        return to_dynamo(_drop_none(asdict(self)))


@dataclass
class SaleLine:
    """Kaydedilmek istenen tek satış satırı."""

    product_id: str
    quantity: int


@dataclass
class ReplenishmentItem:
    """Toplu taleplerdeki ürün satırı."""

    product_id: str
    name: str
    quantity: int


@dataclass
class ReplenishmentRequest:
    request_id: str
    product_id: Optional[str]
    supplier_id: str
    quantity: int
    status: RequestStatus = RequestStatus.PENDING
    requested_by: str = ""
    requested_at: str = field(default_factory=utc_now_iso)
    profile_id: Optional[str] = None
    approved_at: Optional[str] = None
    completed_at: Optional[str] = None
    updated_at: Optional[str] = None
    notes: Optional[str] = None
    products: Optional[list[ReplenishmentItem]] = None
    product: Optional[Product] = None
    supplier: Optional[Supplier] = None

    @classmethod
    def from_item(
        cls,
        item: dict,
        product: Optional[Product] = None,
        supplier: Optional[Supplier] = None,
    ) -> "ReplenishmentRequest":
        item = to_native(item)
        products = None
        if item.get("products"):
            products = [
                ReplenishmentItem(
                    product_id=p["product_id"],
                    name=p.get("name", ""),
                    quantity=p.get("quantity", 0),
                )
                for p in item["products"]
            ]
        return cls(
            request_id=item["request_id"],
            product_id=item.get("product_id") or None,
            supplier_id=item.get("supplier_id", ""),
            quantity=item.get("quantity", 0),
            status=RequestStatus(item.get("status", RequestStatus.PENDING.value)),
            requested_by=item.get("requested_by", ""),
            requested_at=item.get("requested_at", ""),
            profile_id=item.get("profile_id") or None,
            approved_at=item.get("approved_at"),
            completed_at=item.get("completed_at"),
            updated_at=item.get("updated_at"),
            notes=item.get("notes"),
            products=products,
            product=product,
            supplier=supplier,
        )

    def to_item(self) -> dict:
        data = asdict(self)
        data.pop("product")
        data.pop("supplier")
        data["status"] = self.status.value
        return to_dynamo(_drop_none(data))

    def stock_increments(self) -> list[tuple[str, int]]:
        """Onayda stoğa eklenecek (product_id, miktar) çiftleri."""
        if self.product_id:
            return [(self.product_id, self.quantity)]
        return [(p.product_id, p.quantity) for p in self.products or []]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        if self.product is not None:
            data["product"] = self.product.to_dict()
        return data


@dataclass
class DayClosing:
    closing_id: str
    date: str
    total_sales: int
    total_value: float
    closed_by: str
    profile_id: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_item(cls, item: dict) -> "DayClosing":
        item = to_native(item)
        return cls(
            closing_id=item["closing_id"],
            date=item.get("date", ""),
            total_sales=item.get("total_sales", 0),
            total_value=item.get("total_value", 0.0),
            closed_by=item.get("closed_by", ""),
            profile_id=item.get("profile_id"),
            created_at=item.get("created_at", ""),
        )

    def to_item(self) -> dict:
        return to_dynamo(_drop_none(asdict(self)))


@dataclass
class StockAlert:
    alert_id: str
    product_id: str
    alert_type: AlertType
    severity: AlertSeverity
    current_stock: int
    min_stock: int
    product: Optional[Product] = None
    is_active: bool = True
    created_at: str = field(default_factory=utc_now_iso)
