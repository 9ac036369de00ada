"""Tedarikçi servisi ve varsayılan tedarikçi oluşturma."""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import ClientError

from src.models.inventory import Supplier, utc_now_iso
from src.services.base_service import BaseService, NotFoundError, error_code, new_id

logger = logging.getLogger(__name__)

DEFAULT_SUPPLIER_NAME = "default"

_UPDATABLE_FIELDS = ("name", "contact", "phone", "email", "address")
_NULLABLE_FIELDS = ("phone", "email", "address")


class SupplierService(BaseService):
    """Aktif profile ait tedarikçileri yönetir."""

    service_name = "SupplierService"

    def list_suppliers(self, refresh: bool = False) -> list[Supplier]:
        if not refresh:
            cached = self.context.get_cached("suppliers")
            if cached is not None:
                return cached
        items = self.query_profile_scoped(self.suppliers_table)
        suppliers = [Supplier.from_item(i) for i in items]
        self.context.store("suppliers", suppliers)
        return suppliers

    def get_supplier(self, supplier_id: str) -> Optional[Supplier]:
        item = self.get_item(self.suppliers_table, {"supplier_id": supplier_id})
        return Supplier.from_item(item) if item else None

    def add_supplier(
        self,
        name: str,
        contact: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Supplier:
        user_id, profile_id = self.require_scope()
        supplier = Supplier(
            supplier_id=new_id(),
            name=name,
            contact=contact,
            phone=phone or None,
            email=email or None,
            address=address or None,
            user_id=user_id,
            profile_id=profile_id,
        )
        self.suppliers_table.put_item(Item=supplier.to_item())
        logger.info("Tedarikçi eklendi: %s", supplier.name)
        self._reload()
        return supplier

    def update_supplier(self, supplier_id: str, **updates: Optional[str]) -> None:
        """Kısmi güncelleme; boş metinler alanı temizler."""
        fields = {}
        for name in _UPDATABLE_FIELDS:
            if name in updates:
                value = updates[name]
                if name in _NULLABLE_FIELDS:
                    value = value or None
                fields[name] = value
        unknown = set(updates) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Güncellenemeyen alanlar: {sorted(unknown)}")
        if not fields:
            return
        fields["updated_at"] = utc_now_iso()

        try:
            self.update_fields(
                self.suppliers_table,
                {"supplier_id": supplier_id},
                fields,
                condition=self.owner_condition("supplier_id"),
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(f"Tedarikçi bulunamadı: {supplier_id}") from e
            logger.error("Tedarikçi güncelleme hatası: %s", e)
            raise
        self._reload()

    def delete_supplier(self, supplier_id: str) -> None:
        self.delete_owned(self.suppliers_table, {"supplier_id": supplier_id})
        logger.info("Tedarikçi silindi: %s", supplier_id)
        self._reload()

    # --- Varsayılan tedarikçi ---

    def find_default_supplier(self) -> Optional[Supplier]:
        for supplier in self.list_suppliers():
            if supplier.name == DEFAULT_SUPPLIER_NAME:
                return supplier
        return None

    def ensure_default_supplier(self, phone: str = "") -> Optional[Supplier]:
        """Profilde "default" adlı tedarikçi yoksa kullanıcı bilgileriyle oluşturur.

        Oluşturulduysa yeni tedarikçiyi, zaten varsa None döndürür.
        """
        if self.find_default_supplier() is not None:
            return None

        user = self.context.user
        profile = self.context.profile
        if user is None or profile is None:
            return None

        logger.info("Varsayılan tedarikçi oluşturuluyor (profil: %s)", profile.profile_id)
        return self.add_supplier(
            name=DEFAULT_SUPPLIER_NAME,
            contact=user.display_name,
            phone=phone or user.metadata.get("phone", ""),
            email=user.email,
            address=profile.address or "",
        )

    def get_admin_phone(self) -> str:
        """Varsayılan tedarikçinin telefonu; herhangi bir hatada boş metin."""
        try:
            supplier = self.find_default_supplier()
        except Exception as e:
            logger.error("Yönetici telefonu alınamadı: %s", e)
            return ""
        return (supplier.phone or "") if supplier else ""

    def _reload(self) -> None:
        self.context.invalidate("suppliers")
        self.list_suppliers(refresh=True)
