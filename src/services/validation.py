"""Form validasyonları - gönderimi engelleyen yerel kontroller.

Ürün, tedarikçi, satış satırları ve ikmal miktarları için alan bazlı
hata mesajları üretir. Servis katmanı bu kuralları zorlamaz; çağıran
yüzey (ör. MCP sunucusu) mutasyondan önce çalıştırır.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.models.inventory import Product, SaleLine

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _result(errors: dict[str, str]) -> ValidationResult:
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_product(data: dict) -> ValidationResult:
    """Ürün formu: zorunlu alanlar ve stok sınırları (max > min >= 0)."""
    errors: dict[str, str] = {}

    if _is_blank(data.get("name")):
        errors["name"] = "Ürün adı zorunludur"
    if _is_blank(data.get("category")):
        errors["category"] = "Kategori zorunludur"
    if _is_blank(data.get("supplier_id")):
        errors["supplier_id"] = "Bir tedarikçi seçilmelidir"

    current_stock = data.get("current_stock", 0)
    min_stock = data.get("min_stock", 0)
    max_stock = data.get("max_stock", 0)
    unit_price = data.get("unit_price", 0)

    if current_stock < 0:
        errors["current_stock"] = "Mevcut stok negatif olamaz"
    if min_stock < 0:
        errors["min_stock"] = "Minimum stok negatif olamaz"
    if max_stock <= 0:
        errors["max_stock"] = "Maksimum stok 0'dan büyük olmalıdır"
    elif max_stock <= min_stock:
        errors["max_stock"] = "Maksimum stok minimum stoktan büyük olmalıdır"
    if unit_price < 0:
        errors["unit_price"] = "Birim fiyat negatif olamaz"

    return _result(errors)


def validate_supplier(data: dict) -> ValidationResult:
    errors: dict[str, str] = {}

    if _is_blank(data.get("name")):
        errors["name"] = "Tedarikçi adı zorunludur"
    if _is_blank(data.get("contact")):
        errors["contact"] = "İletişim kişisi zorunludur"

    email = data.get("email")
    if not _is_blank(email) and not EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "E-posta adresi geçersiz"

    phone = data.get("phone")
    if not _is_blank(phone) and not PHONE_PATTERN.match(phone.strip()):
        errors["phone"] = "Telefon numarası geçersiz"

    return _result(errors)


def validate_sale_lines(lines: list[SaleLine], products: Iterable[Product]) -> ValidationResult:
    """Satış satırları: ürün seçili, miktar > 0, ürün mevcut ve stok yeterli.

    Hatalar `line_<index>` anahtarıyla, hiç geçerli satır yoksa `general`
    anahtarıyla döner.
    """
    by_id = {p.product_id: p for p in products}
    errors: dict[str, str] = {}
    has_valid_line = False

    for idx, line in enumerate(lines):
        key = f"line_{idx}"
        if not line.product_id:
            errors[key] = "Bir ürün seçin"
            continue
        if line.quantity is None or line.quantity <= 0:
            errors[key] = "Miktar 0'dan büyük olmalıdır"
            continue
        product = by_id.get(line.product_id)
        if product is None:
            errors[key] = "Ürün bulunamadı"
            continue
        if line.quantity > product.current_stock:
            errors[key] = f"Yetersiz stok. Mevcut: {product.current_stock} {product.unit}"
            continue
        has_valid_line = True

    if not has_valid_line:
        errors["general"] = "En az bir geçerli ürün ekleyin"

    return _result(errors)


def validate_replenishment_quantity(product: Product, quantity: int) -> ValidationResult:
    """İkmal miktarı pozitif olmalı ve ürünün maksimum stoğunu aşmamalı."""
    errors: dict[str, str] = {}
    if quantity <= 0:
        errors["quantity"] = "Miktar 0'dan büyük olmalıdır"
    elif quantity > product.max_stock:
        errors["quantity"] = (
            f"Miktar maksimum stoğu aşamaz ({product.max_stock} {product.unit})"
        )
    return _result(errors)


def validate_batch_selection(selection: dict[str, int]) -> ValidationResult:
    """Toplu ikmal: en az bir ürün seçilmeli, her miktar pozitif olmalı."""
    errors: dict[str, str] = {}
    if not selection:
        errors["selection"] = "En az bir ürün seçilmelidir"
    for product_id, quantity in selection.items():
        if quantity is None or quantity <= 0:
            errors[f"quantity_{product_id}"] = "Miktar 0'dan büyük olmalıdır"
    return _result(errors)


def suggested_replenishment_quantity(product: Product) -> int:
    """Form için başlangıç önerisi: minimum stoğun iki katı, boşluğu aşmadan."""
    room = max(0, product.max_stock - product.current_stock)
    suggestion = product.min_stock * 2
    return min(suggestion, room) if room else suggestion
