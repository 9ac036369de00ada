"""İkmal Talebi Servisi - tedarikçiden stok talebi yaşam döngüsü.

Durumlar:
    pending -> approved -> completed
    pending -> rejected

- Tekli ve toplu talep oluşturur (toplu talepte kalem başına bir kayıt;
  kalemler arası atomiklik yoktur, kısmi hata geri alınmaz)
- Aktif profile ait talepleri yeniden eskiye listeler
- Onayda talebi doğrudan `completed` durumuna taşır ve ürün stoğunu
  aynı DynamoDB transaction'ı içinde artırır
- Red / tamamlama geçişlerinde yalnızca zaman damgası yazar
- Silme her durumda serbesttir, stok etkisi geri alınmaz
- Her mutasyondan sonra talep listesi yeniden yüklenir

Her işlem hatayı yakalar, okunabilir mesajı `last_error` alanına yazar ve
başarı bayrağı / None / boş liste döndürür.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Optional, TypeVar

from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from src.models.inventory import (
    Product,
    ReplenishmentItem,
    ReplenishmentRequest,
    RequestStatus,
    Supplier,
    utc_now_iso,
)
from src.services.base_service import (
    BaseService,
    InvalidTransitionError,
    InventoryError,
    NotFoundError,
    ValidationError,
    error_code,
    new_id,
)
from src.services.notifier import WebhookNotifier
from src.services.supplier_service import SupplierService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Hedef durum -> izin verilen kaynak durumlar
ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset] = {
    RequestStatus.APPROVED: frozenset({RequestStatus.PENDING}),
    RequestStatus.REJECTED: frozenset({RequestStatus.PENDING}),
    RequestStatus.COMPLETED: frozenset({RequestStatus.PENDING, RequestStatus.APPROVED}),
}

_serializer = TypeSerializer()


def _typed(values: dict) -> dict:
    return {k: _serializer.serialize(v) for k, v in values.items()}


class ReplenishmentService(BaseService):
    """İkmal taleplerini oluşturan, listeleyen ve durumlarını yöneten servis."""

    service_name = "ReplenishmentService"

    def __init__(
        self,
        *args: Any,
        suppliers: Optional[SupplierService] = None,
        notifier: Optional[WebhookNotifier] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.suppliers = suppliers or SupplierService(
            self.context,
            self.settings,
            dynamodb_resource=self.dynamodb,
            dynamodb_client=self.dynamodb_client,
        )
        self.notifier = notifier or WebhookNotifier(
            self.settings.webhook_url, timeout=self.settings.webhook_timeout
        )
        self.loading = False
        self.last_error: Optional[str] = None

    # --- Oluşturma ---

    def create_request(
        self,
        product_id: str,
        quantity: int,
        supplier_id: str,
        notes: Optional[str] = None,
    ) -> Optional[ReplenishmentRequest]:
        """Tekli talep oluşturur ve webhook'a bildirir."""

        def _create() -> ReplenishmentRequest:
            user_id, profile_id = self.require_scope()
            request = self._insert(product_id, quantity, supplier_id, user_id, profile_id, notes)
            self._reload()
            self.notifier.notify_single(
                request, self.context.profile, self._admin_phone()
            )
            return request

        return self._run("İkmal talebi oluşturma", _create, default=None)

    def create_batch_request(
        self,
        supplier_id: str,
        items: list[ReplenishmentItem],
    ) -> Optional[list[ReplenishmentRequest]]:
        """Her kalem için ayrı bir talep kaydı yazar.

        Kalemler tek tek eklenir; bir kalem hata verirse önceki kalemler
        kalıcı kalır ve işlem None döndürür.
        """

        def _create_batch() -> list[ReplenishmentRequest]:
            user_id = self.require_user()
            if not items:
                raise ValidationError("En az bir ürün seçilmelidir", {"selection": "empty"})
            results = []
            for item in items:
                results.append(
                    self._insert(
                        item.product_id,
                        item.quantity,
                        supplier_id,
                        user_id,
                        self.context.profile_id,
                    )
                )
            logger.info("Toplu ikmal talebi: %d kalem", len(results))
            self._reload()
            self.notifier.notify_multi(results, self.context.profile, self._admin_phone())
            return results

        return self._run("Toplu ikmal talebi oluşturma", _create_batch, default=None)

    def _insert(
        self,
        product_id: str,
        quantity: int,
        supplier_id: str,
        user_id: str,
        profile_id: Optional[str],
        notes: Optional[str] = None,
    ) -> ReplenishmentRequest:
        if quantity <= 0:
            raise ValidationError("Miktar 0'dan büyük olmalıdır", {"quantity": str(quantity)})

        request = ReplenishmentRequest(
            request_id=new_id(),
            product_id=product_id,
            supplier_id=supplier_id,
            quantity=quantity,
            status=RequestStatus.PENDING,
            requested_by=user_id,
            requested_at=utc_now_iso(),
            profile_id=profile_id,
            notes=notes or None,
        )
        # Referanslar kayıttan önce çözülür
        self._attach_references([request])
        self.requests_table.put_item(Item=request.to_item())
        self.context.invalidate("replenishment_requests")
        logger.info(
            "İkmal talebi oluşturuldu: %s (%s x%d)",
            request.request_id, product_id, quantity,
        )
        return request

    # --- Listeleme ---

    def list_requests(self, refresh: bool = False) -> list[ReplenishmentRequest]:
        """Aktif profilin taleplerini `requested_at` azalan sırada döndürür."""

        def _list() -> list[ReplenishmentRequest]:
            if not self.context.profile_id:
                logger.info("Aktif profil yok, boş liste döndürülüyor")
                return []
            if not refresh:
                cached = self.context.get_cached("replenishment_requests")
                if cached is not None:
                    return cached
            return self._fetch_requests()

        return self._run("İkmal talepleri listeleme", _list, default=[])

    def _fetch_requests(self) -> list[ReplenishmentRequest]:
        try:
            items = self.query_all(
                self.requests_table,
                IndexName="ProfileRequestedIndex",
                KeyConditionExpression=Key("profile_id").eq(self.context.profile_id),
                ScanIndexForward=False,
            )
        except ClientError as e:
            if not self.settings.legacy_requester_fallback:
                raise
            logger.warning("Profil sorgusu başarısız, talep eden kullanıcıya göre deneniyor: %s", e)
            items = self._query_by_requester()

        requests = [ReplenishmentRequest.from_item(i) for i in items]
        self._attach_references(requests)
        self.context.store("replenishment_requests", requests)
        return requests

    def _reload(self) -> None:
        self.context.invalidate("replenishment_requests")
        if self.context.profile_id:
            self._fetch_requests()

    def _query_by_requester(self) -> list[dict]:
        user_id = self.require_user()
        return self.query_all(
            self.requests_table,
            IndexName="RequesterIndex",
            KeyConditionExpression=Key("requested_by").eq(user_id),
            ScanIndexForward=False,
        )

    def get_request(self, request_id: str) -> Optional[ReplenishmentRequest]:
        item = self.get_item(self.requests_table, {"request_id": request_id})
        return ReplenishmentRequest.from_item(item) if item else None

    # --- Durum geçişleri ---

    def update_status(
        self,
        request_id: str,
        status: RequestStatus | str,
        notes: Optional[str] = None,
    ) -> bool:
        """Talep durumunu değiştirir.

        `approved` hedefi kayıtta `completed` olarak saklanır; approved_at ve
        completed_at damgalanır ve ürün stoğu talep miktarı kadar artar.
        """

        def _update() -> bool:
            target = RequestStatus(status)
            request = self.get_request(request_id)
            if request is None:
                raise NotFoundError(f"Talep bulunamadı: {request_id}")

            allowed = ALLOWED_TRANSITIONS.get(target)
            if not allowed or request.status not in allowed:
                raise InvalidTransitionError(
                    f"Geçersiz durum geçişi: {request.status.value} -> {target.value}"
                )

            if target == RequestStatus.APPROVED:
                self._approve_and_receive(request, notes)
            else:
                self._stamp_transition(request, target, notes)

            self.context.invalidate("products")
            self._reload()
            return True

        return self._run("Talep durumu güncelleme", _update, default=False)

    def approve(self, request_id: str, notes: Optional[str] = None) -> bool:
        return self.update_status(request_id, RequestStatus.APPROVED, notes)

    def reject(self, request_id: str, notes: Optional[str] = None) -> bool:
        return self.update_status(request_id, RequestStatus.REJECTED, notes)

    def complete(self, request_id: str, notes: Optional[str] = None) -> bool:
        return self.update_status(request_id, RequestStatus.COMPLETED, notes)

    def _approve_and_receive(self, request: ReplenishmentRequest, notes: Optional[str]) -> None:
        """Durum güncellemesi ve stok artışını tek transaction'da yazar."""
        ts = utc_now_iso()
        values = {
            ":completed": RequestStatus.COMPLETED.value,
            ":pending": RequestStatus.PENDING.value,
            ":ts": ts,
        }
        expression = "SET #status = :completed, approved_at = :ts, completed_at = :ts, updated_at = :ts"
        if notes:
            expression += ", notes = :notes"
            values[":notes"] = notes

        transact_items: list[dict] = [
            {
                "Update": {
                    "TableName": self.table_name("requests"),
                    "Key": _typed({"request_id": request.request_id}),
                    "UpdateExpression": expression,
                    "ConditionExpression": "#status = :pending",
                    "ExpressionAttributeNames": {"#status": "status"},
                    "ExpressionAttributeValues": _typed(values),
                }
            }
        ]

        increments: dict[str, int] = defaultdict(int)
        for product_id, quantity in request.stock_increments():
            if quantity > 0:
                increments[product_id] += quantity
        for product_id, quantity in increments.items():
            transact_items.append(
                {
                    "Update": {
                        "TableName": self.table_name("products"),
                        "Key": _typed({"product_id": product_id}),
                        "UpdateExpression": "ADD current_stock :qty SET updated_at = :ts",
                        "ConditionExpression": "attribute_exists(product_id)",
                        "ExpressionAttributeValues": _typed({":qty": quantity, ":ts": ts}),
                    }
                }
            )

        try:
            self.dynamodb_client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            if error_code(e) != "TransactionCanceledException":
                raise
            reasons = [r.get("Code") for r in e.response.get("CancellationReasons", [])]
            if reasons and reasons[0] == "ConditionalCheckFailed":
                raise InvalidTransitionError(
                    f"Talep artık beklemede değil: {request.request_id}"
                ) from e
            raise NotFoundError(
                f"Talebin ürünü bulunamadı, onay geri alındı: {request.request_id}"
            ) from e

        logger.info(
            "Talep onaylandı ve teslim alındı: %s (stok artışları: %s)",
            request.request_id, dict(increments),
        )

    def _stamp_transition(
        self,
        request: ReplenishmentRequest,
        target: RequestStatus,
        notes: Optional[str],
    ) -> None:
        ts = utc_now_iso()
        fields: dict[str, Any] = {"status": target.value, "updated_at": ts}
        if target == RequestStatus.COMPLETED:
            fields["completed_at"] = ts
        if notes:
            fields["notes"] = notes

        allowed = [s.value for s in ALLOWED_TRANSITIONS[target]]
        try:
            self.update_fields(
                self.requests_table,
                {"request_id": request.request_id},
                fields,
                condition=Attr("status").is_in(allowed),
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise InvalidTransitionError(
                    f"Talep durumu eşzamanlı olarak değişti: {request.request_id}"
                ) from e
            raise
        logger.info("Talep durumu: %s -> %s", request.request_id, target.value)

    # --- Silme ---

    def delete_request(self, request_id: str) -> bool:
        """Talebi durumundan bağımsız olarak siler; stok etkisi geri alınmaz."""

        def _delete() -> bool:
            self.requests_table.delete_item(Key={"request_id": request_id})
            logger.info("İkmal talebi silindi: %s", request_id)
            self._reload()
            return True

        return self._run("İkmal talebi silme", _delete, default=False)

    # --- Yardımcılar ---

    def _run(self, operation: str, func: Callable[[], T], default: T) -> T:
        """İşlemi çalıştırır; hatayı `last_error`a yazar ve varsayılanı döndürür."""
        self.loading = True
        self.last_error = None
        try:
            return func()
        except (InventoryError, ClientError, BotoCoreError, ValueError) as e:
            self.last_error = str(e) or type(e).__name__
            logger.error("%s hatası: %s", operation, e)
            return default
        finally:
            self.loading = False

    def _admin_phone(self) -> str:
        if not self.notifier.enabled:
            return ""
        return self.suppliers.get_admin_phone()

    def _attach_references(self, requests: list[ReplenishmentRequest]) -> None:
        """Taleplere ürün ve tedarikçi kayıtlarını gömer."""
        products: dict[str, Optional[Product]] = {
            p.product_id: p for p in self.context.get_cached("products") or []
        }
        suppliers: dict[str, Optional[Supplier]] = {
            s.supplier_id: s for s in self.context.get_cached("suppliers") or []
        }

        for request in requests:
            if request.product_id:
                if request.product_id not in products:
                    item = self.get_item(self.products_table, {"product_id": request.product_id})
                    products[request.product_id] = Product.from_item(item) if item else None
                request.product = products[request.product_id]
            if request.supplier_id:
                if request.supplier_id not in suppliers:
                    item = self.get_item(self.suppliers_table, {"supplier_id": request.supplier_id})
                    suppliers[request.supplier_id] = Supplier.from_item(item) if item else None
                request.supplier = suppliers[request.supplier_id]

