"""Tüm veri erişim servisleri için temel sınıf - DynamoDB entegrasyonu."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from src.config import Settings
from src.services.context import SessionContext

logger = logging.getLogger(__name__)

TABLES = {
    "profiles": "Profiles",
    "suppliers": "Suppliers",
    "products": "Products",
    "sales": "Sales",
    "requests": "ReplenishmentRequests",
    "closings": "DayClosings",
}


class InventoryError(Exception):
    """Envanter işlemlerinin temel hatası."""
    pass


class ValidationError(InventoryError):
    """Yerel validasyon hatası."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class NotAuthenticatedError(InventoryError):
    """Kullanıcı veya aktif profil yok."""
    pass


class NotFoundError(InventoryError):
    """Kayıt bulunamadı."""
    pass


class InvalidTransitionError(InventoryError):
    """İzin verilmeyen durum geçişi."""
    pass


class StockUpdateError(InventoryError):
    """Stok güncellemesi tamamlanamadı."""
    pass


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def new_id() -> str:
    return str(uuid.uuid4())


class BaseService:
    """DynamoDB tabanlı servis temel sınıfı."""

    service_name = "BaseService"

    def __init__(
        self,
        context: SessionContext,
        settings: Optional[Settings] = None,
        dynamodb_resource: Optional[Any] = None,
        dynamodb_client: Optional[Any] = None,
    ):
        self.context = context
        self.settings = settings or Settings()

        # AWS istemcileri - dependency injection destekli
        endpoint = self.settings.endpoint_url
        self.dynamodb = dynamodb_resource or boto3.resource(
            "dynamodb", region_name=self.settings.region_name, endpoint_url=endpoint
        )
        self.dynamodb_client = dynamodb_client or boto3.client(
            "dynamodb", region_name=self.settings.region_name, endpoint_url=endpoint
        )

        # Tablo referansları
        self.profiles_table = self.dynamodb.Table(self.table_name("profiles"))
        self.suppliers_table = self.dynamodb.Table(self.table_name("suppliers"))
        self.products_table = self.dynamodb.Table(self.table_name("products"))
        self.sales_table = self.dynamodb.Table(self.table_name("sales"))
        self.requests_table = self.dynamodb.Table(self.table_name("requests"))
        self.closings_table = self.dynamodb.Table(self.table_name("closings"))

        logger.debug("Servis başlatıldı: %s", self.service_name)

    def table_name(self, key: str) -> str:
        return self.settings.table_name(TABLES[key])

    # --- Kimlik yardımcıları ---

    def require_user(self) -> str:
        if not self.context.user_id:
            raise NotAuthenticatedError("Kullanıcı oturumu yok")
        return self.context.user_id

    def require_scope(self) -> tuple[str, str]:
        """(user_id, profile_id) döndürür; biri eksikse hata verir."""
        user_id = self.require_user()
        if not self.context.profile_id:
            raise NotAuthenticatedError("Aktif profil seçilmedi")
        return user_id, self.context.profile_id

    # --- Sorgu yardımcıları ---

    def query_all(self, table: Any, **kwargs: Any) -> list[dict]:
        """Sayfalamayı takip ederek tüm sonuçları döndürür."""
        items: list[dict] = []
        while True:
            resp = table.query(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def query_profile_scoped(self, table: Any, newest_first: bool = True) -> list[dict]:
        """ProfileIndex üzerinden aktif profil + sahip kullanıcı filtresiyle sorgular."""
        user_id, profile_id = self.require_scope()
        return self.query_all(
            table,
            IndexName="ProfileIndex",
            KeyConditionExpression=Key("profile_id").eq(profile_id),
            FilterExpression=Attr("user_id").eq(user_id),
            ScanIndexForward=not newest_first,
        )

    def owner_condition(self, key_name: str) -> Any:
        """Kaydın var olduğunu ve oturumdaki kullanıcıya ait olduğunu şart koşar."""
        user_id = self.require_user()
        return Attr(key_name).exists() & Attr("user_id").eq(user_id)

    def get_item(self, table: Any, key: dict) -> Optional[dict]:
        resp = table.get_item(Key=key)
        return resp.get("Item")

    def update_fields(
        self,
        table: Any,
        key: dict,
        fields: dict,
        condition: Optional[Any] = None,
    ) -> None:
        """Kısmi alan güncellemesi; None değerler alanı siler."""
        if not fields:
            return
        set_parts = []
        remove_parts = []
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        for i, (field_name, value) in enumerate(fields.items()):
            names[f"#f{i}"] = field_name
            if value is None:
                remove_parts.append(f"#f{i}")
            else:
                set_parts.append(f"#f{i} = :fv{i}")
                values[f":fv{i}"] = value

        expression = ""
        if set_parts:
            expression += "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += (" " if expression else "") + "REMOVE " + ", ".join(remove_parts)

        kwargs: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": expression,
            "ExpressionAttributeNames": names,
        }
        if values:
            kwargs["ExpressionAttributeValues"] = values
        if condition is not None:
            kwargs["ConditionExpression"] = condition
        table.update_item(**kwargs)

    def delete_owned(self, table: Any, key: dict) -> None:
        """Oturumdaki kullanıcıya ait kaydı siler."""
        key_name = next(iter(key))
        try:
            table.delete_item(Key=key, ConditionExpression=self.owner_condition(key_name))
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(f"Kayıt bulunamadı: {key[key_name]}") from e
            raise
