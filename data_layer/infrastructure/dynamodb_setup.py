"""DynamoDB tablo oluşturma ve örnek veri yükleme.

6 tablo: Profiles, Suppliers, Products, Sales, ReplenishmentRequests, DayClosings
"""
import json
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from src.models.inventory import to_dynamo

logger = logging.getLogger(__name__)

REGION = "us-west-2"
BOTO_CONFIG = Config(retries={"max_attempts": 3})


def _profile_index(name: str = "ProfileIndex", hash_key: str = "profile_id", range_key: str = "created_at") -> dict:
    return {
        "IndexName": name,
        "KeySchema": [
            {"AttributeName": hash_key, "KeyType": "HASH"},
            {"AttributeName": range_key, "KeyType": "RANGE"},
        ],
        "Projection": {"ProjectionType": "ALL"},
    }


def _attrs(*names: str) -> list:
    return [{"AttributeName": n, "AttributeType": "S"} for n in names]


TABLE_DEFINITIONS = [
    {
        "TableName": "Profiles",
        "KeySchema": [{"AttributeName": "profile_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("profile_id", "user_id", "created_at"),
        "GlobalSecondaryIndexes": [_profile_index("UserIndex", "user_id")],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "Suppliers",
        "KeySchema": [{"AttributeName": "supplier_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("supplier_id", "profile_id", "created_at"),
        "GlobalSecondaryIndexes": [_profile_index()],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "Products",
        "KeySchema": [{"AttributeName": "product_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("product_id", "profile_id", "created_at"),
        "GlobalSecondaryIndexes": [_profile_index()],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "Sales",
        "KeySchema": [{"AttributeName": "sale_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("sale_id", "profile_id", "created_at"),
        "GlobalSecondaryIndexes": [_profile_index()],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "ReplenishmentRequests",
        "KeySchema": [{"AttributeName": "request_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("request_id", "profile_id", "requested_by", "requested_at"),
        "GlobalSecondaryIndexes": [
            _profile_index("ProfileRequestedIndex", "profile_id", "requested_at"),
            _profile_index("RequesterIndex", "requested_by", "requested_at"),
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "DayClosings",
        "KeySchema": [{"AttributeName": "closing_id", "KeyType": "HASH"}],
        "AttributeDefinitions": _attrs("closing_id", "closed_by", "date"),
        "GlobalSecondaryIndexes": [_profile_index("ClosedByDateIndex", "closed_by", "date")],
        "BillingMode": "PAY_PER_REQUEST",
    },
]


def _client(region: str, endpoint_url: Optional[str] = None) -> Any:
    return boto3.client("dynamodb", region_name=region, endpoint_url=endpoint_url, config=BOTO_CONFIG)


def create_tables(
    region: str = REGION,
    prefix: str = "",
    client: Optional[Any] = None,
    endpoint_url: Optional[str] = None,
) -> list:
    """Eksik DynamoDB tablolarını oluşturur, oluşturulan tablo adlarını döndürür."""
    dynamodb = client or _client(region, endpoint_url)
    created = []

    for table_def in TABLE_DEFINITIONS:
        table_name = f"{prefix}{table_def['TableName']}"
        try:
            dynamodb.describe_table(TableName=table_name)
            logger.info("%s zaten mevcut, atlanıyor", table_name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            logger.info("%s oluşturuluyor...", table_name)
            dynamodb.create_table(**{**table_def, "TableName": table_name})
            # Tablonun aktif olmasını bekle
            waiter = dynamodb.get_waiter("table_exists")
            waiter.wait(TableName=table_name)
            created.append(table_name)
            logger.info("%s oluşturuldu", table_name)

    return created


def delete_tables(
    region: str = REGION,
    prefix: str = "",
    client: Optional[Any] = None,
    endpoint_url: Optional[str] = None,
) -> None:
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = client or _client(region, endpoint_url)
    for table_def in TABLE_DEFINITIONS:
        table_name = f"{prefix}{table_def['TableName']}"
        try:
            dynamodb.delete_table(TableName=table_name)
            logger.info("%s silindi", table_name)
        except ClientError:
            logger.info("%s bulunamadı, atlanıyor", table_name)


def load_seed_file(
    path: str,
    region: str = REGION,
    prefix: str = "",
    resource: Optional[Any] = None,
    endpoint_url: Optional[str] = None,
) -> dict:
    """`{"Products": [...], "Suppliers": [...]}` biçimindeki JSON'u tablolara yükler."""
    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)

    dynamodb = resource or boto3.resource(
        "dynamodb", region_name=region, endpoint_url=endpoint_url, config=BOTO_CONFIG
    )
    known = {t["TableName"] for t in TABLE_DEFINITIONS}
    counts = {}
    for table_name, rows in seed.items():
        if table_name not in known:
            raise ValueError(f"Bilinmeyen tablo: {table_name}")
        table = dynamodb.Table(f"{prefix}{table_name}")
        with table.batch_writer() as batch:
            for row in rows:
                batch.put_item(Item=to_dynamo(row))
        counts[table_name] = len(rows)
        logger.info("%s: %d kayıt yüklendi", table_name, len(rows))
    return counts
