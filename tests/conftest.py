"""Ortak test fixture'ları - moto ile sahte DynamoDB."""

from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from data_layer.infrastructure.dynamodb_setup import create_tables
from src.app import build_app
from src.config import Settings

REGION = "us-west-2"

_INVENTORY_ENV = (
    "DYNAMODB_ENDPOINT_URL",
    "INVENTORY_TABLE_PREFIX",
    "N8N_WEBHOOK_URL",
    "WEBHOOK_TIMEOUT_SECONDS",
    "INVENTORY_LEGACY_REQUESTER_FALLBACK",
    "INVENTORY_USER_ID",
    "INVENTORY_USER_EMAIL",
    "INVENTORY_USERNAME",
    "INVENTORY_USER_PHONE",
    "INVENTORY_PROFILE_ID",
)


@pytest.fixture(autouse=True)
def aws_env(monkeypatch, tmp_path):
    """Gerçek AWS hesabına asla gidilmemesi için sahte kimlik bilgileri."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("INVENTORY_CONFIG", str(tmp_path / "yok.yaml"))
    for name in _INVENTORY_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def aws():
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name=REGION)
        client = boto3.client("dynamodb", region_name=REGION)
        create_tables(region=REGION, client=client)
        yield resource, client


@pytest.fixture
def http():
    pool = MagicMock()
    pool.request.return_value = MagicMock(status=200)
    return pool


@pytest.fixture
def make_app(aws, http):
    """Kullanıcısı ve aktif profili hazır bir uygulama kurar."""
    resource, client = aws

    def _make(**overrides):
        values = {
            "region_name": REGION,
            "user_id": "user-1",
            "user_email": "owner@example.com",
            "username": "Ayşe",
            "user_phone": "+90 555 000 0000",
        }
        values.update(overrides)
        app = build_app(
            settings=Settings(**values),
            dynamodb_resource=resource,
            dynamodb_client=client,
            http=http,
        )
        profile = app.profiles.create_profile("Merkez Şube", "Kadıköy, İstanbul")
        app.profiles.select_profile(profile.profile_id)
        app.bootstrap()
        return app

    return _make


@pytest.fixture
def inventory(make_app):
    return make_app()


@pytest.fixture
def supplier(inventory):
    return inventory.suppliers.add_supplier(
        name="Anadolu Gıda",
        contact="Mehmet Kaya",
        phone="+90 555 111 2233",
        email="siparis@anadolugida.example",
    )


@pytest.fixture
def product(inventory, supplier):
    return inventory.products.add_product(
        name="Zeytinyağı 1L",
        category="Gıda",
        current_stock=5,
        min_stock=10,
        max_stock=50,
        unit_price=12.5,
        supplier_id=supplier.supplier_id,
    )
