"""Webhook bildirici testleri."""

import json
from unittest.mock import MagicMock

import urllib3

from src.models.inventory import Product, Profile, ReplenishmentRequest, Supplier
from src.services.notifier import WebhookNotifier


def _create_request():
    return ReplenishmentRequest(
        request_id="r1",
        product_id="p1",
        supplier_id="s1",
        quantity=10,
        product=Product(product_id="p1", name="Un", category="Gıda"),
        supplier=Supplier(supplier_id="s1", name="Anadolu", contact="Mehmet", phone="+90 555"),
    )


def _create_notifier(status=200):
    http = MagicMock()
    http.request.return_value = MagicMock(status=status)
    return WebhookNotifier("https://hooks.example.com/x", timeout=2.5, http=http), http


class TestWebhookNotifier:

    def test_disabled_without_url(self):
        http = MagicMock()
        notifier = WebhookNotifier(None, http=http)
        assert notifier.enabled is False
        assert notifier.notify_single(_create_request(), None, "") is False
        http.request.assert_not_called()

    def test_single_payload(self):
        notifier, http = _create_notifier()
        profile = Profile(profile_id="pr1", user_id="u1", name="Merkez", address="Kadıköy")
        assert notifier.notify_single(_create_request(), profile, "+90 500") is True

        kwargs = http.request.call_args.kwargs
        payload = json.loads(kwargs["body"])
        assert kwargs["timeout"] == 2.5
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert payload["type"] == "single"
        assert payload["profile"]["id"] == "pr1"
        assert payload["adminPhone"] == "+90 500"
        assert payload["productName"] == "Un"
        assert payload["supplierPhone"] == "+90 555"
        assert payload["request"]["status"] == "pending"

    def test_multi_payload(self):
        notifier, http = _create_notifier()
        notifier.notify_multi([_create_request(), _create_request()], None, "")
        payload = json.loads(http.request.call_args.kwargs["body"])
        assert payload["type"] == "multi"
        assert payload["profile"] is None
        assert len(payload["requests"]) == 2

    def test_http_error_status(self):
        notifier, _ = _create_notifier(status=500)
        assert notifier.notify_single(_create_request(), None, "") is False

    def test_connection_error_swallowed(self):
        notifier, http = _create_notifier()
        http.request.side_effect = urllib3.exceptions.HTTPError("bağlantı yok")
        assert notifier.notify_multi([_create_request()], None, "") is False
