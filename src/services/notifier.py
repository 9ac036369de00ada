"""Otomasyon webhook bildirimi (n8n).

Oluşturulan ikmal talepleri tek bir JSON POST ile bildirilir. Teslim
hataları loglanır ve yutulur; kullanıcıya yansıtılmaz, yeniden denenmez.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import urllib3

from src.models.inventory import Profile, ReplenishmentRequest

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """Talep olaylarını harici otomasyon webhook'una iletir."""

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 10.0,
        http: Optional[Any] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.http = http or urllib3.PoolManager(retries=False)

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def notify_single(
        self,
        request: ReplenishmentRequest,
        profile: Optional[Profile],
        admin_phone: str,
    ) -> bool:
        payload = {
            "type": "single",
            "request": request.to_dict(),
            "profile": _profile_dict(profile),
            "adminPhone": admin_phone,
            "productName": request.product.name if request.product else "",
            "supplierPhone": (request.supplier.phone or "") if request.supplier else "",
        }
        return self._post(payload)

    def notify_multi(
        self,
        requests: list[ReplenishmentRequest],
        profile: Optional[Profile],
        admin_phone: str,
    ) -> bool:
        entries = []
        for request in requests:
            entry = request.to_dict()
            entry["productName"] = request.product.name if request.product else ""
            entry["supplierPhone"] = (request.supplier.phone or "") if request.supplier else ""
            entries.append(entry)
        payload = {
            "type": "multi",
            "requests": entries,
            "profile": _profile_dict(profile),
            "adminPhone": admin_phone,
        }
        return self._post(payload)

    def _post(self, payload: dict) -> bool:
        if not self.enabled:
            return False
        try:
            response = self.http.request(
                "POST",
                self.url,
                body=json.dumps(payload, default=str).encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except urllib3.exceptions.HTTPError as e:
            logger.error("Webhook bildirimi başarısız: %s", e)
            return False

        if response.status >= 400:
            logger.warning("Webhook %d döndürdü (%s)", response.status, payload.get("type"))
            return False
        logger.info("Webhook bildirimi gönderildi (%s)", payload.get("type"))
        return True


def _profile_dict(profile: Optional[Profile]) -> Optional[dict]:
    if profile is None:
        return None
    return {
        "id": profile.profile_id,
        "user_id": profile.user_id,
        "name": profile.name,
        "address": profile.address,
        "created_at": profile.created_at,
    }
