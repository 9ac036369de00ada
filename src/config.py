"""Uygulama ayarları - ortam değişkenleri ve opsiyonel YAML dosyası."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "inventory.yaml"

# YAML anahtarı -> ortam değişkeni
_ENV_KEYS = {
    "region_name": "AWS_DEFAULT_REGION",
    "endpoint_url": "DYNAMODB_ENDPOINT_URL",
    "table_prefix": "INVENTORY_TABLE_PREFIX",
    "webhook_url": "N8N_WEBHOOK_URL",
    "webhook_timeout": "WEBHOOK_TIMEOUT_SECONDS",
    "legacy_requester_fallback": "INVENTORY_LEGACY_REQUESTER_FALLBACK",
    "user_id": "INVENTORY_USER_ID",
    "user_email": "INVENTORY_USER_EMAIL",
    "username": "INVENTORY_USERNAME",
    "user_phone": "INVENTORY_USER_PHONE",
    "profile_id": "INVENTORY_PROFILE_ID",
}


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    region_name: str = "us-west-2"
    endpoint_url: Optional[str] = None
    table_prefix: str = ""
    webhook_url: Optional[str] = None
    webhook_timeout: float = 10.0
    legacy_requester_fallback: bool = False
    user_id: Optional[str] = None
    user_email: str = ""
    username: str = ""
    user_phone: str = ""
    profile_id: Optional[str] = None
    extra: dict = field(default_factory=dict)

    def table_name(self, name: str) -> str:
        """Ön ek uygulanmış tablo adını döndürür."""
        return f"{self.table_prefix}{name}"


def load_settings(config_path: Optional[str] = None) -> Settings:
    """YAML dosyası (varsa) + ortam değişkenlerinden ayarları oluşturur.

    Ortam değişkenleri dosyadaki değerleri ezer.
    """
    values: dict = {}

    path = Path(config_path or os.environ.get("INVENTORY_CONFIG", DEFAULT_CONFIG_FILE))
    if path.exists():
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Geçersiz ayar dosyası: {path}")
        values.update(loaded)
        logger.info("Ayar dosyası yüklendi: %s", path)

    for key, env_name in _ENV_KEYS.items():
        env_value = os.environ.get(env_name)
        if env_value not in (None, ""):
            values[key] = env_value

    known = {k: v for k, v in values.items() if k in _ENV_KEYS}
    extra = {k: v for k, v in values.items() if k not in _ENV_KEYS}

    if "webhook_timeout" in known:
        known["webhook_timeout"] = float(known["webhook_timeout"])
    if "legacy_requester_fallback" in known:
        known["legacy_requester_fallback"] = _as_bool(known["legacy_requester_fallback"])

    return Settings(extra=extra, **known)
