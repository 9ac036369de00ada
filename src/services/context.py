"""Oturum bağlamı - aktif kullanıcı, aktif profil ve koleksiyon önbellekleri.

Servisler global durum yerine bu nesneyi paylaşır. Önbellek sözleşmesi:
her mutasyon ilgili koleksiyonu geçersiz kılar, okuma `refresh=True`
verilmedikçe geçerli önbelleği kullanabilir.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.models.inventory import AuthUser, Profile

logger = logging.getLogger(__name__)

COLLECTIONS = ("profiles", "suppliers", "products", "sales", "replenishment_requests")


class SessionContext:
    """Servisler arasında paylaşılan açık durum nesnesi."""

    def __init__(self, user: Optional[AuthUser] = None, profile: Optional[Profile] = None):
        self.user = user
        self.profile = profile
        self._collections: dict[str, list[Any]] = {}

    @property
    def user_id(self) -> Optional[str]:
        return self.user.user_id if self.user else None

    @property
    def profile_id(self) -> Optional[str]:
        return self.profile.profile_id if self.profile else None

    def set_profile(self, profile: Optional[Profile]) -> None:
        """Aktif profili değiştirir; profile bağlı tüm önbellekler düşer."""
        self.profile = profile
        for name in COLLECTIONS:
            if name != "profiles":
                self._collections.pop(name, None)
        logger.info("Aktif profil: %s", profile.profile_id if profile else None)

    def get_cached(self, name: str) -> Optional[list[Any]]:
        cached = self._collections.get(name)
        return list(cached) if cached is not None else None

    def store(self, name: str, items: list[Any]) -> None:
        self._collections[name] = list(items)

    def invalidate(self, name: str) -> None:
        self._collections.pop(name, None)

    def invalidate_all(self) -> None:
        self._collections.clear()
