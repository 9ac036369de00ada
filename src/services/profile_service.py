"""Profil (lokal/şube) servisi."""

from __future__ import annotations

import logging
from typing import Optional

from boto3.dynamodb.conditions import Key

from src.models.inventory import Profile
from src.services.base_service import BaseService, NotFoundError, new_id

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    """Kullanıcıya ait profilleri yönetir."""

    service_name = "ProfileService"

    def list_profiles(self, refresh: bool = False) -> list[Profile]:
        """Kullanıcının profillerini en yeniden eskiye döndürür."""
        if not self.context.user_id:
            return []
        if not refresh:
            cached = self.context.get_cached("profiles")
            if cached is not None:
                return cached

        items = self.query_all(
            self.profiles_table,
            IndexName="UserIndex",
            KeyConditionExpression=Key("user_id").eq(self.context.user_id),
            ScanIndexForward=False,
        )
        profiles = [Profile.from_item(i) for i in items]
        self.context.store("profiles", profiles)
        return profiles

    def create_profile(self, name: str, address: Optional[str] = None) -> Profile:
        user_id = self.require_user()
        profile = Profile(
            profile_id=new_id(),
            user_id=user_id,
            name=name,
            address=address or None,
        )
        self.profiles_table.put_item(Item=profile.to_item())
        logger.info("Profil oluşturuldu: %s (%s)", profile.name, profile.profile_id)
        self.context.invalidate("profiles")
        self.list_profiles(refresh=True)
        return profile

    def delete_profile(self, profile_id: str) -> None:
        self.delete_owned(self.profiles_table, {"profile_id": profile_id})
        logger.info("Profil silindi: %s", profile_id)
        if self.context.profile_id == profile_id:
            self.context.set_profile(None)
        self.context.invalidate("profiles")
        self.list_profiles(refresh=True)

    def select_profile(self, profile_id: str) -> Profile:
        """Aktif profili seçer; profil kullanıcıya ait olmalıdır."""
        user_id = self.require_user()
        item = self.get_item(self.profiles_table, {"profile_id": profile_id})
        if not item or item.get("user_id") != user_id:
            raise NotFoundError(f"Profil bulunamadı: {profile_id}")
        profile = Profile.from_item(item)
        self.context.set_profile(profile)
        return profile
