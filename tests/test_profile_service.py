"""Profil servisi testleri."""

import pytest

from src.models.inventory import AuthUser
from src.services.base_service import NotAuthenticatedError, NotFoundError


class TestProfiles:

    def test_create_and_list(self, inventory):
        inventory.profiles.create_profile("İkinci Şube")
        names = {p.name for p in inventory.profiles.list_profiles()}
        assert names == {"Merkez Şube", "İkinci Şube"}

    def test_select_other_users_profile(self, inventory):
        profile_id = inventory.context.profile_id
        inventory.context.user = AuthUser("user-2")
        with pytest.raises(NotFoundError):
            inventory.profiles.select_profile(profile_id)

    def test_select_clears_profile_caches(self, inventory, product):
        assert inventory.context.get_cached("products") is not None
        other = inventory.profiles.create_profile("İkinci Şube")
        inventory.profiles.select_profile(other.profile_id)
        assert inventory.context.get_cached("products") is None
        assert inventory.products.list_products() == []

    def test_delete_active_profile(self, inventory):
        inventory.profiles.delete_profile(inventory.context.profile_id)
        assert inventory.context.profile is None
        assert inventory.profiles.list_profiles() == []

    def test_requires_user(self, inventory):
        inventory.context.user = None
        assert inventory.profiles.list_profiles() == []
        with pytest.raises(NotAuthenticatedError):
            inventory.profiles.create_profile("X")
