"""Oturum bağlamı testleri."""

from src.models.inventory import AuthUser, Profile
from src.services.context import SessionContext


class TestSessionContext:

    def test_ids(self):
        context = SessionContext(user=AuthUser("u1"), profile=Profile("p1", "u1", "Merkez"))
        assert context.user_id == "u1"
        assert context.profile_id == "p1"
        assert SessionContext().user_id is None

    def test_cache_returns_copy(self):
        context = SessionContext()
        context.store("products", [1, 2])
        cached = context.get_cached("products")
        cached.append(3)
        assert context.get_cached("products") == [1, 2]

    def test_set_profile_keeps_profiles_cache(self):
        context = SessionContext()
        context.store("profiles", ["a"])
        context.store("products", ["b"])
        context.store("replenishment_requests", ["c"])
        context.set_profile(Profile("p2", "u1", "İkinci"))
        assert context.get_cached("profiles") == ["a"]
        assert context.get_cached("products") is None
        assert context.get_cached("replenishment_requests") is None

    def test_invalidate(self):
        context = SessionContext()
        context.store("sales", ["s"])
        context.invalidate("sales")
        assert context.get_cached("sales") is None
        context.store("sales", ["s"])
        context.invalidate_all()
        assert context.get_cached("sales") is None
