"""Ayar yükleme testleri."""

import pytest

from src.config import Settings, load_settings


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings()
        assert settings.region_name == "us-west-2"
        assert settings.webhook_url is None
        assert settings.legacy_requester_fallback is False

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "inventory.yaml"
        path.write_text("table_prefix: test_\nwebhook_timeout: 3\nfeature_x: true\n", encoding="utf-8")
        settings = load_settings(str(path))
        assert settings.table_name("Products") == "test_Products"
        assert settings.webhook_timeout == 3.0
        assert settings.extra == {"feature_x": True}

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "inventory.yaml"
        path.write_text("webhook_url: https://file.example.com\n", encoding="utf-8")
        monkeypatch.setenv("N8N_WEBHOOK_URL", "https://env.example.com")
        monkeypatch.setenv("INVENTORY_LEGACY_REQUESTER_FALLBACK", "true")
        settings = load_settings(str(path))
        assert settings.webhook_url == "https://env.example.com"
        assert settings.legacy_requester_fallback is True

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "inventory.yaml"
        path.write_text("- sadece\n- liste\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(str(path))

    def test_table_name_without_prefix(self):
        assert Settings().table_name("Sales") == "Sales"
