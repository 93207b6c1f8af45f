# tests/test_config.py
"""
Tests for environment-based settings and admin key helpers.
"""


from shardflags.config import Settings
from shardflags.services.auth_service import hash_api_key, is_valid_admin_key


def test_settings_defaults(monkeypatch):
    for name in (
        "BACKEND_PORT",
        "DEBUG",
        "LOG_LEVEL",
        "LOG_JSON",
        "ADMIN_API_KEY",
        "FLAGS_CONFIG_PATH",
        "BANDITS_CONFIG_PATH",
        "BANDIT_TOTAL_SHARDS",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.port == 8000
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.admin_api_key is None
    assert settings.flags_config_path is None
    assert settings.bandit_total_shards == 10_000
    assert "http://localhost:3000" in settings.cors_origins


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BACKEND_PORT", "9100")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON", "1")
    monkeypatch.setenv("ADMIN_API_KEY", "k")
    monkeypatch.setenv("FLAGS_CONFIG_PATH", "/etc/shardflags/flags.json")
    monkeypatch.setenv("BANDIT_TOTAL_SHARDS", "100")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test ,")

    settings = Settings.from_env()

    assert settings.port == 9100
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.log_json is True
    assert settings.admin_api_key == "k"
    assert settings.flags_config_path == "/etc/shardflags/flags.json"
    assert settings.bandit_total_shards == 100
    assert settings.cors_origins == ["https://a.test", "https://b.test"]


def test_hash_api_key_is_stable():
    assert hash_api_key("abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_is_valid_admin_key():
    assert is_valid_admin_key("abc", "abc") is True
    assert is_valid_admin_key("abd", "abc") is False
    assert is_valid_admin_key("", "abc") is False
