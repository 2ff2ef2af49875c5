"""
Tests for the persisted settings store and environment-derived settings.
"""

from __future__ import annotations

import json

from riskgrid.config.env import get_settings_path, settings_from_env
from riskgrid.config.settings import (
    KEY_API_KEY,
    KEY_CUSTOM_ENVIRONMENT,
    KEY_ENVIRONMENT,
    KEY_PROXY_URL,
    ScoringSettings,
    SettingsStore,
    StaticSettingsStore,
)


def test_load_missing_file_gives_defaults(settings_store):
    assert settings_store.load() == ScoringSettings()
    assert settings_store.load().environment == "production"


def test_save_uses_fixed_keys(settings_store):
    settings_store.save(ScoringSettings(api_key="k", environment="dev", custom_environment="", proxy_url="https://p"))
    data = json.loads(settings_store.path.read_text(encoding="utf-8"))
    assert data == {
        KEY_API_KEY: "k",
        KEY_ENVIRONMENT: "dev",
        KEY_CUSTOM_ENVIRONMENT: "",
        KEY_PROXY_URL: "https://p",
    }
    assert SettingsStore(settings_store.path).load().proxy_url == "https://p"


def test_clear_removes_all_settings_keeps_other_keys(settings_store):
    settings_store.path.write_text(json.dumps({"theme": "dark", KEY_API_KEY: "old"}), encoding="utf-8")
    settings_store.save(ScoringSettings(api_key="k"))
    settings_store.clear()
    data = json.loads(settings_store.path.read_text(encoding="utf-8"))
    assert data == {"theme": "dark"}
    assert settings_store.load() == ScoringSettings()


def test_unreadable_file_falls_back_to_defaults(settings_store):
    settings_store.path.write_text("{broken", encoding="utf-8")
    assert settings_store.load() == ScoringSettings()
    settings_store.path.write_text("[1, 2]", encoding="utf-8")
    assert settings_store.load() == ScoringSettings()


def test_static_store():
    store = StaticSettingsStore(ScoringSettings(api_key="k"))
    assert store.load().api_key == "k"
    store.save(ScoringSettings(api_key="j"))
    assert store.load().api_key == "j"
    store.clear()
    assert store.load() == ScoringSettings()


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RISKGRID_API_KEY", " env-key ")
    monkeypatch.setenv("RISKGRID_ENVIRONMENT", "Custom")
    monkeypatch.setenv("RISKGRID_CUSTOM_ENVIRONMENT", "acme")
    monkeypatch.setenv("RISKGRID_PROXY_URL", "")
    assert settings_from_env() == ScoringSettings(
        api_key="env-key",
        environment="custom",
        custom_environment="acme",
        proxy_url="",
    )
    monkeypatch.setenv("RISKGRID_SETTINGS_PATH", str(tmp_path / "s.json"))
    assert get_settings_path() == tmp_path / "s.json"
