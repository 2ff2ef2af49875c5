"""
Persisted scoring settings.

Four string settings (credential, environment selector, custom-environment
token, proxy URL) stored under fixed keys in a small JSON key-value file.
The store is an explicit object injected into the task pane controller;
nothing reads settings from module globals.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from riskgrid.riskgrid_logging import get_logger

logger = get_logger(__name__)

KEY_API_KEY = "fraudApiKey"
KEY_ENVIRONMENT = "fraudEnvironment"
KEY_CUSTOM_ENVIRONMENT = "fraudCustomEnv"
KEY_PROXY_URL = "fraudProxyUrl"

SETTINGS_KEYS = (KEY_API_KEY, KEY_ENVIRONMENT, KEY_CUSTOM_ENVIRONMENT, KEY_PROXY_URL)

ENV_PRODUCTION = "production"
ENV_DEV = "dev"
ENV_CUSTOM = "custom"


@dataclass
class ScoringSettings:
    """Credential and target selection for one scoring call."""

    api_key: str = ""
    environment: str = ENV_PRODUCTION
    """production | dev | custom; any other value is used as a custom token directly."""
    custom_environment: str = ""
    """Subdomain token used when environment is custom."""
    proxy_url: str = ""

    def to_store(self) -> dict[str, str]:
        return {
            KEY_API_KEY: self.api_key,
            KEY_ENVIRONMENT: self.environment,
            KEY_CUSTOM_ENVIRONMENT: self.custom_environment,
            KEY_PROXY_URL: self.proxy_url,
        }

    @classmethod
    def from_store(cls, values: dict[str, Any]) -> "ScoringSettings":
        def _get(key: str, default: str = "") -> str:
            value = values.get(key)
            return str(value).strip() if value is not None else default

        return cls(
            api_key=_get(KEY_API_KEY),
            environment=_get(KEY_ENVIRONMENT, ENV_PRODUCTION) or ENV_PRODUCTION,
            custom_environment=_get(KEY_CUSTOM_ENVIRONMENT),
            proxy_url=_get(KEY_PROXY_URL),
        )


class SettingsStore:
    """
    Durable key-value store for ScoringSettings backed by a JSON file.

    Unknown keys already present in the file are preserved on save; clear()
    removes the four settings keys in one write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("settings_store_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def load(self) -> ScoringSettings:
        settings = ScoringSettings.from_store(self._read())
        logger.debug(
            "settings_loaded",
            path=str(self.path),
            environment=settings.environment,
            has_api_key=bool(settings.api_key),
            has_proxy=bool(settings.proxy_url),
        )
        return settings

    def save(self, settings: ScoringSettings) -> None:
        data = self._read()
        data.update(settings.to_store())
        self._write(data)
        logger.info("settings_saved", path=str(self.path), environment=settings.environment)

    def clear(self) -> None:
        data = self._read()
        for key in SETTINGS_KEYS:
            data.pop(key, None)
        self._write(data)
        logger.info("settings_cleared", path=str(self.path))


class StaticSettingsStore:
    """Non-durable store holding one ScoringSettings (CLI runs and tests)."""

    def __init__(self, settings: ScoringSettings | None = None) -> None:
        self._settings = settings or ScoringSettings()

    def load(self) -> ScoringSettings:
        return self._settings

    def save(self, settings: ScoringSettings) -> None:
        self._settings = settings

    def clear(self) -> None:
        self._settings = ScoringSettings()
