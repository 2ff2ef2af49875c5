"""
Environment variable loading for RiskGrid.

- RISKGRID_API_KEY: scoring API credential (CLI default)
- RISKGRID_ENVIRONMENT: production | dev | custom (default: production)
- RISKGRID_CUSTOM_ENVIRONMENT: subdomain token used when environment is custom
- RISKGRID_PROXY_URL: optional CORS proxy endpoint
- RISKGRID_PIPELINE_ID: scoring pipeline id appended to every scoring host
- RISKGRID_SCORING_TIMEOUT_SEC: request deadline (default: 120)
- RISKGRID_SETTINGS_PATH: JSON file backing the settings store
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from riskgrid.config.settings import ScoringSettings

# Project root: config is riskgrid/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_PIPELINE_ID = "18546128-a4a6-411b-8b5c-23b64beaee01"
DEFAULT_SCORING_TIMEOUT_SEC = 120.0
DEFAULT_SETTINGS_PATH = Path.home() / ".riskgrid" / "settings.json"


def load_riskgrid_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH)


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def get_pipeline_id() -> str:
    load_riskgrid_env()
    return _env("RISKGRID_PIPELINE_ID", DEFAULT_PIPELINE_ID)


def get_scoring_timeout_sec() -> float:
    """
    Return RISKGRID_SCORING_TIMEOUT_SEC, or 120 when unset or not a positive number.
    """
    load_riskgrid_env()
    raw = _env("RISKGRID_SCORING_TIMEOUT_SEC")
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_SCORING_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_SCORING_TIMEOUT_SEC


def get_settings_path() -> Path:
    load_riskgrid_env()
    raw = _env("RISKGRID_SETTINGS_PATH")
    return Path(raw).expanduser() if raw else DEFAULT_SETTINGS_PATH


def settings_from_env() -> ScoringSettings:
    """Build scoring settings from RISKGRID_* variables (used by the CLI and as store defaults)."""
    load_riskgrid_env()
    return ScoringSettings(
        api_key=_env("RISKGRID_API_KEY"),
        environment=_env("RISKGRID_ENVIRONMENT", "production").lower() or "production",
        custom_environment=_env("RISKGRID_CUSTOM_ENVIRONMENT"),
        proxy_url=_env("RISKGRID_PROXY_URL"),
    )


def get_api_host() -> str:
    load_riskgrid_env()
    return _env("API_HOST", "0.0.0.0")


def get_api_port() -> int:
    load_riskgrid_env()
    raw = _env("API_PORT", "8000")
    return int(raw) if raw.isdigit() else 8000
