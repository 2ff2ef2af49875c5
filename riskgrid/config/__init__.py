"""
Configuration for RiskGrid.

Environment variables (.env aware) and the persisted scoring settings store.
"""

from riskgrid.config.settings import ScoringSettings, SettingsStore, StaticSettingsStore  # noqa: F401

__all__ = ["ScoringSettings", "SettingsStore", "StaticSettingsStore"]
