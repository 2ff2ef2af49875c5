"""
Risk analytics for scored records.

Modules: risk_classifier.
"""

from riskgrid.analytics.risk_classifier import (
    FILL_COLORS,
    RiskCategory,
    classify,
    fill_color,
    has_risk_level,
)

__all__ = [
    "FILL_COLORS",
    "RiskCategory",
    "classify",
    "fill_color",
    "has_risk_level",
]
