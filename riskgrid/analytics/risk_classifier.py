"""
Risk classifier: map a scored record's riskLevel / fraudScore to a row category.

Tiers are checked HIGH -> MEDIUM -> LOW; within each tier the numeric score can
raise the category, so riskLevel LOW with fraudScore 0.5 is MEDIUM. LOW needs
both riskLevel LOW and a fraud score of exactly 0. Everything else is NONE
(no row fill).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

RISK_LEVEL_KEY = "riskLevel"
FRAUD_SCORE_KEY = "fraudScore"

HIGH_SCORE_ABOVE = 0.7
MEDIUM_SCORE_ABOVE = 0.3


class RiskCategory(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NONE = "NONE"


# Row fill per category (light red / light orange / light green); NONE leaves the row unchanged
FILL_COLORS: dict[RiskCategory, str] = {
    RiskCategory.HIGH: "#FFC7CE",
    RiskCategory.MEDIUM: "#FFE5B4",
    RiskCategory.LOW: "#C6EFCE",
}


def _fraud_score(value: Any) -> float | None:
    """Numeric fraud score, or None when absent or not a number (bools are not scores)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def classify(scored_record: Mapping[str, Any]) -> RiskCategory:
    """Return the risk category for one scored record."""
    level = scored_record.get(RISK_LEVEL_KEY)
    score = _fraud_score(scored_record.get(FRAUD_SCORE_KEY))

    if level == RiskCategory.HIGH.value or (score is not None and score > HIGH_SCORE_ABOVE):
        return RiskCategory.HIGH
    if level == RiskCategory.MEDIUM.value or (score is not None and score > MEDIUM_SCORE_ABOVE):
        return RiskCategory.MEDIUM
    if level == RiskCategory.LOW.value and score == 0:
        return RiskCategory.LOW
    return RiskCategory.NONE


def has_risk_level(scored_records: Iterable[Mapping[str, Any]]) -> bool:
    """
    True when riskLevel is part of the scored-record key set.

    Records share one key set, so the first record decides; when the key is
    absent no per-row formatting is applied for the whole dataset.
    """
    for record in scored_records:
        return RISK_LEVEL_KEY in record
    return False


def fill_color(category: RiskCategory) -> str | None:
    return FILL_COLORS.get(category)
