"""
Scoring pipeline: endpoint resolution, HTTP client, response normalization
and the orchestrator that ties them to a workbook.
"""

from riskgrid.scoring.client import ScoringClient
from riskgrid.scoring.endpoints import resolve_endpoint
from riskgrid.scoring.normalizer import normalize_response
from riskgrid.scoring.orchestrator import ScoringOrchestrator, ScoringResult

__all__ = [
    "ScoringClient",
    "ScoringOrchestrator",
    "ScoringResult",
    "normalize_response",
    "resolve_endpoint",
]
