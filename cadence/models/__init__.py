"""
Cadence Models

Score fusion and decision policy.
"""

from cadence.models.fusion import FusionEngine, FusedScore, WEIGHTS
from cadence.models.policy import DecisionPolicy

__all__ = [
    "FusionEngine",
    "FusedScore",
    "WEIGHTS",
    "DecisionPolicy",
]
