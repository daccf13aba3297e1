"""
Cadence Fusion Engine

Weighted-average fusion of the per-channel scores into one confidence score.

Only channels scoring strictly above zero contribute, to both the numerator
and the denominator. A channel at exactly zero is dropped entirely, while a
channel at 1 still dilutes the average. That boundary is kept as is.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from cadence.analyzers.base import DEFAULT_SCORE, clamp_score, confidence_level, round_half_up
from cadence.schemas.inputs import Channel
from cadence.schemas.outputs import AttributedFactor, ChannelResult, ConfidenceLevel


# =============================================================================
# Constants
# =============================================================================

WEIGHTS: Dict[Channel, float] = {
    Channel.KEYSTROKE: 0.40,
    Channel.POINTER: 0.35,
    Channel.TOUCH: 0.25,
}


@dataclass
class FusedScore:
    """Fused confidence with the factors of contributing channels."""
    score: int
    confidence: ConfidenceLevel
    factors: List[AttributedFactor] = field(default_factory=list)
    contributing: List[Channel] = field(default_factory=list)


class FusionEngine:
    """
    Stateless weighted fusion of channel results.

    fused = round(sum(score_i * w_i) / sum(w_i)) over channels with score > 0,
    or 50 when no channel contributes.
    """

    def __init__(self, weights: Mapping[Channel, float] = WEIGHTS) -> None:
        self.weights = dict(weights)

    def fuse(self, results: Mapping[Channel, ChannelResult]) -> FusedScore:
        total_score = 0.0
        total_weight = 0.0
        factors: List[AttributedFactor] = []
        contributing: List[Channel] = []

        for channel, weight in self.weights.items():
            result = results.get(channel)
            if result is None or result.score <= 0:
                continue

            total_score += result.score * weight
            total_weight += weight
            contributing.append(channel)
            factors.extend(
                AttributedFactor(channel=channel, **factor.model_dump())
                for factor in result.factors
            )

        if total_weight > 0:
            score = clamp_score(round_half_up(total_score / total_weight))
        else:
            score = DEFAULT_SCORE

        return FusedScore(
            score=score,
            confidence=confidence_level(score),
            factors=factors,
            contributing=contributing,
        )
