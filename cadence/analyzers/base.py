"""
Cadence Channel Analyzer Base

Shared scoring machinery for the three behavioral channels:
- Relative deviation against an adaptive baseline
- Tiered penalty rules producing attributable factors
- Confidence banding of a 0-100 score

Analyzers hold no state. The same batch scored against the same
baseline always yields the same ChannelResult.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from cadence.schemas.inputs import Channel
from cadence.schemas.outputs import ChannelResult, ConfidenceLevel, Factor


# =============================================================================
# Constants
# =============================================================================

MAX_SCORE = 100
DEFAULT_SCORE = 50

# Raw values kept per series in a baseline sample digest
DIGEST_VALUES = 10

# Lower bounds, checked top to bottom
CONFIDENCE_BANDS: Tuple[Tuple[int, ConfidenceLevel], ...] = (
    (90, ConfidenceLevel.VERY_HIGH),
    (75, ConfidenceLevel.HIGH),
    (60, ConfidenceLevel.MEDIUM),
    (40, ConfidenceLevel.LOW),
)

CONFIDENCE_DESCRIPTIONS: Dict[ConfidenceLevel, str] = {
    ConfidenceLevel.VERY_HIGH: "Very High Confidence",
    ConfidenceLevel.HIGH: "High Confidence",
    ConfidenceLevel.MEDIUM: "Medium Confidence",
    ConfidenceLevel.LOW: "Low Confidence",
    ConfidenceLevel.VERY_LOW: "Very Low Confidence",
    ConfidenceLevel.UNKNOWN: "Unknown",
}


# =============================================================================
# Numeric Helpers
# =============================================================================

def confidence_level(score: float) -> ConfidenceLevel:
    """Map a score onto its confidence band."""
    for lower_bound, level in CONFIDENCE_BANDS:
        if score >= lower_bound:
            return level
    return ConfidenceLevel.VERY_LOW


def describe_confidence(level: ConfidenceLevel) -> str:
    return CONFIDENCE_DESCRIPTIONS.get(level, "Unknown")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (75.5 -> 76)."""
    return int(math.floor(value + 0.5))


def clamp_score(score: float) -> int:
    return int(max(0, min(MAX_SCORE, score)))


def is_positive(value: Optional[float]) -> bool:
    """True for finite values strictly greater than zero."""
    return value is not None and math.isfinite(value) and value > 0


def positive_or_none(value: Optional[float]) -> Optional[float]:
    return float(value) if is_positive(value) else None


def mean(values: Sequence[float]) -> Optional[float]:
    """Arithmetic mean, None for an empty sequence."""
    if not values:
        return None
    return sum(values) / len(values)


def positive_values(values: Iterable[Optional[float]]) -> List[float]:
    return [float(v) for v in values if is_positive(v)]


def relative_deviation(
    current: Optional[float],
    baseline: Optional[float]
) -> Optional[float]:
    """
    Relative deviation |current - baseline| / baseline.

    Returns None when the ratio is not computable: no prior baseline
    (cold start), a zero or negative baseline, or a non-finite operand.
    """
    if current is None or not math.isfinite(current):
        return None
    if not is_positive(baseline):
        return None
    deviation = abs(current - baseline) / baseline
    if not math.isfinite(deviation):
        return None
    return deviation


# =============================================================================
# Penalty Rules
# =============================================================================

@dataclass(frozen=True)
class PenaltyTier:
    """Penalty applied when the deviation percentage exceeds a threshold."""
    threshold_pct: float
    impact: int
    name: str
    detail: str  # formatted with {pct}


@dataclass(frozen=True)
class PenaltyRule:
    """Tiered penalty for one metric. First matching tier wins."""
    metric: str
    tiers: Tuple[PenaltyTier, ...]

    def evaluate(
        self,
        current: Optional[float],
        baseline: Optional[float]
    ) -> Optional[Factor]:
        deviation = relative_deviation(current, baseline)
        if deviation is None:
            return None

        deviation_pct = deviation * 100.0
        for tier in self.tiers:
            if deviation_pct > tier.threshold_pct:
                return Factor(
                    name=tier.name,
                    impact=tier.impact,
                    detail=tier.detail.format(pct=round_half_up(deviation_pct)),
                )
        return None


# =============================================================================
# Channel Analyzer
# =============================================================================

class ChannelAnalyzer:
    """
    Scores one telemetry batch against one channel baseline.

    Subclasses declare the channel, its metric names, the minimum
    sample count and the penalty rules, and implement metric
    extraction and digest construction.
    """

    channel: Channel
    METRICS: Tuple[str, ...] = ()
    MIN_SAMPLES: int = 1
    RULES: Tuple[PenaltyRule, ...] = ()

    def has_enough_samples(self, events: Sequence[Any]) -> bool:
        return len(events) >= self.MIN_SAMPLES

    def extract_metrics(self, events: Sequence[Any]) -> Dict[str, Optional[float]]:
        """Summary metrics of a batch. None marks a metric not computable."""
        raise NotImplementedError

    def digest(self, events: Sequence[Any]) -> Dict[str, Any]:
        """Size-capped sample of the batch's raw values."""
        raise NotImplementedError

    def default_result(self, sample_count: int = 0) -> ChannelResult:
        return ChannelResult(
            score=DEFAULT_SCORE,
            confidence=ConfidenceLevel.UNKNOWN,
            factors=[],
            metrics={},
            sample_count=sample_count,
        )

    def analyze(
        self,
        events: Sequence[Any],
        baseline: Mapping[str, Optional[float]]
    ) -> ChannelResult:
        """
        Score a batch against the channel baseline.

        Args:
            events: Ordered channel events (possibly empty)
            baseline: Current adaptive baseline values for this channel

        Returns:
            ChannelResult. Undersized batches yield score 50 / UNKNOWN.
        """
        if not self.has_enough_samples(events):
            return self.default_result(len(events))

        metrics = self.extract_metrics(events)
        score = MAX_SCORE
        factors: List[Factor] = []

        for rule in self.RULES:
            factor = rule.evaluate(metrics.get(rule.metric), baseline.get(rule.metric))
            if factor is not None:
                score += factor.impact
                factors.append(factor)

        score = clamp_score(score)
        return ChannelResult(
            score=score,
            confidence=confidence_level(score),
            factors=factors,
            metrics=metrics,
            sample_count=len(events),
        )
