"""
Cadence Touch Analyzer

Touch gesture scoring for mobile clients: tap contact time and swipe speed.
"""

from typing import Any, Dict, List, Optional, Sequence

from cadence.analyzers.base import (
    DIGEST_VALUES,
    ChannelAnalyzer,
    PenaltyRule,
    PenaltyTier,
    mean,
    positive_or_none,
    positive_values,
)
from cadence.schemas.inputs import Channel, TouchEvent, TouchEventType


class TouchAnalyzer(ChannelAnalyzer):
    """Scores touch gestures against the user's touch baseline."""

    channel = Channel.TOUCH
    METRICS = ("avg_tap_duration", "avg_swipe_speed")
    MIN_SAMPLES = 1

    RULES = (
        PenaltyRule("avg_tap_duration", (
            PenaltyTier(50, -25, "Tap Duration Mismatch", "{pct}% deviation from normal"),
        )),
        PenaltyRule("avg_swipe_speed", (
            PenaltyTier(60, -20, "Swipe Speed Anomaly", "{pct}% swipe speed deviation"),
        )),
    )

    def extract_metrics(
        self,
        events: Sequence[TouchEvent]
    ) -> Dict[str, Optional[float]]:
        swipe_speeds = self._swipe_speeds(events)
        return {
            "avg_tap_duration": mean(self._tap_durations(events)),
            # Swipes without a reported speed count as zero
            "avg_swipe_speed": positive_or_none(mean(swipe_speeds)),
        }

    def digest(self, events: Sequence[TouchEvent]) -> Dict[str, Any]:
        return {
            "tap_durations": self._tap_durations(events)[:DIGEST_VALUES],
            "swipe_speeds": self._swipe_speeds(events)[:DIGEST_VALUES],
        }

    def _tap_durations(self, events: Sequence[TouchEvent]) -> List[float]:
        return positive_values(e.duration for e in events if e.type == TouchEventType.TAP)

    def _swipe_speeds(self, events: Sequence[TouchEvent]) -> List[float]:
        return [
            float(e.speed or 0.0)
            for e in events
            if e.type == TouchEventType.SWIPE
        ]
