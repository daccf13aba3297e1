"""
Cadence Keystroke Analyzer

Keystroke dynamics scoring. Metrics per batch:
- avg_dwell_time: mean time keys are held down (ms)
- avg_flight_time: mean time between consecutive key presses (ms)
- typing_speed: keystrokes per minute over the batch span
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
from cadence.schemas.inputs import Channel, KeystrokeEvent


MS_PER_MINUTE = 60000.0


class KeystrokeAnalyzer(ChannelAnalyzer):
    """Scores keystroke timing against the user's typing baseline."""

    channel = Channel.KEYSTROKE
    METRICS = ("avg_dwell_time", "avg_flight_time", "typing_speed")
    MIN_SAMPLES = 1

    RULES = (
        PenaltyRule("avg_dwell_time", (
            PenaltyTier(50, -30, "Dwell Time Mismatch", "{pct}% deviation from normal"),
            PenaltyTier(30, -15, "Dwell Time Variation", "{pct}% deviation"),
        )),
        PenaltyRule("avg_flight_time", (
            PenaltyTier(50, -25, "Flight Time Mismatch", "{pct}% deviation from normal"),
            PenaltyTier(30, -10, "Flight Time Variation", "{pct}% deviation"),
        )),
        PenaltyRule("typing_speed", (
            PenaltyTier(40, -20, "Typing Speed Anomaly", "{pct}% speed difference"),
        )),
    )

    def extract_metrics(
        self,
        events: Sequence[KeystrokeEvent]
    ) -> Dict[str, Optional[float]]:
        return {
            "avg_dwell_time": mean(self._dwell_times(events)),
            "avg_flight_time": mean(self._flight_times(events)),
            "typing_speed": self._typing_speed(events),
        }

    def digest(self, events: Sequence[KeystrokeEvent]) -> Dict[str, Any]:
        return {
            "dwell_times": self._dwell_times(events)[:DIGEST_VALUES],
            "flight_times": self._flight_times(events)[:DIGEST_VALUES],
        }

    def _dwell_times(self, events: Sequence[KeystrokeEvent]) -> List[float]:
        return positive_values(e.duration for e in events)

    def _flight_times(self, events: Sequence[KeystrokeEvent]) -> List[float]:
        return positive_values(e.flight_time for e in events)

    def _typing_speed(self, events: Sequence[KeystrokeEvent]) -> Optional[float]:
        """Keystrokes per minute; None for a single event or an unusable span."""
        if len(events) < 2:
            return None
        span = events[-1].timestamp - events[0].timestamp
        if not span > 0:
            return None
        return positive_or_none(len(events) / span * MS_PER_MINUTE)
