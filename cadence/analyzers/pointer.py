"""
Cadence Pointer Analyzer

Pointer movement scoring over a batch of move/click samples.

Features extracted:
- avg_speed: total path distance / total elapsed time (px/ms)
- avg_click_interval: mean gap between consecutive clicks (ms)

At least two samples are required; a single point carries no speed.
"""

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from cadence.analyzers.base import (
    DIGEST_VALUES,
    ChannelAnalyzer,
    PenaltyRule,
    PenaltyTier,
    positive_or_none,
)
from cadence.schemas.inputs import Channel, PointerEvent, PointerEventType


class PointerAnalyzer(ChannelAnalyzer):
    """Scores pointer kinematics against the user's pointer baseline."""

    channel = Channel.POINTER
    METRICS = ("avg_speed", "avg_click_interval")
    MIN_SAMPLES = 2

    RULES = (
        PenaltyRule("avg_speed", (
            PenaltyTier(60, -25, "Pointer Speed Anomaly", "{pct}% speed deviation"),
            PenaltyTier(40, -15, "Pointer Speed Variation", "{pct}% deviation"),
        )),
        PenaltyRule("avg_click_interval", (
            PenaltyTier(50, -20, "Click Pattern Mismatch", "{pct}% click timing deviation"),
        )),
    )

    def extract_metrics(
        self,
        events: Sequence[PointerEvent]
    ) -> Dict[str, Optional[float]]:
        if len(events) < 2:
            return {"avg_speed": None, "avg_click_interval": None}

        total_distance, total_time = self._path(events)
        avg_speed = total_distance / total_time if total_time > 0 else None

        return {
            "avg_speed": positive_or_none(avg_speed),
            "avg_click_interval": self._click_interval(events),
        }

    def digest(self, events: Sequence[PointerEvent]) -> Dict[str, Any]:
        metrics = self.extract_metrics(events)
        total_distance = self._path(events)[0] if len(events) >= 2 else 0.0
        return {
            "points": [[e.x, e.y] for e in events[:DIGEST_VALUES]],
            "avg_speed": metrics["avg_speed"],
            "distance": total_distance,
        }

    def _path(self, events: Sequence[PointerEvent]) -> Tuple[float, float]:
        """Total euclidean path distance and total elapsed time."""
        coords: NDArray[np.float64] = np.array(
            [[e.x, e.y] for e in events], dtype=np.float64
        )
        timestamps: NDArray[np.float64] = np.array(
            [e.timestamp for e in events], dtype=np.float64
        )

        deltas = np.diff(coords, axis=0)
        distances = np.hypot(deltas[:, 0], deltas[:, 1])

        return float(distances.sum()), float(np.diff(timestamps).sum())

    def _click_interval(self, events: Sequence[PointerEvent]) -> Optional[float]:
        clicks = [e.timestamp for e in events if e.type == PointerEventType.CLICK]
        if len(clicks) < 2:
            return None
        intervals = np.diff(np.array(clicks, dtype=np.float64))
        return positive_or_none(float(intervals.mean()))
