"""
Cadence Baseline State

Per-user adaptive behavioral baselines and the bounded scoring history.

Update rule (per metric, per batch):
    new = old * 0.7 + observed * 0.3    if a baseline exists
    new = observed                      on cold start

Usage:
    with store.transaction(user_id) as record:
        update_baseline(record.profile, payload, now)
        record.append_history(entry)
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from cadence.analyzers import ANALYZERS
from cadence.schemas.inputs import Channel, TelemetryPayload
from cadence.schemas.outputs import ConfidenceRecord, ProfileSummary


# =============================================================================
# Constants
# =============================================================================

SMOOTHING_RETAIN = 0.7
SMOOTHING_OBSERVED = 0.3

# Sample digests kept per channel
SAMPLE_LIMIT = 20

# Confidence records kept per user
HISTORY_LIMIT = 50

# Sessions before a baseline is considered trained
LEARNING_SESSIONS = 3


def smooth(old: Optional[float], observed: float) -> float:
    """Exponential smoothing; the first observation becomes the baseline."""
    if old is None:
        return observed
    return old * SMOOTHING_RETAIN + observed * SMOOTHING_OBSERVED


# =============================================================================
# Data Models
# =============================================================================

@dataclass
class ChannelBaseline:
    """Adaptive metric values and recent sample digests for one channel."""
    values: Dict[str, Optional[float]] = field(default_factory=dict)
    samples: List[Dict[str, Any]] = field(default_factory=list)

    def merge(self, metric: str, observed: float) -> None:
        self.values[metric] = smooth(self.values.get(metric), observed)

    def add_sample(self, digest: Dict[str, Any]) -> None:
        self.samples.append(digest)
        if len(self.samples) > SAMPLE_LIMIT:
            self.samples = self.samples[-SAMPLE_LIMIT:]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ChannelBaseline:
        return cls(
            values=dict(data.get("values", {})),
            samples=list(data.get("samples", [])),
        )


@dataclass
class BehavioralProfile:
    """
    Adaptive behavioral profile of one user.

    Mutated only through update_baseline().
    """

    user_id: str
    """Unique identifier for the user."""

    created_at: float
    """Creation time (epoch ms)."""

    last_updated: float
    """Time of the last baseline update (epoch ms)."""

    total_sessions: int = 0
    """Number of update calls absorbed into the baseline."""

    channels: Dict[str, ChannelBaseline] = field(default_factory=dict)
    """Per-channel baselines keyed by channel value."""

    @classmethod
    def new(cls, user_id: str, now: float) -> BehavioralProfile:
        """Cold-start profile: every metric present, none observed yet."""
        channels = {
            channel.value: ChannelBaseline(
                values={metric: None for metric in analyzer.METRICS}
            )
            for channel, analyzer in ANALYZERS.items()
        }
        return cls(user_id=user_id, created_at=now, last_updated=now, channels=channels)

    def baseline(self, channel: Channel) -> ChannelBaseline:
        if channel.value not in self.channels:
            self.channels[channel.value] = ChannelBaseline()
        return self.channels[channel.value]

    def baseline_values(self, channel: Channel) -> Dict[str, Optional[float]]:
        """Read-only copy of one channel's baseline values."""
        existing = self.channels.get(channel.value)
        return dict(existing.values) if existing else {}

    @property
    def is_learning_phase(self) -> bool:
        return self.total_sessions < LEARNING_SESSIONS

    @property
    def sessions_until_trained(self) -> int:
        return max(0, LEARNING_SESSIONS - self.total_sessions)

    def summary(self) -> ProfileSummary:
        return ProfileSummary(
            user_id=self.user_id,
            created_at=self.created_at,
            last_updated=self.last_updated,
            total_sessions=self.total_sessions,
            learning_phase=self.is_learning_phase,
            sessions_until_trained=self.sessions_until_trained,
            baselines={c: self.baseline_values(c) for c in Channel},
            sample_counts={
                c: len(self.channels[c.value].samples) if c.value in self.channels else 0
                for c in Channel
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BehavioralProfile:
        return cls(
            user_id=data["user_id"],
            created_at=data["created_at"],
            last_updated=data["last_updated"],
            total_sessions=data.get("total_sessions", 0),
            channels={
                name: ChannelBaseline.from_dict(raw)
                for name, raw in data.get("channels", {}).items()
            },
        )


@dataclass
class UserRecord:
    """Everything the store keeps for one user id."""
    profile: BehavioralProfile
    history: List[ConfidenceRecord] = field(default_factory=list)

    def append_history(self, entry: ConfidenceRecord) -> None:
        """Append a record, evicting the oldest beyond HISTORY_LIMIT."""
        self.history.append(entry)
        if len(self.history) > HISTORY_LIMIT:
            self.history = self.history[-HISTORY_LIMIT:]

    def copy(self) -> UserRecord:
        return UserRecord(
            profile=copy.deepcopy(self.profile),
            history=[entry.model_copy() for entry in self.history],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "history": [entry.model_dump(mode="json") for entry in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserRecord:
        return cls(
            profile=BehavioralProfile.from_dict(data["profile"]),
            history=[ConfidenceRecord.model_validate(raw) for raw in data.get("history", [])],
        )


# =============================================================================
# Update
# =============================================================================

def update_baseline(
    profile: BehavioralProfile,
    telemetry: TelemetryPayload,
    now: float
) -> List[Channel]:
    """
    Merge one telemetry payload into the profile.

    Channels whose batch is below the analyzer's minimum sample count are
    left untouched, as are metrics the batch cannot compute or that come
    out non-finite. The session counter advances on every call.

    Returns:
        Channels whose baseline absorbed the batch.
    """
    updated: List[Channel] = []

    for channel, analyzer in ANALYZERS.items():
        events = telemetry.batch(channel)
        if not analyzer.has_enough_samples(events):
            continue

        baseline = profile.baseline(channel)
        for metric, observed in analyzer.extract_metrics(events).items():
            if observed is not None and math.isfinite(observed):
                baseline.merge(metric, observed)

        digest = {"timestamp": now}
        digest.update(analyzer.digest(events))
        baseline.add_sample(digest)
        updated.append(channel)

    profile.total_sessions += 1
    profile.last_updated = now
    return updated
