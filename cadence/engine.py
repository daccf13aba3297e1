"""
Cadence Behavioral Engine

Continuous behavioral authentication: scores keystroke, pointer and touch
telemetry against a per-user adaptive baseline and recommends an action
for the caller to enforce.

Pipeline:
    Channel Analyzers -> Fusion -> Decision Policy -> History Ledger

Operations:
    score               score against the current baseline, record history
    update_profile      absorb telemetry into the baseline
    assess              score, update and record as one atomic unit
    get_history         bounded scoring history, oldest first
    is_learning_phase   True until the baseline has seen 3 sessions

The engine performs no I/O of its own. Per-user serialization is delegated
to the injected ProfileStore.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from cadence.analyzers import ANALYZERS, describe_confidence
from cadence.baseline import BehavioralProfile, update_baseline
from cadence.models import DecisionPolicy, FusionEngine
from cadence.schemas.inputs import Channel, TelemetryPayload
from cadence.schemas.outputs import (
    Assessment,
    ChannelBreakdown,
    ChannelResult,
    ConfidenceAssessment,
    ConfidenceRecord,
    ProfileSummary,
)

if TYPE_CHECKING:
    from persistence.store import ProfileStore


logger = logging.getLogger(__name__)

Telemetry = Union[TelemetryPayload, Mapping[str, Any], None]


# =============================================================================
# Exceptions
# =============================================================================

class InputContractError(ValueError):
    """Raised when a caller passes a malformed user id or telemetry payload."""
    pass


def _epoch_ms() -> float:
    return time.time() * 1000.0


# =============================================================================
# Engine
# =============================================================================

class BehavioralEngine:
    """
    Continuous behavioral authentication engine.

    Args:
        store: Profile storage collaborator (in-memory by default)
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        store: Optional[ProfileStore] = None,
        clock: Optional[Callable[[], float]] = None
    ) -> None:
        if store is None:
            from persistence.store import InMemoryProfileStore
            store = InMemoryProfileStore()

        self.store = store
        self.clock = clock or _epoch_ms
        self.analyzers = ANALYZERS
        self.fusion = FusionEngine()
        self.policy = DecisionPolicy()

        logger.info(f"BehavioralEngine initialized ({type(store).__name__})")

    # -------------------------------------------------------------------------
    # Public Operations
    # -------------------------------------------------------------------------

    def score(self, user_id: str, telemetry: Telemetry) -> ConfidenceAssessment:
        """
        Score telemetry against the user's current baseline.

        Appends one record to the user's history; the baseline is not
        modified.
        """
        user_id = self._validate_user_id(user_id)
        payload = self._validate_telemetry(telemetry)
        now = self.clock()

        with self.store.transaction(user_id, now) as record:
            assessment = self._evaluate(record.profile, payload, now)
            record.append_history(self._history_entry(assessment))

        return assessment

    def update_profile(self, user_id: str, telemetry: Telemetry) -> ProfileSummary:
        """Absorb telemetry into the user's adaptive baseline."""
        user_id = self._validate_user_id(user_id)
        payload = self._validate_telemetry(telemetry)
        now = self.clock()

        with self.store.transaction(user_id, now) as record:
            self._absorb(record.profile, payload, now)
            summary = record.profile.summary()

        return summary

    def assess(self, user_id: str, telemetry: Telemetry) -> Assessment:
        """
        Score, update the baseline and record history in one critical section.

        The assessment is computed against the baseline as it was before
        this telemetry was absorbed.
        """
        user_id = self._validate_user_id(user_id)
        payload = self._validate_telemetry(telemetry)
        now = self.clock()

        with self.store.transaction(user_id, now) as record:
            learning_phase = record.profile.is_learning_phase
            assessment = self._evaluate(record.profile, payload, now)
            self._absorb(record.profile, payload, now)
            record.append_history(self._history_entry(assessment))
            summary = record.profile.summary()

        return Assessment(
            assessment=assessment,
            profile=summary,
            learning_phase=learning_phase,
        )

    def get_history(self, user_id: str) -> List[ConfidenceRecord]:
        """Scoring history, oldest first, at most 50 records."""
        user_id = self._validate_user_id(user_id)
        record = self.store.get(user_id)
        return list(record.history) if record is not None else []

    def is_learning_phase(self, user_id: str) -> bool:
        """True while the user's baseline has absorbed fewer than 3 sessions."""
        user_id = self._validate_user_id(user_id)
        record = self.store.get(user_id)
        if record is None:
            return True
        return record.profile.is_learning_phase

    def get_profile(self, user_id: str) -> Optional[ProfileSummary]:
        user_id = self._validate_user_id(user_id)
        record = self.store.get(user_id)
        return record.profile.summary() if record is not None else None

    # -------------------------------------------------------------------------
    # Scoring Pipeline
    # -------------------------------------------------------------------------

    def _evaluate(
        self,
        profile: BehavioralProfile,
        payload: TelemetryPayload,
        now: float
    ) -> ConfidenceAssessment:
        results: Dict[Channel, ChannelResult] = {
            channel: analyzer.analyze(
                payload.batch(channel),
                profile.baseline_values(channel)
            )
            for channel, analyzer in self.analyzers.items()
        }

        fused = self.fusion.fuse(results)
        decision = self.policy.recommend(fused.score)

        logger.debug(
            f"Scored {profile.user_id}: fused={fused.score} "
            f"keystroke={results[Channel.KEYSTROKE].score} "
            f"pointer={results[Channel.POINTER].score} "
            f"touch={results[Channel.TOUCH].score} -> {decision.action.value}"
        )

        return ConfidenceAssessment(
            score=fused.score,
            confidence=fused.confidence,
            level=describe_confidence(fused.confidence),
            factors=fused.factors,
            breakdown=ChannelBreakdown(
                keystroke=results[Channel.KEYSTROKE],
                pointer=results[Channel.POINTER],
                touch=results[Channel.TOUCH],
            ),
            recommendation=decision,
            timestamp=now,
        )

    def _absorb(
        self,
        profile: BehavioralProfile,
        payload: TelemetryPayload,
        now: float
    ) -> None:
        was_learning = profile.is_learning_phase
        updated = update_baseline(profile, payload, now)

        logger.debug(
            f"Updated baseline for {profile.user_id}: "
            f"channels={[c.value for c in updated]} sessions={profile.total_sessions}"
        )
        if was_learning and not profile.is_learning_phase:
            logger.info(f"Learning phase complete for {profile.user_id}")

    def _history_entry(self, assessment: ConfidenceAssessment) -> ConfidenceRecord:
        return ConfidenceRecord(
            timestamp=assessment.timestamp,
            score=assessment.score,
            confidence=assessment.confidence,
            keystroke_score=assessment.breakdown.keystroke.score,
            pointer_score=assessment.breakdown.pointer.score,
            touch_score=assessment.breakdown.touch.score,
        )

    # -------------------------------------------------------------------------
    # Input Contract
    # -------------------------------------------------------------------------

    def _validate_user_id(self, user_id: Any) -> str:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InputContractError(
                f"user_id must be a non-empty string, got {type(user_id).__name__}"
            )
        return user_id

    def _validate_telemetry(self, telemetry: Telemetry) -> TelemetryPayload:
        if telemetry is None:
            return TelemetryPayload()
        if isinstance(telemetry, TelemetryPayload):
            return telemetry
        if not isinstance(telemetry, Mapping):
            raise InputContractError(
                f"telemetry must be a mapping of channel batches, got {type(telemetry).__name__}"
            )

        try:
            return TelemetryPayload.model_validate(dict(telemetry))
        except ValidationError as e:
            raise InputContractError(f"Malformed telemetry: {e}") from e
