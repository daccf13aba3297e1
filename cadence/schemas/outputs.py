"""
Cadence Output Schemas

This module defines Pydantic V2 models that enforce the contract of the
engine's results: channel results, fused assessments, decisions, history
records and profile summaries.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from cadence.schemas.inputs import Channel


# =============================================================================
# Enums
# =============================================================================

class ConfidenceLevel(str, Enum):
    """Discrete confidence band derived from a 0-100 score."""
    VERY_HIGH = "VERY_HIGH"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    VERY_LOW = "VERY_LOW"
    UNKNOWN = "UNKNOWN"


class Action(str, Enum):
    """Access decision for the caller to enforce."""
    ALLOW = "ALLOW"
    MONITOR = "MONITOR"
    CHALLENGE = "CHALLENGE"
    BLOCK = "BLOCK"


# =============================================================================
# Channel Analysis
# =============================================================================

class Factor(BaseModel):
    """A single penalty applied while scoring a channel."""
    name: str = Field(..., description="Human-readable factor name")
    impact: int = Field(..., le=0, description="Score delta applied (negative)")
    detail: str = Field(..., description="Deviation description")


class AttributedFactor(Factor):
    """Factor tagged with the channel that produced it."""
    channel: Channel = Field(..., description="Source channel")


class ChannelResult(BaseModel):
    """Score of one telemetry batch against one channel baseline."""
    score: int = Field(..., ge=0, le=100, description="Channel score")
    confidence: ConfidenceLevel = Field(..., description="Confidence band")
    factors: List[Factor] = Field(default_factory=list)
    metrics: Dict[str, Optional[float]] = Field(
        default_factory=dict,
        description="Summary metrics computed from the batch"
    )
    sample_count: int = Field(0, ge=0, description="Events in the batch")


class ChannelBreakdown(BaseModel):
    """Per-channel results of one scoring call."""
    keystroke: ChannelResult
    pointer: ChannelResult
    touch: ChannelResult


# =============================================================================
# Decision
# =============================================================================

class Decision(BaseModel):
    """Recommended access action for a fused score."""
    action: Action = Field(..., description="ALLOW, MONITOR, CHALLENGE or BLOCK")
    message: str = Field(..., description="Explanation for the caller")
    requires_reauth: bool = Field(..., description="Caller should re-authenticate")


# =============================================================================
# Assessment
# =============================================================================

class ConfidenceAssessment(BaseModel):
    """Fused result of one scoring call."""
    score: int = Field(..., ge=0, le=100, description="Fused confidence score")
    confidence: ConfidenceLevel
    level: str = Field(..., description="Description of the confidence band")
    factors: List[AttributedFactor] = Field(default_factory=list)
    breakdown: ChannelBreakdown
    recommendation: Decision
    timestamp: float = Field(..., description="Scoring time (epoch ms)")


class ConfidenceRecord(BaseModel):
    """One entry of a user's scoring history."""
    timestamp: float
    score: int = Field(..., ge=0, le=100)
    confidence: ConfidenceLevel
    keystroke_score: int = Field(..., ge=0, le=100)
    pointer_score: int = Field(..., ge=0, le=100)
    touch_score: int = Field(..., ge=0, le=100)


class ProfileSummary(BaseModel):
    """Caller-facing view of a behavioral profile."""
    user_id: str
    created_at: float
    last_updated: float
    total_sessions: int = Field(..., ge=0)
    learning_phase: bool
    sessions_until_trained: int = Field(..., ge=0)
    baselines: Dict[Channel, Dict[str, Optional[float]]]
    sample_counts: Dict[Channel, int]


class Assessment(BaseModel):
    """Result of the atomic score-then-update unit."""
    assessment: ConfidenceAssessment
    profile: ProfileSummary
    learning_phase: bool = Field(
        ...,
        description="Learning-phase gate observed before this update"
    )
