"""
Cadence Schemas

Public exports for input and output Pydantic models.
"""

# Input schemas - Telemetry
from cadence.schemas.inputs import (
    Channel,
    KeystrokeEvent,
    PointerEvent,
    PointerEventType,
    TelemetryPayload,
    TouchEvent,
    TouchEventType,
)

# Output schemas
from cadence.schemas.outputs import (
    Action,
    Assessment,
    AttributedFactor,
    ChannelBreakdown,
    ChannelResult,
    ConfidenceAssessment,
    ConfidenceLevel,
    ConfidenceRecord,
    Decision,
    Factor,
    ProfileSummary,
)

__all__ = [
    # Input
    "Channel",
    "PointerEventType",
    "TouchEventType",
    "KeystrokeEvent",
    "PointerEvent",
    "TouchEvent",
    "TelemetryPayload",
    # Output
    "Action",
    "ConfidenceLevel",
    "Factor",
    "AttributedFactor",
    "ChannelResult",
    "ChannelBreakdown",
    "Decision",
    "ConfidenceAssessment",
    "ConfidenceRecord",
    "ProfileSummary",
    "Assessment",
]
