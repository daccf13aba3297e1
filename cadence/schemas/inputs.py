"""
Cadence Input Schemas - Behavioral Telemetry

This module defines Pydantic V2 models for the already-extracted telemetry
the engine consumes:
- Keystroke timing events (dwell / flight)
- Pointer movement and click events
- Touch tap and swipe events
- TelemetryPayload, the per-channel batch container
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class Channel(str, Enum):
    """Behavioral modality."""
    KEYSTROKE = "keystroke"
    POINTER = "pointer"
    TOUCH = "touch"


class PointerEventType(str, Enum):
    """Pointer event type for movement/click tracking."""
    MOVE = "move"
    CLICK = "click"


class TouchEventType(str, Enum):
    """Touch gesture type."""
    TAP = "tap"
    SWIPE = "swipe"


# =============================================================================
# Telemetry Event Models
# =============================================================================

class KeystrokeEvent(BaseModel):
    """Single keystroke with client-computed timings."""
    timestamp: float = Field(..., description="Key down timestamp in milliseconds")
    duration: Optional[float] = Field(
        None,
        description="Dwell time: how long the key was held (ms)"
    )
    flight_time: Optional[float] = Field(
        None,
        description="Time since the previous key down (ms)"
    )


class PointerEvent(BaseModel):
    """Single pointer sample captured by the client tracker."""
    timestamp: float = Field(..., description="Event timestamp in milliseconds")
    x: float = Field(..., description="X coordinate on screen")
    y: float = Field(..., description="Y coordinate on screen")
    type: PointerEventType = Field(
        PointerEventType.MOVE,
        description="move or click"
    )


class TouchEvent(BaseModel):
    """Single touch gesture captured by the client tracker."""
    timestamp: float = Field(..., description="Event timestamp in milliseconds")
    type: TouchEventType = Field(..., description="tap or swipe")
    duration: Optional[float] = Field(None, description="Tap contact time (ms)")
    speed: Optional[float] = Field(None, description="Swipe speed (px/ms)")


# =============================================================================
# Telemetry Payload
# =============================================================================

class TelemetryPayload(BaseModel):
    """
    Per-channel telemetry batches for one scoring or update call.

    Every channel is optional; an absent channel is an empty batch.
    Unknown channel keys are rejected.
    """
    model_config = ConfigDict(extra="forbid")

    keystroke: List[KeystrokeEvent] = Field(
        default_factory=list,
        description="Keystroke batch in capture order"
    )
    pointer: List[PointerEvent] = Field(
        default_factory=list,
        description="Pointer batch in capture order"
    )
    touch: List[TouchEvent] = Field(
        default_factory=list,
        description="Touch batch in capture order"
    )

    def batch(self, channel: Channel) -> list:
        """Return the batch for one channel."""
        return getattr(self, channel.value)

    def is_empty(self) -> bool:
        return not (self.keystroke or self.pointer or self.touch)
