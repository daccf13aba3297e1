"""
Cadence Channel Analyzers

Public exports for the per-channel scoring analyzers.
"""

from typing import Dict

from cadence.analyzers.base import ChannelAnalyzer, confidence_level, describe_confidence
from cadence.analyzers.keystroke import KeystrokeAnalyzer
from cadence.analyzers.pointer import PointerAnalyzer
from cadence.analyzers.touch import TouchAnalyzer
from cadence.schemas.inputs import Channel

ANALYZERS: Dict[Channel, ChannelAnalyzer] = {
    Channel.KEYSTROKE: KeystrokeAnalyzer(),
    Channel.POINTER: PointerAnalyzer(),
    Channel.TOUCH: TouchAnalyzer(),
}

__all__ = [
    "ANALYZERS",
    "ChannelAnalyzer",
    "KeystrokeAnalyzer",
    "PointerAnalyzer",
    "TouchAnalyzer",
    "confidence_level",
    "describe_confidence",
]
