"""
Cadence Core

Central module exports for the continuous behavioral authentication engine.
"""

from cadence.engine import BehavioralEngine, InputContractError

__all__ = [
    "BehavioralEngine",
    "InputContractError",
]
