"""
Cadence Decision Policy

Pure mapping from a fused confidence score to an access decision.
This module is STATELESS and DETERMINISTIC.

Bands are lower-bound inclusive and contiguous over 0..100:
    >= 90  ALLOW
    >= 75  ALLOW (enhanced monitoring)
    >= 60  MONITOR
    >= 40  CHALLENGE (re-authenticate)
    <  40  BLOCK (re-authenticate)
"""

from typing import Tuple

from cadence.schemas.outputs import Action, Decision


class DecisionPolicy:
    """Score to Decision mapping with fixed cut points."""

    # (lower bound, action, requires_reauth, message), checked top to bottom
    BANDS: Tuple[Tuple[int, Action, bool, str], ...] = (
        (90, Action.ALLOW, False,
         "Behavior matches user profile. Full access granted."),
        (75, Action.ALLOW, False,
         "Behavior mostly matches. Continue with enhanced monitoring."),
        (60, Action.MONITOR, False,
         "Some behavioral deviations detected. Monitoring closely."),
        (40, Action.CHALLENGE, True,
         "Significant behavioral anomalies. Re-authentication recommended."),
    )

    BLOCK_MESSAGE = "Behavior does not match user profile. Access restricted."

    def recommend(self, score: int) -> Decision:
        for lower_bound, action, requires_reauth, message in self.BANDS:
            if score >= lower_bound:
                return Decision(
                    action=action,
                    message=message,
                    requires_reauth=requires_reauth,
                )

        return Decision(
            action=Action.BLOCK,
            message=self.BLOCK_MESSAGE,
            requires_reauth=True,
        )
