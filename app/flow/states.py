"""
app/flow/states.py

Purpose: Defines all conversation stages

- Enum for each step in the purchase flow
  (FRESH, PLAN_SELECTED, AWAITING_REFERENCE, SUBMITTED)
- Single source of truth for flow stages
- Stage transition validation
"""

from enum import Enum
from typing import Dict, List


class SessionStage(str, Enum):
    """
    Defines all possible stages of a chat's purchase flow.
    Each stage represents what the bot is waiting for next.
    """

    # Nothing selected yet
    FRESH = "FRESH"

    # Plan chosen, waiting for the payment screenshot
    PLAN_SELECTED = "PLAN_SELECTED"

    # Screenshot uploaded, waiting for the UPI name / transaction ID
    AWAITING_REFERENCE = "AWAITING_REFERENCE"

    # Recorded in the sheet, admin notified
    SUBMITTED = "SUBMITTED"


# Forward-only transitions. Going back happens by deleting or resetting the session.
STAGE_TRANSITIONS: Dict[SessionStage, List[SessionStage]] = {
    SessionStage.FRESH: [
        SessionStage.PLAN_SELECTED,
    ],
    SessionStage.PLAN_SELECTED: [
        SessionStage.AWAITING_REFERENCE,
    ],
    SessionStage.AWAITING_REFERENCE: [
        SessionStage.AWAITING_REFERENCE,  # Screenshot re-sent
        SessionStage.SUBMITTED,
    ],
    SessionStage.SUBMITTED: [],
}


def is_valid_transition(from_stage: SessionStage, to_stage: SessionStage) -> bool:
    """
    Checks if a stage transition is valid.

    Args:
        from_stage: Current stage
        to_stage: Target stage

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_stage in STAGE_TRANSITIONS.get(from_stage, [])
