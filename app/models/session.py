"""
app/models/session.py

Purpose: Per-chat conversation session

- Chat ID and last activity (drives expiry)
- Explicit stage plus the data collected so far
- Plan snapshot (price/duration copied at selection time)
- Forward-only stage changes enforced on every mutation
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.core.exceptions import InvalidTransitionError
from app.flow.states import SessionStage, is_valid_transition
from app.models.plan import Plan


@dataclass
class Session:
    chat_id: int
    last_activity: datetime
    stage: SessionStage = SessionStage.FRESH
    platform: Optional[str] = None
    price: Optional[int] = None
    duration: Optional[int] = None
    screenshot_url: Optional[str] = None
    upi_info: Optional[str] = None
    expiry_date: Optional[str] = None

    def touch(self, now: datetime) -> None:
        self.last_activity = now

    def is_expired(self, now: datetime, window: timedelta) -> bool:
        return now - self.last_activity > window

    @property
    def is_submitted(self) -> bool:
        return self.expiry_date is not None

    def _advance(self, to_stage: SessionStage) -> None:
        if not is_valid_transition(self.stage, to_stage):
            raise InvalidTransitionError(
                f"Cannot move chat {self.chat_id} from {self.stage.value} to {to_stage.value}",
                details={"from": self.stage.value, "to": to_stage.value}
            )
        self.stage = to_stage

    def select_plan(self, plan: Plan) -> None:
        self._advance(SessionStage.PLAN_SELECTED)
        self.platform = plan.label
        self.price = plan.price
        self.duration = plan.duration_days

    def attach_screenshot(self, url: str) -> None:
        self._advance(SessionStage.AWAITING_REFERENCE)
        self.screenshot_url = url

    def submit(self, upi_info: str, expiry_date: str) -> None:
        if not self.screenshot_url or not upi_info:
            raise InvalidTransitionError(
                "A submission needs both a screenshot and a payment reference",
                details={"chat_id": self.chat_id}
            )
        self._advance(SessionStage.SUBMITTED)
        self.upi_info = upi_info
        self.expiry_date = expiry_date
