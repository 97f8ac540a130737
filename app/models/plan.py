"""
app/models/plan.py

Purpose: Subscription plan catalog

- Plan: label, price (whole rupees), validity in days
- Static catalog keyed by the label users tap on the keyboard
- Keyboard layout for the /start reply keyboard
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Plan:
    """A shared-subscription offering."""
    label: str
    price: int
    duration_days: int
    summary: str  # Markdown line used in the plan listing

    @property
    def duration_display(self) -> str:
        if self.duration_days == 365:
            return "1 year"
        return f"{self.duration_days} days"


DEFAULT_PLANS: List[Plan] = [
    Plan(label="🎧 Spotify", price=50, duration_days=30, summary="🎧 *Spotify*"),
    Plan(label="🎬 Netflix", price=80, duration_days=30, summary="🎬 *Netflix*"),
    Plan(label="📦 Amazon Prime", price=60, duration_days=30, summary="📦 *Amazon Prime*"),
    Plan(label="📺 Hotstar", price=500, duration_days=365, summary="📺 *Hotstar*"),
    Plan(label="🎧 Spotify + 🎬 Netflix", price=120, duration_days=30, summary="🎧 *Spotify + Netflix*"),
    Plan(label="📦 Prime + 📺 Hotstar", price=100, duration_days=30, summary="📦 *Prime + Hotstar*"),
]

DEFAULT_KEYBOARD_LAYOUT: List[List[str]] = [
    ["🎧 Spotify", "🎬 Netflix"],
    ["📦 Amazon Prime", "📺 Hotstar"],
    ["🎧 Spotify + 🎬 Netflix"],
    ["📦 Prime + 📺 Hotstar"],
]


class PlanCatalog:
    """
    Immutable lookup of plans by label.
    """

    def __init__(self, plans: List[Plan], keyboard_layout: Optional[List[List[str]]] = None):
        self._plans: Dict[str, Plan] = {plan.label: plan for plan in plans}
        if len(self._plans) != len(plans):
            raise ValueError("Plan labels must be unique")

        layout = keyboard_layout or [[plan.label] for plan in plans]
        unknown = [label for row in layout for label in row if label not in self._plans]
        if unknown:
            raise ValueError(f"Keyboard references unknown plans: {unknown}")
        self._layout = [list(row) for row in layout]

    def get(self, label: Optional[str]) -> Optional[Plan]:
        """Exact label match; anything else is not a plan."""
        if label is None:
            return None
        return self._plans.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self._plans

    def __iter__(self):
        return iter(self._plans.values())

    def __len__(self) -> int:
        return len(self._plans)

    @property
    def keyboard_layout(self) -> List[List[str]]:
        return [list(row) for row in self._layout]


def default_catalog() -> PlanCatalog:
    return PlanCatalog(DEFAULT_PLANS, DEFAULT_KEYBOARD_LAYOUT)
