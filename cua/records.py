"""Records describing task progress and screen observations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

__all__ = [
    "MAX_RECENT_ACTIONS",
    "MAX_FAILED_PATTERNS",
    "MAX_MILESTONES",
    "Phase",
    "Observation",
    "ActionResult",
    "ErrorRecord",
    "detect_phase",
]

MAX_RECENT_ACTIONS = 5
MAX_FAILED_PATTERNS = 10
MAX_MILESTONES = 20


class Phase(str, Enum):
    """Common workflow phases."""

    NAVIGATION = "navigation"
    FORM_FILLING = "form_filling"
    AUTHENTICATION = "authentication"
    SEARCH = "search"
    BROWSING = "browsing"
    CONFIRMATION = "confirmation"
    CHECKOUT = "checkout"
    UNKNOWN = ""

    def __str__(self) -> str:
        return self.value


@dataclass
class Observation:
    """The current screen state, used for phase detection."""

    visible_text: list[str] = field(default_factory=list)
    active_app: str = ""
    has_login_form: bool = False
    has_search_box: bool = False
    has_checkout_elements: bool = False
    has_confirmation: bool = False
    focused_element_role: str = ""
    custom: dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionResult:
    """The outcome of one executed action."""

    step_number: int = 0
    action: str = ""
    args: dict[str, Any] | None = None
    success: bool = False
    result: str = ""
    duration: timedelta = timedelta(0)
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ErrorRecord:
    """An error that occurred during task execution."""

    message: str
    action: str = ""
    step_number: int = 0
    timestamp: datetime = field(default_factory=datetime.now)
    recoverable: bool = False


_TEXT_RULES: tuple[tuple[Phase, tuple[str, ...]], ...] = (
    (Phase.CONFIRMATION, ("success", "thank you", "order confirmed", "completed")),
    (Phase.CHECKOUT, ("checkout", "payment", "credit card", "place order")),
    (Phase.AUTHENTICATION, ("sign in", "log in", "password", "username")),
    (Phase.BROWSING, ("results for", "search results")),
)


def detect_phase(obs: Observation) -> Phase:
    """Work out the current workflow phase from an observation."""
    if obs.has_confirmation:
        return Phase.CONFIRMATION
    if obs.has_checkout_elements:
        return Phase.CHECKOUT
    if obs.has_login_form:
        return Phase.AUTHENTICATION
    if obs.has_search_box:
        return Phase.SEARCH

    for text in obs.visible_text:
        lower = text.lower()
        for phase, keywords in _TEXT_RULES:
            if any(keyword in lower for keyword in keywords):
                return phase

    if obs.focused_element_role in ("textfield", "searchbox"):
        return Phase.FORM_FILLING

    if obs.visible_text:
        return Phase.BROWSING
    return Phase.NAVIGATION