"""Events exchanged between the model, its tools and the task runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = ["FunctionCall", "Part", "Event"]


@dataclass
class FunctionCall:
    """A tool call requested by the model."""

    name: str
    args: dict[str, Any] | None = None


@dataclass
class Part:
    """One piece of event content: text, a tool call or a tool response."""

    text: str = ""
    function_call: FunctionCall | None = None
    function_response: dict[str, Any] | None = None


@dataclass
class Event:
    """One item produced while an agent runs.

    An event with ``error`` set reports a problem; it may carry no content.
    ``escalate`` asks the enclosing loop to stop.
    """

    author: str = ""
    parts: list[Part] = field(default_factory=list)
    transfer_to_agent: str = ""
    escalate: bool = False
    partial: bool = False
    error: BaseException | None = None

    def is_final_response(self) -> bool:
        """Return True if the event is a complete answer rather than a tool exchange."""
        if self.partial:
            return False
        return not any(
            part.function_call is not None or part.function_response is not None
            for part in self.parts
        )