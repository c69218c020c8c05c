"""Bounded, thread-safe memory of a long-running task's progress."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from cua.records import (
    MAX_FAILED_PATTERNS,
    MAX_MILESTONES,
    MAX_RECENT_ACTIONS,
    ActionResult,
    ErrorRecord,
    Observation,
    Phase,
    detect_phase,
)
from cua.summarizer import Summarizer

__all__ = ["TaskMemory", "TaskSummary"]

_STUCK_THRESHOLD = 3
_HELP_THRESHOLD = 5


def _format_duration(duration: timedelta) -> str:
    """Render a duration rounded to whole seconds, e.g. ``1h2m3s`` or ``0s``."""
    total = duration.total_seconds()
    sign = "-" if total < 0 else ""
    seconds = int(abs(total) + 0.5)
    if seconds == 0:
        return "0s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


@dataclass(frozen=True)
class TaskSummary:
    """An immutable snapshot of a task's state."""

    original_task: str
    duration: timedelta = timedelta(0)
    total_steps: int = 0
    phase: str = ""
    milestones: list[str] = field(default_factory=list)
    key_facts: dict[str, str] = field(default_factory=dict)
    recent_actions: list[ActionResult] = field(default_factory=list)
    consecutive_fails: int = 0
    last_error: ErrorRecord | None = None
    failed_patterns: list[str] = field(default_factory=list)
    is_stuck: bool = False
    needs_help: bool = False

    def for_context(self) -> str:
        """Format the snapshot for inclusion in an agent's context window."""
        lines: list[str] = ["## TASK", self.original_task, ""]

        if self.milestones:
            lines.append("## COMPLETED MILESTONES")
            lines.extend(f"{i}. {m}" for i, m in enumerate(self.milestones, start=1))
            lines.append("")

        if self.phase:
            lines.extend([f"## CURRENT PHASE: {self.phase}", ""])

        if self.key_facts:
            lines.append("## KEY FACTS")
            lines.extend(f"- {k}: {v}" for k, v in self.key_facts.items())
            lines.append("")

        if self.recent_actions:
            lines.append("## RECENT ACTIONS")
            for a in self.recent_actions:
                status = "SUCCESS" if a.success else "FAILED"
                lines.append(f"Step {a.step_number}: {a.action} [{status}] - {a.result}")
            lines.append("")

        if self.last_error is not None:
            lines.extend(["## LAST ERROR", self.last_error.message, ""])

        if self.needs_help:
            lines.extend(
                [
                    "## STATUS: NEEDS HELP",
                    "Multiple consecutive failures. Consider asking the user for guidance.",
                    "",
                ]
            )
        elif self.is_stuck:
            lines.extend(["## STATUS: POSSIBLY STUCK", "Try a different approach.", ""])

        if self.failed_patterns:
            lines.append("## FAILED PATTERNS (avoid these)")
            lines.extend(f"- {p}" for p in self.failed_patterns)
            lines.append("")

        lines.extend(
            [
                "## STATS",
                f"- Total steps: {self.total_steps}",
                f"- Duration: {_format_duration(self.duration)}",
            ]
        )
        return "\n".join(lines) + "\n"


class TaskMemory:
    """Structured view of task progress that stays within a context budget.

    The original task is always kept; older actions are compressed into
    milestones while the most recent ones are kept in detail.
    """

    def __init__(self, task: str) -> None:
        self._lock = threading.RLock()
        self._started_monotonic = time.monotonic()
        self._summarizer = Summarizer()

        self.original_task = task
        self.started_at = datetime.now()
        self.milestones: list[str] = []
        self.phase: str = ""
        self.phase_start_step = 0
        self.key_facts: dict[str, str] = {}
        self.recent_actions: list[ActionResult] = []
        self.total_steps = 0
        self.consecutive_fails = 0
        self.last_error: ErrorRecord | None = None
        self.failed_patterns: list[str] = []

    def record_action(
        self,
        action: str,
        args: dict[str, Any] | None = None,
        success: bool = True,
        result: str = "",
        duration: timedelta = timedelta(0),
    ) -> None:
        """Record the outcome of one action."""
        with self._lock:
            self.total_steps += 1
            self.recent_actions.append(
                ActionResult(
                    step_number=self.total_steps,
                    action=action,
                    args=args,
                    success=success,
                    result=result,
                    duration=duration,
                )
            )

            if self._summarizer.should_summarize(self.recent_actions):
                milestones, remaining = self._summarizer.summarize(self.recent_actions)
                for milestone in milestones:
                    self._add_milestone(milestone)
                self.recent_actions = remaining
            elif len(self.recent_actions) > MAX_RECENT_ACTIONS:
                self.recent_actions = self.recent_actions[-MAX_RECENT_ACTIONS:]

            if success:
                self.consecutive_fails = 0
                self.last_error = None
            else:
                self.consecutive_fails += 1
                self.last_error = ErrorRecord(
                    message=result,
                    action=action,
                    step_number=self.total_steps,
                    recoverable=self.consecutive_fails < _STUCK_THRESHOLD,
                )

    def _add_milestone(self, milestone: str) -> None:
        self.milestones.append(milestone)
        if len(self.milestones) > MAX_MILESTONES:
            self.milestones = self.milestones[-MAX_MILESTONES:]

    def add_milestone(self, milestone: str) -> None:
        """Add a completed milestone, keeping only the most recent ones."""
        with self._lock:
            self._add_milestone(milestone)

    def set_phase(self, phase: str) -> None:
        """Change the current phase, summarizing the previous one into a milestone."""
        phase = str(phase)
        with self._lock:
            if self.phase == phase:
                return
            if self.phase:
                milestone = self._summarizer.summarize_for_phase_change(
                    self.phase, self.recent_actions
                )
                if milestone:
                    self._add_milestone(milestone)
                self.recent_actions = []
            self.phase = phase
            self.phase_start_step = self.total_steps

    def maybe_update_phase(self, obs: Observation) -> None:
        """Detect the phase from an observation and switch to it if it changed."""
        new_phase = detect_phase(obs)
        with self._lock:
            if new_phase != Phase.UNKNOWN and new_phase != self.phase:
                self.set_phase(new_phase)

    def set_key_fact(self, key: str, value: str) -> None:
        """Store an extracted key fact."""
        with self._lock:
            self.key_facts[key] = value

    def get_key_fact(self, key: str) -> str | None:
        """Return a stored key fact, or None if it is not known."""
        with self._lock:
            return self.key_facts.get(key)

    def add_failed_pattern(self, pattern: str) -> None:
        """Remember a pattern that failed, dropping the oldest past the limit."""
        with self._lock:
            if pattern in self.failed_patterns:
                return
            self.failed_patterns.append(pattern)
            if len(self.failed_patterns) > MAX_FAILED_PATTERNS:
                del self.failed_patterns[0]

    def has_failed_pattern(self, pattern: str) -> bool:
        """Return True if the pattern was recorded as failed."""
        with self._lock:
            return pattern in self.failed_patterns

    def is_stuck(self) -> bool:
        """Return True after three or more consecutive failures."""
        with self._lock:
            return self.consecutive_fails >= _STUCK_THRESHOLD

    def needs_help(self) -> bool:
        """Return True after five or more consecutive failures."""
        with self._lock:
            return self.consecutive_fails >= _HELP_THRESHOLD

    def duration(self) -> timedelta:
        """Return how long the task has been running."""
        return timedelta(seconds=time.monotonic() - self._started_monotonic)

    def to_prompt(self) -> str:
        """Format the memory for direct inclusion in an agent's context."""
        with self._lock:
            out: list[str] = [f"## Your Task\n{self.original_task}\n\n"]

            if self.milestones:
                out.append("## What You've Accomplished\n")
                out.extend(f"- {m}\n" for m in self.milestones)
                out.append("\n")

            facts = [f"- {k}: {v}\n" for k, v in self.key_facts.items()]
            if self.phase:
                out.append(f"## Current Phase: {self.phase}\n")
                if facts:
                    out.append("Key information:\n")
                    out.extend(facts)
                out.append("\n")
            elif facts:
                out.append("## Key Information\n")
                out.extend(facts)
                out.append("\n")

            if self.recent_actions:
                out.append("## Recent Actions\n")
                for a in self.recent_actions:
                    status = "✓" if a.success else "✗"
                    if a.result:
                        out.append(f"{status} {a.action} → {a.result}\n")
                    else:
                        out.append(f"{status} {a.action}\n")
                out.append("\n")

            if self.failed_patterns:
                out.append("## Known Issues (avoid these)\n")
                out.extend(f"- {p}\n" for p in self.failed_patterns)
                out.append("\n")

            if self.consecutive_fails >= _HELP_THRESHOLD:
                out.append(
                    "## ⚠️ NEEDS HELP\nMultiple consecutive failures. "
                    "Consider asking the user for guidance.\n\n"
                )
            elif self.consecutive_fails >= _STUCK_THRESHOLD:
                out.append("## ⚠️ POSSIBLY STUCK\nTry a different approach.\n\n")

            return "".join(out)

    def summary(self) -> TaskSummary:
        """Return an immutable snapshot of the current state."""
        with self._lock:
            return TaskSummary(
                original_task=self.original_task,
                duration=self.duration(),
                total_steps=self.total_steps,
                phase=self.phase,
                milestones=list(self.milestones),
                key_facts=dict(self.key_facts),
                recent_actions=list(self.recent_actions),
                consecutive_fails=self.consecutive_fails,
                last_error=self.last_error,
                failed_patterns=list(self.failed_patterns),
                is_stuck=self.consecutive_fails >= _STUCK_THRESHOLD,
                needs_help=self.consecutive_fails >= _HELP_THRESHOLD,
            )