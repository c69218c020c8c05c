"""Progressive summarization of older actions into milestones."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from cua.records import MAX_RECENT_ACTIONS, ActionResult

__all__ = ["Summarizer"]


@dataclass
class Summarizer:
    """Compresses actions beyond a detail window into milestone descriptions."""

    min_actions_to_summarize: int = 3
    action_window_size: int = MAX_RECENT_ACTIONS

    def should_summarize(self, actions: Sequence[ActionResult]) -> bool:
        """Return True if there are more actions than the detail window holds."""
        return len(actions) > self.action_window_size

    def summarize(
        self, actions: Sequence[ActionResult]
    ) -> tuple[list[str], list[ActionResult]]:
        """Return milestones for the older actions and the recent ones kept in detail."""
        if len(actions) <= self.action_window_size:
            return [], list(actions)
        cut = len(actions) - self.action_window_size
        return self._group_into_milestones(actions[:cut]), list(actions[cut:])

    def _group_into_milestones(self, actions: Sequence[ActionResult]) -> list[str]:
        milestones: list[str] = []
        group: list[ActionResult] = []
        for action in actions:
            if action.success:
                group.append(action)
                continue
            if group:
                milestones.append(self._summarize_group(group))
                group = []
            milestones.append(f"Attempted {action.action} (failed)")
        if group:
            milestones.append(self._summarize_group(group))
        return milestones

    def _summarize_group(self, actions: Sequence[ActionResult]) -> str:
        if not actions:
            return ""
        if len(actions) == 1:
            return self._describe_action(actions[0])

        counts = Counter(a.action for a in actions)
        parts = ", ".join(
            f"{count} {name} actions" if count > 1 else name
            for name, count in counts.items()
        )
        last = actions[-1]
        if last.result:
            return f"Completed {parts} ({last.result})"
        return f"Completed {parts}"

    @staticmethod
    def _describe_action(action: ActionResult) -> str:
        if action.result:
            return f"{action.action}: {action.result}"
        return action.action

    def summarize_for_phase_change(
        self, old_phase: str, actions: Sequence[ActionResult]
    ) -> str:
        """Return a milestone describing a finished phase, or "" if there was none."""
        if not old_phase:
            return ""
        succeeded = sum(1 for a in actions if a.success)
        if succeeded == 0:
            return f"Attempted {old_phase} phase"
        return f"Completed {old_phase} phase ({succeeded} actions)"