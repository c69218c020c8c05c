from datetime import timedelta

import pytest

from cua.records import MAX_RECENT_ACTIONS, ActionResult, Phase
from cua.summarizer import Summarizer


def make_actions(n, success):
    return [
        ActionResult(
            step_number=i + 1,
            action="action",
            success=success,
            result="result",
            duration=timedelta(milliseconds=1),
        )
        for i in range(n)
    ]


def test_new_summarizer_defaults():
    s = Summarizer()
    assert s.min_actions_to_summarize == 3
    assert s.action_window_size == MAX_RECENT_ACTIONS


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, False),
        (3, False),
        (MAX_RECENT_ACTIONS, False),
        (MAX_RECENT_ACTIONS + 1, True),
        (MAX_RECENT_ACTIONS + 10, True),
    ],
)
def test_should_summarize(count, expected):
    assert Summarizer().should_summarize(make_actions(count, True)) is expected


def test_summarize_no_summarization_needed():
    actions = make_actions(3, True)
    milestones, remaining = Summarizer().summarize(actions)
    assert milestones == []
    assert remaining == actions


def test_summarize_basic():
    milestones, remaining = Summarizer().summarize(make_actions(8, True))
    assert milestones
    assert len(remaining) == MAX_RECENT_ACTIONS
    assert remaining[0].step_number == 4
    assert remaining[-1].step_number == 8
    assert milestones == ["Completed 3 action actions (result)"]


def test_summarize_with_failures():
    actions = [
        ActionResult(step_number=1, action="click", success=True, result="ok"),
        ActionResult(step_number=2, action="type", success=True, result="typed"),
        ActionResult(step_number=3, action="click", success=False, result="element not found"),
        ActionResult(step_number=4, action="click", success=True, result="clicked"),
        ActionResult(step_number=5, action="type", success=True, result="typed"),
        ActionResult(step_number=6, action="scroll", success=True, result="scrolled"),
        ActionResult(step_number=7, action="click", success=True, result="clicked"),
        ActionResult(step_number=8, action="type", success=True, result="typed"),
    ]
    milestones, remaining = Summarizer().summarize(actions)
    assert milestones
    assert any("failed" in m for m in milestones)
    assert len(remaining) == MAX_RECENT_ACTIONS


def test_group_single_action():
    actions = [ActionResult(action="click", success=True, result="clicked button")]
    milestones, remaining = Summarizer(action_window_size=0).summarize(actions)
    assert remaining == []
    assert milestones == ["click: clicked button"]


def test_group_multiple_successful_actions():
    actions = [
        ActionResult(action="click", success=True, result="clicked"),
        ActionResult(action="type", success=True, result="typed"),
        ActionResult(action="click", success=True, result="final click"),
    ]
    milestones, _ = Summarizer(action_window_size=0).summarize(actions)
    assert milestones == ["Completed 2 click actions, type (final click)"]


def test_group_mixed_success():
    actions = [
        ActionResult(action="click", success=True, result="clicked"),
        ActionResult(action="type", success=False, result="failed"),
        ActionResult(action="click", success=True, result="clicked"),
    ]
    milestones, _ = Summarizer(action_window_size=0).summarize(actions)
    assert len(milestones) >= 2
    assert milestones == ["click: clicked", "Attempted type (failed)", "click: clicked"]


def test_group_without_result_text():
    actions = [
        ActionResult(action="scroll", success=True),
        ActionResult(action="wait", success=True),
    ]
    milestones, _ = Summarizer(action_window_size=0).summarize(actions)
    assert milestones == ["Completed scroll, wait"]


@pytest.mark.parametrize(
    "old_phase, actions, expected_contains",
    [
        (Phase.NAVIGATION, make_actions(3, True), "navigation"),
        (Phase.FORM_FILLING, make_actions(5, True), "5 actions"),
        (Phase.AUTHENTICATION, make_actions(3, False), "Attempted"),
    ],
)
def test_summarize_for_phase_change(old_phase, actions, expected_contains):
    result = Summarizer().summarize_for_phase_change(old_phase, actions)
    assert result
    assert expected_contains in result


def test_summarize_for_phase_change_empty_phase():
    assert Summarizer().summarize_for_phase_change("", make_actions(3, True)) == ""


def test_summarize_for_phase_change_exact_text():
    s = Summarizer()
    assert s.summarize_for_phase_change(Phase.NAVIGATION, make_actions(3, True)) == (
        "Completed navigation phase (3 actions)"
    )
    assert s.summarize_for_phase_change(Phase.AUTHENTICATION, []) == (
        "Attempted authentication phase"
    )