# tests/test_goals.py
from datetime import date
from types import SimpleNamespace

import pytest

from wallet_api.core.exceptions import ValidationError
from wallet_api.utils.goals import (
    contribute,
    goal_progress,
    goal_status,
    sub_wallet_goal_progress,
    validate_sub_wallet_goal,
)

TODAY = date(2026, 6, 15)


def test_sub_wallet_goal_progress_is_capped():
    sw = SimpleNamespace(goal_enabled=True, goal_target_amount=1000, balance=1500)
    progress = sub_wallet_goal_progress(sw)

    assert progress["progress_percentage"] == 100
    assert progress["remaining_amount"] == 0
    assert progress["achieved"] is True


def test_sub_wallet_goal_progress_partial():
    sw = SimpleNamespace(goal_enabled=True, goal_target_amount=1000, balance=250)
    progress = sub_wallet_goal_progress(sw)

    assert progress["progress_percentage"] == 25
    assert progress["remaining_amount"] == 750
    assert progress["achieved"] is False


def test_disabled_goal_has_no_progress():
    assert sub_wallet_goal_progress(SimpleNamespace(goal_enabled=False, goal_target_amount=1000, balance=10)) is None


@pytest.mark.parametrize("target", [None, 0, -5])
def test_enabled_goal_needs_positive_target(target):
    with pytest.raises(ValidationError):
        validate_sub_wallet_goal(True, target)


def test_disabling_goal_needs_no_target():
    validate_sub_wallet_goal(False, None)


@pytest.mark.parametrize("saved, target_date, expected", [
    (500, None, "active"),
    (1000, date(2026, 1, 1), "completed"),
    (500, date(2026, 1, 1), "overdue"),
    (500, date(2026, 12, 31), "active"),
])
def test_goal_status(saved, target_date, expected):
    assert goal_status(saved, 1000, target_date, TODAY) == expected


def test_contribution_completes_goal():
    goal = SimpleNamespace(saved_amount=900, target_amount=1000, target_date=date(2026, 12, 31), status="active")

    assert contribute(goal, 100, TODAY) == "completed"
    assert goal.saved_amount == 1000
    assert goal.status == "completed"


def test_contribution_must_be_positive():
    goal = SimpleNamespace(saved_amount=0, target_amount=1000, target_date=None, status="active")
    with pytest.raises(ValidationError):
        contribute(goal, 0)


def test_goal_progress_days_left():
    goal = SimpleNamespace(saved_amount=250, target_amount=1000, target_date=date(2026, 6, 25))
    assert goal_progress(goal, TODAY) == {"progress_percentage": 25.0, "remaining_amount": 750.0, "days_left": 10}
