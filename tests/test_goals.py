from datetime import date
from decimal import Decimal

from app.analytics.goals import track_goal_progress, update_progress, whole_months_between
from app.models.goal import GoalStatus

emergency_fund = {
    "id": "g1",
    "name": "Emergency fund",
    "target_amount": 1200,
    "current_amount": 700,
    "start_date": "2024-01-01",
    "target_date": "2024-12-31",
}


def test_percentage_complete():
    half = dict(emergency_fund, target_amount=1000, current_amount=500)
    double = dict(emergency_fund, target_amount=1000, current_amount=2000)
    assert track_goal_progress(half, date(2024, 6, 1)).percentage_complete == 50
    assert track_goal_progress(double, date(2024, 6, 1)).percentage_complete == 200


def test_progress_metrics():
    progress = track_goal_progress(emergency_fund, date(2024, 7, 1))
    assert progress.goal_id == "g1"
    assert progress.remaining_amount == Decimal("500.00")
    assert progress.elapsed_months == 6
    assert progress.days_remaining == 183
    assert progress.monthly_contribution == Decimal("116.67")
    assert progress.required_monthly_contribution == Decimal("100.00")
    assert progress.risk_level == "medium"
    assert progress.estimated_completion_date == date(2024, 12, 1)


def test_on_track():
    assert track_goal_progress(emergency_fund, date(2024, 7, 1)).is_on_track
    behind = dict(emergency_fund, current_amount=500)
    assert not track_goal_progress(behind, date(2024, 7, 1)).is_on_track
    # nothing has elapsed yet
    assert track_goal_progress(dict(behind, current_amount=0), date(2023, 12, 1)).is_on_track


def test_zero_target_is_reported_as_is():
    empty = dict(emergency_fund, target_amount=0, current_amount=0)
    assert track_goal_progress(empty, date(2024, 7, 1)).percentage_complete.is_nan()
    funded = dict(emergency_fund, target_amount=0, current_amount=10)
    assert track_goal_progress(funded, date(2024, 7, 1)).percentage_complete.is_infinite()


def test_update_is_clamped_to_target():
    goal = dict(emergency_fund, target_amount=1000, current_amount=900)
    updated = update_progress(goal, 150)
    assert updated.current_amount == Decimal("1000.00")
    assert updated.status is GoalStatus.COMPLETED


def test_overshooting_contribution_completes_goal():
    goal = dict(emergency_fund, target_amount=1000, current_amount=900)
    updated = update_progress(goal, 200)
    assert updated.current_amount == Decimal("1000.00")
    assert updated.status is GoalStatus.COMPLETED


def test_withdrawal_is_clamped_to_zero():
    goal = dict(emergency_fund, current_amount=100, status="completed")
    updated = update_progress(goal, -500)
    assert updated.current_amount == 0
    assert updated.status is GoalStatus.IN_PROGRESS


def test_update_returns_a_copy():
    goal = update_progress(emergency_fund, 0)
    again = update_progress(goal, 100)
    assert goal.current_amount == Decimal("700.00")
    assert again.current_amount == Decimal("800.00")


def test_whole_months_between():
    assert whole_months_between(date(2024, 1, 31), date(2024, 2, 29)) == 0
    assert whole_months_between(date(2024, 1, 1), date(2025, 3, 1)) == 14
    assert whole_months_between(date(2024, 3, 1), date(2024, 1, 1)) == 0
    assert whole_months_between(date(2024, 1, 31), date(2024, 3, 30)) == 1
    assert whole_months_between(date(2024, 1, 31), date(2024, 3, 31)) == 2
    assert whole_months_between(date(2023, 12, 15), date(2024, 1, 14)) == 0


def test_elapsed_months_on_a_short_month():
    goal = dict(emergency_fund, start_date="2024-01-31")
    assert track_goal_progress(goal, date(2024, 2, 29)).elapsed_months == 0


def test_planned_contribution_paces_an_empty_goal():
    planned = dict(emergency_fund, current_amount=0, monthly_contribution=150)
    progress = track_goal_progress(planned, date(2024, 7, 1))
    assert progress.monthly_contribution == Decimal("150.00")
    assert progress.required_monthly_contribution == Decimal("240.00")
    assert progress.risk_level == "high"
    assert progress.estimated_completion_date == date(2025, 3, 1)

    generous = dict(planned, monthly_contribution=300)
    assert track_goal_progress(generous, date(2024, 7, 1)).risk_level == "low"

    # saved money takes over from the plan
    saving = dict(emergency_fund, monthly_contribution=10)
    assert track_goal_progress(saving, date(2024, 7, 1)).monthly_contribution == Decimal("116.67")


def test_percentage_complete_is_rounded():
    third = dict(emergency_fund, target_amount=900, current_amount=300)
    assert track_goal_progress(third, date(2024, 6, 1)).percentage_complete == Decimal("33.33")
