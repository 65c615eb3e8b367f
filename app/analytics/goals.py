from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_CEILING, Decimal
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta

from app.analytics.bucketing import DateLike, to_utc
from app.models.goal import GoalRecord, GoalStatus
from app.utils.money import ZERO, raw_percentage, to_cents, to_decimal, to_percent

logger = logging.getLogger(__name__)

LOW_RISK_MARGIN = Decimal("1.2")


@dataclass
class GoalProgress:
    goal_id: Optional[str]
    percentage_complete: Decimal
    remaining_amount: Decimal
    days_remaining: int
    elapsed_months: int
    monthly_contribution: Decimal
    required_monthly_contribution: Decimal
    estimated_completion_date: date
    is_on_track: bool
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_date(value: Optional[DateLike]) -> date:
    if value is None:
        return datetime.now(timezone.utc).date()
    return to_utc(value).date()


def whole_months_between(start: date, end: date) -> int:
    """Full calendar months from start to end; 0 when end is not after start.

    A month only counts once the day of month is reached again, so Jan 31 to
    Feb 29 is still 0 months.
    """
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + end.month - start.month
    if end.day < start.day:
        months -= 1
    return max(0, months)


def _is_on_track(goal: GoalRecord, as_of: date) -> bool:
    elapsed_days = (as_of - goal.start_date).days
    if elapsed_days <= 0:
        return True
    total_days = (goal.target_date - goal.start_date).days
    # current / elapsed >= target / total, cross-multiplied
    return goal.current_amount * total_days >= goal.target_amount * elapsed_days


def _risk_level(contribution: Decimal, required: Decimal) -> str:
    if contribution >= required * LOW_RISK_MARGIN:
        return "low"
    if contribution >= required:
        return "medium"
    return "high"


def track_goal_progress(goal: Any, as_of: Optional[DateLike] = None) -> GoalProgress:
    """
    Progress metrics for a savings-style goal as of a given day (today by default).

    A zero target gives an infinite (or NaN) completion percentage; it is
    reported as is rather than clamped.
    """
    goal = GoalRecord.coerce(goal, "goal")
    today = _as_date(as_of)

    remaining = max(ZERO, goal.target_amount - goal.current_amount)
    elapsed_months = whole_months_between(goal.start_date, today)
    if goal.current_amount == 0 and goal.monthly_contribution is not None:
        # nothing saved yet, so the planned contribution sets the pace
        contribution = goal.monthly_contribution
    elif elapsed_months < 1:
        contribution = goal.current_amount
    else:
        contribution = goal.current_amount / max(1, elapsed_months)

    months_left = max(1, whole_months_between(today, goal.target_date))
    required = remaining / months_left

    if contribution <= 0:
        estimated = goal.target_date
    else:
        months_needed = int((remaining / contribution).to_integral_value(rounding=ROUND_CEILING))
        estimated = today + relativedelta(months=months_needed)

    return GoalProgress(
        goal_id=goal.id,
        percentage_complete=to_percent(raw_percentage(goal.current_amount, goal.target_amount)),
        remaining_amount=to_cents(remaining),
        days_remaining=max(0, (goal.target_date - today).days),
        elapsed_months=elapsed_months,
        monthly_contribution=to_cents(contribution),
        required_monthly_contribution=to_cents(required),
        estimated_completion_date=estimated,
        is_on_track=_is_on_track(goal, today),
        risk_level=_risk_level(contribution, required),
    )


def update_progress(goal: Any, delta: Any) -> GoalRecord:
    """
    Apply a contribution (or withdrawal) to a goal and return the updated copy.

    The amount is clamped into [0, target_amount]; reaching the target marks
    the goal completed. Callers must serialise updates to the same goal.
    """
    goal = GoalRecord.coerce(goal, "goal")
    amount = goal.current_amount + to_decimal(delta)
    amount = max(ZERO, min(goal.target_amount, amount))
    status = GoalStatus.COMPLETED if amount >= goal.target_amount else GoalStatus.IN_PROGRESS
    updated = goal.model_copy(update={"current_amount": to_cents(amount), "status": status})
    logger.info(f"Goal {goal.id} progress {goal.current_amount} -> {updated.current_amount} ({status.value})")
    return updated
