from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.analytics.bucketing import DateLike, to_utc, window_end
from app.analytics.spending import category_index
from app.core.config import settings
from app.core.errors import NotFound
from app.models.budget import BudgetRecord
from app.models.transaction import TransactionRecord, TransactionStatus, TransactionType
from app.utils.money import HUNDRED, ZERO, percentage, to_cents, to_decimal, to_percent, total

logger = logging.getLogger(__name__)


class VarianceStatus(str, Enum):
    UNDER = "under"
    AT = "at"
    OVER = "over"

    @classmethod
    def from_utilization(cls, utilization: Decimal) -> "VarianceStatus":
        if utilization > HUNDRED:
            return cls.OVER
        if utilization == HUNDRED:
            return cls.AT
        return cls.UNDER


@dataclass
class CategoryVariance:
    category_id: str
    category_name: str
    allocated_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    utilization_percentage: Decimal
    status: VarianceStatus
    is_flexible: bool
    priority: int
    transaction_count: int


@dataclass
class BudgetAlert:
    type: str
    message: str
    threshold: Decimal
    current_value: Decimal
    category_id: Optional[str] = None


@dataclass
class DailyProgress:
    date: str
    allocated_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal


@dataclass
class BudgetVariance:
    budget_id: str
    budget_name: str
    total_allocated: Decimal
    total_spent: Decimal
    remaining_amount: Decimal
    utilization_percentage: Decimal
    status: VarianceStatus
    alert_threshold: Decimal
    category_breakdown: List[CategoryVariance] = field(default_factory=list)
    alerts: List[BudgetAlert] = field(default_factory=list)
    daily_progress: List[DailyProgress] = field(default_factory=list)

    @property
    def over_budget_categories(self) -> List[CategoryVariance]:
        return [cat for cat in self.category_breakdown if cat.status is VarianceStatus.OVER]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def find_budget(budget_id: str, budgets: Iterable[Any]) -> BudgetRecord:
    for budget in BudgetRecord.coerce_all(budgets, "budget"):
        if budget.id == budget_id:
            return budget
    raise NotFound("Budget not found")


def _alert(label: str, utilization: Decimal, threshold: Decimal, category_id: Optional[str] = None) -> Optional[BudgetAlert]:
    if utilization < threshold and utilization <= HUNDRED:
        return None
    return BudgetAlert(
        type="critical" if utilization > HUNDRED else "warning",
        message=f"{label} is at {utilization:.1f}% utilization",
        threshold=threshold,
        current_value=to_percent(utilization),
        category_id=category_id,
    )


def _daily_progress(budget: BudgetRecord, counted: List[TransactionRecord]) -> List[DailyProgress]:
    start_day = to_utc(budget.start_date).date()
    total_days = max(1, (window_end(budget.end_date).date() - start_day).days + 1)
    daily_allocation = budget.total_amount / total_days

    per_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for txn in counted:
        per_day[to_utc(txn.date).date()] += txn.amount

    progress = []
    cumulative = ZERO
    for day in sorted(per_day):
        cumulative += per_day[day]
        allocated = daily_allocation * ((day - start_day).days + 1)
        progress.append(
            DailyProgress(
                date=day.isoformat(),
                allocated_amount=to_cents(allocated),
                spent_amount=to_cents(cumulative),
                remaining_amount=to_cents(allocated - cumulative),
            )
        )
    return progress


def calculate_budget_variance(
    budget_id: str,
    budgets: Iterable[Any],
    transactions: Iterable[Any],
    start_date: DateLike,
    end_date: DateLike,
    categories: Optional[Iterable[Any]] = None,
    alert_threshold: Optional[Any] = None,
) -> BudgetVariance:
    """
    Compare a budget's allocations against actual expense transactions.

    Only non-pending expenses dated inside both the budget period and the
    query window count towards an allocation.
    """
    budget = find_budget(budget_id, budgets)
    if alert_threshold is not None:
        threshold = to_decimal(alert_threshold)
    elif budget.alert_threshold is not None:
        threshold = budget.alert_threshold
    else:
        threshold = settings.BUDGET_ALERT_THRESHOLD

    window_start = max(to_utc(budget.start_date), to_utc(start_date))
    window_stop = min(window_end(budget.end_date), window_end(end_date))
    allocated_ids = {allocation.category_id for allocation in budget.category_allocations}

    counted = [
        txn
        for txn in TransactionRecord.coerce_all(transactions, "transaction")
        if txn.type == TransactionType.EXPENSE
        and txn.status != TransactionStatus.PENDING
        and txn.category_id in allocated_ids
        and window_start <= to_utc(txn.date) <= window_stop
    ]
    by_category: Dict[str, List[TransactionRecord]] = defaultdict(list)
    for txn in counted:
        by_category[txn.category_id].append(txn)

    index = category_index(categories)
    breakdown = []
    raw_utilization = []
    for allocation in budget.category_allocations:
        items = by_category.get(allocation.category_id, [])
        spent = to_cents(total(txn.amount for txn in items))
        utilization = percentage(spent, allocation.allocated_amount)
        raw_utilization.append(utilization)
        label = index.get(allocation.category_id)
        breakdown.append(
            CategoryVariance(
                category_id=allocation.category_id,
                category_name=label.name if label else "Unknown",
                allocated_amount=allocation.allocated_amount,
                spent_amount=spent,
                remaining_amount=allocation.allocated_amount - spent,
                utilization_percentage=to_percent(utilization),
                status=VarianceStatus.from_utilization(utilization),
                is_flexible=allocation.is_flexible,
                priority=allocation.priority,
                transaction_count=len(items),
            )
        )

    total_spent = total(cat.spent_amount for cat in breakdown)
    utilization = percentage(total_spent, budget.total_amount)

    alerts = []
    overall = _alert(f"Budget {budget.name or budget.id}", utilization, threshold)
    if overall:
        alerts.append(overall)
    # status and alerts use the unrounded utilization
    for cat, raw in zip(breakdown, raw_utilization):
        alert = _alert(f"{cat.category_name} category", raw, threshold, cat.category_id)
        if alert:
            alerts.append(alert)

    variance = BudgetVariance(
        budget_id=budget.id,
        budget_name=budget.name,
        total_allocated=budget.total_amount,
        total_spent=total_spent,
        remaining_amount=budget.total_amount - total_spent,
        utilization_percentage=to_percent(utilization),
        status=VarianceStatus.from_utilization(utilization),
        alert_threshold=threshold,
        category_breakdown=breakdown,
        alerts=alerts,
        daily_progress=_daily_progress(budget, counted),
    )
    logger.info(f"Budget {budget.id} variance: spent={total_spent} utilization={utilization:.1f}% status={variance.status.value}")
    return variance


def calculate_all_budget_variances(
    budgets: Iterable[Any],
    transactions: Iterable[Any],
    start_date: DateLike,
    end_date: DateLike,
    categories: Optional[Iterable[Any]] = None,
    alert_threshold: Optional[Any] = None,
) -> List[BudgetVariance]:
    records = BudgetRecord.coerce_all(budgets, "budget")
    transactions = TransactionRecord.coerce_all(transactions, "transaction")
    return [
        calculate_budget_variance(budget.id, records, transactions, start_date, end_date, categories, alert_threshold)
        for budget in records
    ]
