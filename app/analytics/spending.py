from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from math import ceil
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from app.analytics.bucketing import Granularity, bucket, parse_granularity, to_utc, window_end
from app.core.config import settings
from app.models.query import SpendingQuery
from app.models.transaction import CategoryRecord, TransactionRecord, TransactionStatus, TransactionType
from app.utils.money import ZERO, percentage, to_cents, to_percent, total

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
DEFAULT_TYPES = frozenset({TransactionType.INCOME, TransactionType.EXPENSE})

# a category is "high" above 1.5x and "low" below 0.5x the mean category spend
HIGH_PERFORMANCE_RATIO = Decimal("1.5")
LOW_PERFORMANCE_RATIO = Decimal("0.5")


@dataclass
class CategorySpending:
    category_id: Optional[str]
    category_name: str
    category_path: str
    amount: Decimal
    percentage: Decimal
    transaction_count: int
    average_amount: Decimal


@dataclass
class PeriodSpending:
    period: str
    amount: Decimal
    income: Decimal
    transaction_count: int


@dataclass
class DaySpending:
    date: str
    amount: Decimal
    transaction_count: int


@dataclass
class SpendingTrend:
    period: str
    amount: Decimal
    change: Decimal
    percentage_change: Decimal


@dataclass
class SpendingAnalysis:
    """Aggregated view of a transaction set over one window."""

    group_by: str
    total_spent: Decimal = ZERO
    total_income: Decimal = ZERO
    net_amount: Decimal = ZERO
    transaction_count: int = 0
    average_daily_spending: Decimal = ZERO
    average_monthly_spending: Decimal = ZERO
    average_monthly_income: Decimal = ZERO
    largest_expense: Decimal = ZERO
    smallest_expense: Decimal = ZERO
    spending_by_category: List[CategorySpending] = field(default_factory=list)
    spending_by_period: List[PeriodSpending] = field(default_factory=list)
    top_spending_days: List[DaySpending] = field(default_factory=list)
    spending_by_day: List[DaySpending] = field(default_factory=list)
    spending_trends: List[SpendingTrend] = field(default_factory=list)

    @classmethod
    def empty(cls, group_by: Union[str, Granularity] = Granularity.MONTH) -> "SpendingAnalysis":
        return cls(group_by=Granularity(group_by).value)

    @property
    def top_category(self) -> Optional[CategorySpending]:
        return self.spending_by_category[0] if self.spending_by_category else None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Change:
    amount: Decimal
    percentage: Decimal
    trend: str


@dataclass
class CategoryChange:
    category_id: Optional[str]
    category_name: str
    current_amount: Decimal
    previous_amount: Decimal
    change: Decimal
    percentage_change: Decimal
    trend: str


@dataclass
class PeriodComparison:
    total_spent: Change
    total_income: Change
    net_amount: Change
    category_changes: List[CategoryChange]
    insights: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def category_index(categories: Optional[Iterable[Any]]) -> Dict[str, CategoryRecord]:
    records = CategoryRecord.coerce_all(categories, "category")
    return {record.id: record for record in records}


def resolve_category(category_id: Optional[str], index: Mapping[str, CategoryRecord]):
    """Return (id, name, path) for a transaction's category; unknown ids fold into Uncategorized."""
    record = index.get(category_id) if category_id else None
    if record is None:
        return None, UNCATEGORIZED, UNCATEGORIZED
    return record.id, record.name, record.full_path


def select_transactions(transactions: Iterable[Any], query: SpendingQuery) -> List[TransactionRecord]:
    start = to_utc(query.start_date)
    end = window_end(query.end_date)
    types = set(query.transaction_types) if query.transaction_types else DEFAULT_TYPES
    wanted_categories = set(query.categories) if query.categories else None

    selected = []
    for txn in TransactionRecord.coerce_all(transactions, "transaction"):
        if not start <= to_utc(txn.date) <= end:
            continue
        if txn.type not in types:
            continue
        if wanted_categories is not None and txn.category_id not in wanted_categories:
            continue
        if query.min_amount is not None and txn.amount < query.min_amount:
            continue
        if query.max_amount is not None and txn.amount > query.max_amount:
            continue
        if not query.include_recurring and txn.is_recurring:
            continue
        if not query.include_pending and txn.status == TransactionStatus.PENDING:
            continue
        selected.append(txn)
    return selected


def _window_days(query: SpendingQuery) -> int:
    span = to_utc(query.end_date) - to_utc(query.start_date)
    return ceil(span.total_seconds() / 86400)


def _category_breakdown(expenses: List[TransactionRecord], index, total_spent: Decimal) -> List[CategorySpending]:
    groups: Dict[Optional[str], List[TransactionRecord]] = defaultdict(list)
    labels = {}
    for txn in expenses:
        category_id, name, path = resolve_category(txn.category_id, index)
        groups[category_id].append(txn)
        labels[category_id] = (name, path)

    breakdown = []
    for category_id, items in groups.items():
        amount = to_cents(total(txn.amount for txn in items))
        name, path = labels[category_id]
        breakdown.append(
            CategorySpending(
                category_id=category_id,
                category_name=name,
                category_path=path,
                amount=amount,
                percentage=to_percent(percentage(amount, total_spent)),
                transaction_count=len(items),
                average_amount=to_cents(amount / len(items)),
            )
        )
    breakdown.sort(key=lambda item: item.amount, reverse=True)
    return breakdown


def _period_series(transactions: List[TransactionRecord], granularity: Granularity) -> List[PeriodSpending]:
    periods: Dict[str, PeriodSpending] = {}
    for txn in transactions:
        key = bucket(txn.date, granularity)
        entry = periods.setdefault(key, PeriodSpending(period=key, amount=ZERO, income=ZERO, transaction_count=0))
        if txn.type == TransactionType.EXPENSE:
            entry.amount += txn.amount
        elif txn.type == TransactionType.INCOME:
            entry.income += txn.amount
        entry.transaction_count += 1

    series = [periods[key] for key in sorted(periods)]
    for entry in series:
        entry.amount = to_cents(entry.amount)
        entry.income = to_cents(entry.income)
    return series


def _daily_series(expenses: List[TransactionRecord]) -> List[DaySpending]:
    days: Dict[str, DaySpending] = {}
    for txn in expenses:
        key = bucket(txn.date, Granularity.DAY)
        entry = days.setdefault(key, DaySpending(date=key, amount=ZERO, transaction_count=0))
        entry.amount += txn.amount
        entry.transaction_count += 1
    series = [days[key] for key in sorted(days)]
    for entry in series:
        entry.amount = to_cents(entry.amount)
    return series


def _top_days(daily: List[DaySpending], limit: int) -> List[DaySpending]:
    ranked = sorted(daily, key=lambda day: (-day.amount, day.date))[:limit]
    return [replace(day) for day in ranked]


def spending_trends(series: List[PeriodSpending]) -> List[SpendingTrend]:
    trends = []
    for previous, current in zip(series, series[1:]):
        change = current.amount - previous.amount
        trends.append(
            SpendingTrend(
                period=current.period,
                amount=current.amount,
                change=to_cents(change),
                percentage_change=to_percent(percentage(change, previous.amount)),
            )
        )
    return trends


def analyze_spending(
    transactions: Iterable[Any],
    query: Union[SpendingQuery, Mapping[str, Any]],
    categories: Optional[Iterable[Any]] = None,
) -> SpendingAnalysis:
    """
    Totals, category breakdown and time series for the transactions in the
    query window. A window whose end precedes its start yields a zeroed
    analysis rather than an error.
    """
    query = SpendingQuery.coerce(query, "spending query")
    granularity = parse_granularity(query.group_by)

    if to_utc(query.end_date) < to_utc(query.start_date):
        logger.info(f"Spending window ends before it starts ({query.start_date} > {query.end_date}); returning empty analysis")
        return SpendingAnalysis.empty(granularity)

    selected = select_transactions(transactions, query)
    if not selected:
        return SpendingAnalysis.empty(granularity)

    index = category_index(categories)
    expenses = [txn for txn in selected if txn.type == TransactionType.EXPENSE]
    income = [txn for txn in selected if txn.type == TransactionType.INCOME]

    total_spent = to_cents(total(txn.amount for txn in expenses))
    total_income = to_cents(total(txn.amount for txn in income))
    days = _window_days(query)
    series = _period_series(selected, granularity)
    daily = _daily_series(expenses)

    return SpendingAnalysis(
        group_by=granularity.value,
        total_spent=total_spent,
        total_income=total_income,
        net_amount=total_income - total_spent,
        transaction_count=len(selected),
        average_daily_spending=to_cents(total_spent / days) if days > 0 else ZERO,
        average_monthly_spending=to_cents(total_spent * 30 / days) if days > 0 else ZERO,
        average_monthly_income=to_cents(total_income * 30 / days) if days > 0 else ZERO,
        largest_expense=max((txn.amount for txn in expenses), default=ZERO),
        smallest_expense=min((txn.amount for txn in expenses), default=ZERO),
        spending_by_category=_category_breakdown(expenses, index, total_spent),
        spending_by_period=series,
        top_spending_days=_top_days(daily, settings.TOP_SPENDING_DAYS),
        spending_by_day=daily,
        spending_trends=spending_trends(series),
    )


def _change(current: Decimal, previous: Decimal) -> Change:
    delta = current - previous
    # a zero or negative baseline has no meaningful relative change
    pct = delta / previous * 100 if previous > 0 else ZERO
    trend = "increase" if delta > 0 else "decrease" if delta < 0 else "no-change"
    return Change(amount=to_cents(delta), percentage=to_percent(pct), trend=trend)


def compare_periods(current: SpendingAnalysis, previous: SpendingAnalysis) -> PeriodComparison:
    """Deltas between two spending analyses, e.g. this month against last month."""
    current_by_id = {cat.category_id: cat for cat in current.spending_by_category}
    previous_by_id = {cat.category_id: cat for cat in previous.spending_by_category}

    category_changes = []
    for category_id in list(current_by_id) + [cid for cid in previous_by_id if cid not in current_by_id]:
        now = current_by_id.get(category_id)
        before = previous_by_id.get(category_id)
        current_amount = now.amount if now else ZERO
        previous_amount = before.amount if before else ZERO
        change = _change(current_amount, previous_amount)
        category_changes.append(
            CategoryChange(
                category_id=category_id,
                category_name=(now or before).category_name,
                current_amount=current_amount,
                previous_amount=previous_amount,
                change=change.amount,
                percentage_change=change.percentage,
                trend=change.trend,
            )
        )

    spent = _change(current.total_spent, previous.total_spent)
    net = _change(current.net_amount, previous.net_amount)

    insights = []
    if spent.trend == "increase":
        insights.append(f"Spending increased by {spent.percentage:.1f}% compared to the previous period")
    elif spent.trend == "decrease":
        insights.append(f"Great job! Spending decreased by {abs(spent.percentage):.1f}% compared to the previous period")
    if net.trend == "decrease":
        insights.append(f"Net savings decreased by {abs(net.percentage):.1f}% - consider reviewing your spending habits")

    return PeriodComparison(
        total_spent=spent,
        total_income=_change(current.total_income, previous.total_income),
        net_amount=net,
        category_changes=category_changes,
        insights=insights,
    )


@dataclass
class SpendingPatterns:
    most_expensive_day: Optional[str] = None
    least_expensive_day: Optional[str] = None
    most_expensive_month: Optional[str] = None
    least_expensive_month: Optional[str] = None
    average_transaction_amount: Decimal = ZERO
    largest_transaction: Decimal = ZERO
    smallest_transaction: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CategoryPerformance:
    category_id: Optional[str]
    category_name: str
    amount: Decimal
    percentage: Decimal
    benchmark: Decimal
    performance: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def spending_patterns(analysis: SpendingAnalysis) -> SpendingPatterns:
    """
    Busiest and quietest days and months of an analysis, plus the average,
    largest and smallest expense. Ties go to the earliest day or month.
    """
    daily = analysis.spending_by_day
    if not daily:
        return SpendingPatterns()

    months: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for day in daily:
        months[day.date[:7]] += day.amount
    expense_count = sum(day.transaction_count for day in daily)

    return SpendingPatterns(
        most_expensive_day=max(daily, key=lambda day: day.amount).date,
        least_expensive_day=min(daily, key=lambda day: day.amount).date,
        most_expensive_month=max(months, key=months.get),
        least_expensive_month=min(months, key=months.get),
        average_transaction_amount=to_cents(analysis.total_spent / expense_count),
        largest_transaction=analysis.largest_expense,
        smallest_transaction=analysis.smallest_expense,
    )


def category_performance(analysis: SpendingAnalysis) -> List[CategoryPerformance]:
    """Rate each category's spend against the mean spend per category."""
    breakdown = analysis.spending_by_category
    if not breakdown:
        return []
    benchmark = to_cents(total(cat.amount for cat in breakdown) / len(breakdown))

    rated = []
    for cat in breakdown:
        if cat.amount > benchmark * HIGH_PERFORMANCE_RATIO:
            performance = "high"
        elif cat.amount < benchmark * LOW_PERFORMANCE_RATIO:
            performance = "low"
        else:
            performance = "normal"
        rated.append(
            CategoryPerformance(
                category_id=cat.category_id,
                category_name=cat.category_name,
                amount=cat.amount,
                percentage=cat.percentage,
                benchmark=benchmark,
                performance=performance,
            )
        )
    return rated
