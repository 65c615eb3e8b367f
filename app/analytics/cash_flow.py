from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from app.analytics.bucketing import DateLike, Granularity, bucket, bucket_range, parse_granularity, to_utc, window_end
from app.analytics.spending import category_index, resolve_category
from app.models.transaction import TransactionRecord, TransactionType
from app.utils.money import ZERO, percentage, to_cents, to_decimal, to_percent, total

logger = logging.getLogger(__name__)

PERIOD_LABELS = {
    Granularity.DAY: "daily",
    Granularity.WEEK: "weekly",
    Granularity.MONTH: "monthly",
    Granularity.QUARTER: "quarterly",
    Granularity.YEAR: "yearly",
}


@dataclass
class CashFlowPeriod:
    period: str
    inflows: Decimal
    outflows: Decimal
    net_amount: Decimal
    balance: Decimal


@dataclass
class CashFlowByType:
    type: str
    amount: Decimal
    percentage: Decimal
    transaction_count: int


@dataclass
class CashFlowByCategory:
    category_id: Optional[str]
    category_name: str
    inflows: Decimal
    outflows: Decimal
    net_amount: Decimal


@dataclass
class CashFlowAnalysis:
    period: str
    opening_balance: Decimal = ZERO
    closing_balance: Decimal = ZERO
    total_inflows: Decimal = ZERO
    total_outflows: Decimal = ZERO
    net_cash_flow: Decimal = ZERO
    cash_flow_by_type: List[CashFlowByType] = field(default_factory=list)
    cash_flow_by_category: List[CashFlowByCategory] = field(default_factory=list)
    cash_flow_by_period: List[CashFlowPeriod] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def analyze_cash_flow(
    transactions: Iterable[Any],
    start_date: DateLike,
    end_date: DateLike,
    group_by: Union[str, Granularity] = Granularity.MONTH,
    opening_balance: Any = ZERO,
    categories: Optional[Iterable[Any]] = None,
) -> CashFlowAnalysis:
    """
    Inflow, outflow and net cash flow for the window, bucketed by group_by.

    Every bucket of the window is listed, including those without activity,
    with a running balance that starts at opening_balance. A window that ends
    before it starts produces an all-zero analysis.
    """
    granularity = parse_granularity(group_by)
    opening = to_cents(to_decimal(opening_balance))
    start = to_utc(start_date)
    end = window_end(end_date)
    if end < start:
        return CashFlowAnalysis(period=PERIOD_LABELS[granularity], opening_balance=opening, closing_balance=opening)

    in_window = [
        txn
        for txn in TransactionRecord.coerce_all(transactions, "transaction")
        if start <= to_utc(txn.date) <= end
    ]
    inflows = [txn for txn in in_window if txn.type == TransactionType.INCOME]
    outflows = [txn for txn in in_window if txn.type == TransactionType.EXPENSE]
    total_inflows = to_cents(total(txn.amount for txn in inflows))
    total_outflows = to_cents(total(txn.amount for txn in outflows))
    net = total_inflows - total_outflows

    per_bucket: Dict[str, List[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
    for txn in inflows:
        per_bucket[bucket(txn.date, granularity)][0] += txn.amount
    for txn in outflows:
        per_bucket[bucket(txn.date, granularity)][1] += txn.amount

    balance = opening
    periods = []
    for key in bucket_range(start, end, granularity):
        period_in, period_out = per_bucket.get(key, (ZERO, ZERO))
        balance += period_in - period_out
        periods.append(
            CashFlowPeriod(
                period=key,
                inflows=to_cents(period_in),
                outflows=to_cents(period_out),
                net_amount=to_cents(period_in - period_out),
                balance=to_cents(balance),
            )
        )

    index = category_index(categories)
    by_category: Dict[Optional[str], List[Any]] = {}
    for txn in inflows + outflows:
        category_id, name, _ = resolve_category(txn.category_id, index)
        entry = by_category.setdefault(category_id, [name, ZERO, ZERO])
        entry[1 if txn.type == TransactionType.INCOME else 2] += txn.amount

    analysis = CashFlowAnalysis(
        period=PERIOD_LABELS[granularity],
        opening_balance=opening,
        closing_balance=opening + net,
        total_inflows=total_inflows,
        total_outflows=total_outflows,
        net_cash_flow=net,
        cash_flow_by_type=[
            CashFlowByType("Income", total_inflows, to_percent(percentage(total_inflows, total_inflows + total_outflows)), len(inflows)),
            CashFlowByType("Expense", total_outflows, to_percent(percentage(total_outflows, total_inflows + total_outflows)), len(outflows)),
        ],
        cash_flow_by_category=[
            CashFlowByCategory(
                category_id=category_id,
                category_name=name,
                inflows=to_cents(cat_in),
                outflows=to_cents(cat_out),
                net_amount=to_cents(cat_in - cat_out),
            )
            for category_id, (name, cat_in, cat_out) in by_category.items()
        ],
        cash_flow_by_period=periods,
    )
    logger.info(f"Cash flow {analysis.period}: inflows={total_inflows} outflows={total_outflows} net={net}")
    return analysis
