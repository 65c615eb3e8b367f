"""
Debt payoff planning.

The simulation runs month by month: open debts accrue a month of interest,
every open debt receives its minimum payment, and whatever is left of the
monthly budget (extra payment, unused minimums, minimums freed by debts
already paid off) rolls onto the open debts in strategy order. The strategy
only decides that order:

* avalanche: highest interest rate first, then lower priority number, then
  smaller balance;
* snowball: smallest balance first, then lower priority number.

Debts without a priority sort after those with one; any remaining tie keeps
the input order.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from app.core.config import settings
from app.core.errors import InvalidArgument
from app.models.debt import DebtRecord
from app.utils.money import HUNDRED, ZERO, to_cents, to_decimal, total

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class PayoffStrategy(str, Enum):
    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"


def _priority(debt: DebtRecord) -> int:
    return debt.priority if debt.priority is not None else sys.maxsize


_ORDERINGS: Dict[PayoffStrategy, Callable[[DebtRecord], Tuple]] = {
    PayoffStrategy.AVALANCHE: lambda debt: (-debt.interest_rate, _priority(debt), debt.balance),
    PayoffStrategy.SNOWBALL: lambda debt: (debt.balance, _priority(debt)),
}


@dataclass
class PayoffMonth:
    month: int
    remaining_debt: Decimal
    payment: Decimal
    interest: Decimal
    principal: Decimal
    balances: Dict[str, Decimal]
    paid_off: List[str] = field(default_factory=list)


@dataclass
class PayoffEvent:
    name: str
    month: int


@dataclass
class DebtPayoffPlan:
    strategy: PayoffStrategy
    total_debt: Decimal
    monthly_payment: Decimal
    payoff_time: int
    total_interest: Decimal
    total_paid: Decimal
    completed: bool
    debts: List[Dict[str, Any]]
    payoff_order: List[PayoffEvent]
    timeline: List[PayoffMonth]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StrategyComparison:
    avalanche: DebtPayoffPlan
    snowball: DebtPayoffPlan
    interest_saved: Decimal
    months_saved: int
    recommended: PayoffStrategy

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_strategy(value: Union[str, PayoffStrategy]) -> PayoffStrategy:
    try:
        return PayoffStrategy(value)
    except ValueError:
        raise InvalidArgument(f"Invalid strategy {value!r}; expected 'avalanche' or 'snowball'") from None


def prioritize(debts: Iterable[Any], strategy: Union[str, PayoffStrategy]) -> List[DebtRecord]:
    strategy = parse_strategy(strategy)
    return sorted(DebtRecord.coerce_all(debts, "debt"), key=_ORDERINGS[strategy])


def _labels(debts: List[DebtRecord]) -> List[str]:
    seen: Dict[str, int] = {}
    labels = []
    for debt in debts:
        seen[debt.name] = seen.get(debt.name, 0) + 1
        labels.append(debt.name if seen[debt.name] == 1 else f"{debt.name} ({seen[debt.name]})")
    return labels


def _prepare(debts, strategy, extra_payment, max_months):
    debts = list(debts or [])
    if not debts:
        raise InvalidArgument("debts array is required and must not be empty")
    ordered = prioritize(debts, strategy)

    extra = to_cents(to_decimal(extra_payment or 0))
    if extra < 0:
        raise InvalidArgument("extra payment must not be negative")
    cap = settings.DEBT_PAYOFF_MAX_MONTHS if max_months is None else int(max_months)
    if cap < 1:
        raise InvalidArgument("max_months must be at least 1")
    return ordered, extra, cap


def _simulate(ordered: List[DebtRecord], extra: Decimal, cap: int) -> Iterator[PayoffMonth]:
    labels = _labels(ordered)
    balances = [to_cents(debt.balance) for debt in ordered]
    month = 0

    while month < cap and any(balance > 0 for balance in balances):
        month += 1
        open_at_start = [balance > 0 for balance in balances]

        interest = ZERO
        for i, debt in enumerate(ordered):
            if open_at_start[i]:
                accrued = to_cents(balances[i] * debt.interest_rate / MONTHS_PER_YEAR / HUNDRED)
                balances[i] += accrued
                interest += accrued

        pool = extra
        paid = ZERO
        for i, debt in enumerate(ordered):
            minimum = to_cents(debt.minimum_payment)
            if balances[i] > 0:
                payment = min(minimum, balances[i])
                balances[i] -= payment
                paid += payment
                pool += minimum - payment
            else:
                pool += minimum

        for i in range(len(ordered)):
            if pool <= 0:
                break
            if balances[i] > 0:
                payment = min(pool, balances[i])
                balances[i] -= payment
                paid += payment
                pool -= payment

        yield PayoffMonth(
            month=month,
            remaining_debt=total(balances),
            payment=paid,
            interest=interest,
            principal=paid - interest,
            balances=dict(zip(labels, balances)),
            paid_off=[labels[i] for i in range(len(ordered)) if open_at_start[i] and balances[i] <= 0],
        )


def iter_payoff(
    debts: Iterable[Any],
    strategy: Union[str, PayoffStrategy] = PayoffStrategy.AVALANCHE,
    extra_payment: Any = ZERO,
    max_months: Optional[int] = None,
) -> Iterator[PayoffMonth]:
    """
    Lazily simulate the payoff, one snapshot per month.

    Arguments are validated before the first snapshot is produced, so bad
    input raises here rather than on the first next().
    """
    ordered, extra, cap = _prepare(debts, strategy, extra_payment, max_months)
    return _simulate(ordered, extra, cap)


def plan_debt_payoff(
    debts: Iterable[Any],
    strategy: Union[str, PayoffStrategy] = PayoffStrategy.AVALANCHE,
    extra_payment: Any = ZERO,
    max_months: Optional[int] = None,
) -> DebtPayoffPlan:
    ordered, extra, cap = _prepare(debts, strategy, extra_payment, max_months)
    strategy = parse_strategy(strategy)

    timeline = list(_simulate(ordered, extra, cap))
    payoff_order = [PayoffEvent(name=name, month=entry.month) for entry in timeline for name in entry.paid_off]
    completed = not timeline or timeline[-1].remaining_debt <= 0
    if not completed:
        logger.warning(
            f"Debt payoff ({strategy.value}) not finished after {cap} months; "
            f"remaining={timeline[-1].remaining_debt}"
        )

    plan = DebtPayoffPlan(
        strategy=strategy,
        total_debt=to_cents(total(debt.balance for debt in ordered)),
        monthly_payment=to_cents(total(debt.minimum_payment for debt in ordered)) + extra,
        payoff_time=len(timeline),
        total_interest=total(entry.interest for entry in timeline),
        total_paid=total(entry.payment for entry in timeline),
        completed=completed,
        debts=[debt.model_dump() for debt in ordered],
        payoff_order=payoff_order,
        timeline=timeline,
    )
    logger.info(
        f"Debt payoff ({strategy.value}): total_debt={plan.total_debt} months={plan.payoff_time} "
        f"interest={plan.total_interest} completed={completed}"
    )
    return plan


def compare_strategies(
    debts: Iterable[Any],
    extra_payment: Any = ZERO,
    max_months: Optional[int] = None,
) -> StrategyComparison:
    debts = list(debts or [])
    avalanche = plan_debt_payoff(debts, PayoffStrategy.AVALANCHE, extra_payment, max_months)
    snowball = plan_debt_payoff(debts, PayoffStrategy.SNOWBALL, extra_payment, max_months)
    if avalanche.total_interest <= snowball.total_interest:
        recommended = PayoffStrategy.AVALANCHE
    else:
        recommended = PayoffStrategy.SNOWBALL
    return StrategyComparison(
        avalanche=avalanche,
        snowball=snowball,
        interest_saved=snowball.total_interest - avalanche.total_interest,
        months_saved=snowball.payoff_time - avalanche.payoff_time,
        recommended=recommended,
    )
