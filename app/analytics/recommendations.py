from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.analytics.budget_variance import BudgetVariance
from app.analytics.cash_flow import CashFlowAnalysis
from app.analytics.debt_payoff import DebtPayoffPlan
from app.analytics.goals import GoalProgress
from app.analytics.retirement import RetirementPlan
from app.analytics.spending import SpendingAnalysis
from app.utils.money import HUNDRED, ZERO, to_cents

logger = logging.getLogger(__name__)

TARGET_SAVINGS_RATE = Decimal("20")
CATEGORY_SHARE_LIMIT = Decimal("30")
SUGGESTED_CATEGORY_CUT = Decimal("0.15")
LONG_PAYOFF_MONTHS = 60
INVESTING_INCOME_FLOOR = Decimal("50000")


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass
class Recommendation:
    category: str
    priority: Priority
    title: str
    description: str
    action: str
    potential_impact: Decimal
    timeframe: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _budget_rules(budgets: List[BudgetVariance]) -> List[Recommendation]:
    found = []
    for variance in budgets:
        over = variance.over_budget_categories
        if not over and variance.total_spent <= variance.total_allocated:
            continue
        overspend = sum((cat.spent_amount - cat.allocated_amount for cat in over), ZERO)
        if not over:
            overspend = variance.total_spent - variance.total_allocated
        names = ", ".join(cat.category_name for cat in over) or variance.budget_name
        found.append(
            Recommendation(
                category="budget",
                priority=Priority.HIGH,
                title=f"Over budget: {variance.budget_name}",
                description=f"Spending exceeded the allocation for {names}",
                action="Review recent expenses in these categories and adjust the budget or cut back",
                potential_impact=to_cents(overspend),
                timeframe="immediate",
            )
        )
    return found


def _spending_rules(spending: SpendingAnalysis) -> List[Recommendation]:
    found = []
    if spending.total_income <= 0:
        found.append(
            Recommendation(
                category="savings",
                priority=Priority.HIGH,
                title="No income recorded",
                description="No income was recorded in the analysed period",
                action="Record your income sources so savings can be tracked",
                potential_impact=ZERO,
                timeframe="immediate",
            )
        )
        return found

    savings_rate = (spending.total_income - spending.total_spent) / spending.total_income * HUNDRED
    if savings_rate < TARGET_SAVINGS_RATE:
        top = spending.top_category
        cut = to_cents(top.amount * SUGGESTED_CATEGORY_CUT) if top else ZERO
        target = f"Reduce {top.category_name} spending by 15%" if top else "Reduce discretionary spending"
        found.append(
            Recommendation(
                category="savings",
                priority=Priority.MEDIUM,
                title="Increase your savings rate",
                description=f"Your savings rate is {savings_rate:.1f}%. Aim for at least {TARGET_SAVINGS_RATE}%",
                action=target,
                potential_impact=cut,
                timeframe="1-3 months",
            )
        )

    for cat in spending.spending_by_category:
        if cat.percentage > CATEGORY_SHARE_LIMIT:
            found.append(
                Recommendation(
                    category="budget",
                    priority=Priority.MEDIUM,
                    title=f"High spending on {cat.category_name}",
                    description=f"{cat.category_name} accounts for {cat.percentage:.1f}% of your spending",
                    action=f"Set a budget limit for {cat.category_name}",
                    potential_impact=to_cents(cat.amount * SUGGESTED_CATEGORY_CUT),
                    timeframe="1 month",
                )
            )
    return found


def _cash_flow_rules(cash_flow: CashFlowAnalysis) -> List[Recommendation]:
    if cash_flow.net_cash_flow >= 0:
        return []
    return [
        Recommendation(
            category="budget",
            priority=Priority.HIGH,
            title="Negative cash flow",
            description=f"Outflows exceeded inflows by {-cash_flow.net_cash_flow}",
            action="Cut expenses or add income to stop drawing down your balance",
            potential_impact=to_cents(-cash_flow.net_cash_flow),
            timeframe="immediate",
        )
    ]


def _goal_rules(goals: List[GoalProgress]) -> List[Recommendation]:
    return [
        Recommendation(
            category="savings",
            priority=Priority.MEDIUM,
            title=f"Goal {progress.goal_id} is behind schedule" if progress.goal_id else "Savings goal is behind schedule",
            description=(
                f"Contributing {progress.monthly_contribution}/month against "
                f"{progress.required_monthly_contribution}/month required"
            ),
            action="Increase the monthly contribution or move the target date",
            potential_impact=progress.remaining_amount,
            timeframe="3-6 months",
        )
        for progress in goals
        if not progress.is_on_track
    ]


def _debt_rules(plan: DebtPayoffPlan) -> List[Recommendation]:
    if not plan.completed:
        return [
            Recommendation(
                category="debt",
                priority=Priority.HIGH,
                title="Debts will not be paid off",
                description=f"Current payments do not clear your debts within {plan.payoff_time} months",
                action="Raise monthly payments above the interest being charged",
                potential_impact=plan.total_debt,
                timeframe="immediate",
            )
        ]
    if plan.payoff_time > LONG_PAYOFF_MONTHS:
        return [
            Recommendation(
                category="debt",
                priority=Priority.MEDIUM,
                title="Long debt payoff",
                description=f"Paying off your debts will take {plan.payoff_time} months",
                action=f"Add an extra payment using the {plan.strategy.value} strategy",
                potential_impact=plan.total_interest,
                timeframe="6-12 months",
            )
        ]
    return []


def _retirement_rules(plan: RetirementPlan) -> List[Recommendation]:
    if plan.shortfall <= 0:
        return []
    return [
        Recommendation(
            category="investment",
            priority=Priority.HIGH,
            title="Retirement savings shortfall",
            description=f"Projected savings fall {plan.shortfall} short of your target",
            action=f"Contribute {plan.required_monthly_contribution} per month",
            potential_impact=plan.shortfall,
            timeframe="long term",
        )
    ]


def _investment_rules(spending: SpendingAnalysis) -> List[Recommendation]:
    annual_income = spending.average_monthly_income * 12
    if annual_income <= INVESTING_INCOME_FLOOR:
        return []
    return [
        Recommendation(
            category="investment",
            priority=Priority.LOW,
            title="Consider investing",
            description="Your income supports a regular investment plan",
            action="Look into low-cost index funds or employer retirement plans",
            potential_impact=to_cents(annual_income * Decimal("0.10")),
            timeframe="6-12 months",
        )
    ]


def generate_recommendations(
    spending: Optional[SpendingAnalysis] = None,
    budgets: Iterable[BudgetVariance] = (),
    cash_flow: Optional[CashFlowAnalysis] = None,
    goals: Iterable[GoalProgress] = (),
    debt_plan: Optional[DebtPayoffPlan] = None,
    retirement: Optional[RetirementPlan] = None,
) -> List[Recommendation]:
    """
    Rule-based advice over whatever analyses are available.

    Rules fire in a fixed order; the result is sorted by priority and keeps
    that order among recommendations of equal priority.
    """
    found: List[Recommendation] = []
    found += _budget_rules(list(budgets))
    if spending is not None:
        found += _spending_rules(spending)
    if cash_flow is not None:
        found += _cash_flow_rules(cash_flow)
    found += _goal_rules(list(goals))
    if debt_plan is not None:
        found += _debt_rules(debt_plan)
    if retirement is not None:
        found += _retirement_rules(retirement)
    if spending is not None:
        found += _investment_rules(spending)

    found.sort(key=lambda rec: _PRIORITY_RANK[rec.priority])
    logger.info(f"Generated {len(found)} recommendations")
    return found
