from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from app.analytics.bucketing import DateLike, to_utc, window_end
from app.analytics.spending import SpendingAnalysis
from app.core.config import settings
from app.core.errors import InvalidArgument
from app.utils.money import HUNDRED, ZERO, to_cents, to_decimal, to_percent

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = Decimal("365")


class ScenarioType(str, Enum):
    OPTIMISTIC = "optimistic"
    REALISTIC = "realistic"
    PESSIMISTIC = "pessimistic"


@dataclass(frozen=True)
class ScenarioAssumptions:
    """Annual rates, in percent."""

    income_growth: Decimal = Decimal("3")
    expense_growth: Decimal = Decimal("3")
    inflation_rate: Decimal = Decimal("3")
    investment_return: Decimal = Decimal("6")

    def scaled(self, favourable: Decimal, unfavourable: Decimal) -> "ScenarioAssumptions":
        return replace(
            self,
            income_growth=self.income_growth * favourable,
            investment_return=self.investment_return * favourable,
            expense_growth=self.expense_growth * unfavourable,
            inflation_rate=self.inflation_rate * unfavourable,
        )


# (multiplier for income growth and returns, multiplier for expense growth and inflation)
SCENARIO_MULTIPLIERS = {
    ScenarioType.OPTIMISTIC: (Decimal("1.5"), Decimal("0.75")),
    ScenarioType.REALISTIC: (Decimal("1"), Decimal("1")),
    ScenarioType.PESSIMISTIC: (Decimal("0.5"), Decimal("1.25")),
}

SCENARIO_DESCRIPTIONS = {
    ScenarioType.OPTIMISTIC: ("Optimistic Scenario", "Best-case scenario with high growth and low inflation"),
    ScenarioType.REALISTIC: ("Realistic Scenario", "Most likely scenario based on your recent history"),
    ScenarioType.PESSIMISTIC: ("Pessimistic Scenario", "Worst-case scenario with low growth and high inflation"),
}


@dataclass(frozen=True)
class FinancialBaseline:
    annual_income: Decimal
    annual_expenses: Decimal
    net_worth: Decimal = ZERO
    goal_amount: Decimal = field(default_factory=lambda: settings.SCENARIO_GOAL_AMOUNT)
    assumptions: ScenarioAssumptions = field(default_factory=ScenarioAssumptions)

    @classmethod
    def from_spending(
        cls,
        analysis: SpendingAnalysis,
        start_date: DateLike,
        end_date: DateLike,
        net_worth: Any = ZERO,
        goal_amount: Optional[Any] = None,
        assumptions: Optional[ScenarioAssumptions] = None,
    ) -> "FinancialBaseline":
        """Annualise the income and spending observed over [start_date, end_date]."""
        span = window_end(end_date) - to_utc(start_date)
        days = Decimal(max(1, round(span.total_seconds() / 86400)))
        scale = DAYS_PER_YEAR / days
        return cls(
            annual_income=to_cents(analysis.total_income * scale),
            annual_expenses=to_cents(analysis.total_spent * scale),
            net_worth=to_cents(to_decimal(net_worth)),
            goal_amount=to_decimal(goal_amount) if goal_amount is not None else settings.SCENARIO_GOAL_AMOUNT,
            assumptions=assumptions or ScenarioAssumptions(),
        )


@dataclass
class YearProjection:
    year: int
    income: Decimal
    expenses: Decimal
    savings: Decimal
    net_worth: Decimal
    real_net_worth: Decimal
    goal_progress: Decimal


@dataclass
class ScenarioRecommendation:
    type: str
    priority: str
    message: str
    potential_impact: Decimal
    action_required: str


@dataclass
class FinancialScenario:
    name: str
    description: str
    scenario_type: ScenarioType
    assumptions: ScenarioAssumptions
    projections: List[YearProjection]
    recommendations: List[ScenarioRecommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def project_years(baseline: FinancialBaseline, assumptions: ScenarioAssumptions, years: int) -> List[YearProjection]:
    income = baseline.annual_income
    expenses = baseline.annual_expenses
    net_worth = baseline.net_worth
    price_level = Decimal(1)
    projections = []
    for year in range(1, years + 1):
        income *= 1 + assumptions.income_growth / HUNDRED
        expenses *= 1 + assumptions.expense_growth / HUNDRED
        savings = income - expenses
        net_worth = (net_worth + savings) * (1 + assumptions.investment_return / HUNDRED)
        price_level *= 1 + assumptions.inflation_rate / HUNDRED
        if baseline.goal_amount > 0:
            progress = min(HUNDRED, net_worth / baseline.goal_amount * HUNDRED)
        else:
            progress = HUNDRED
        projections.append(
            YearProjection(
                year=year,
                income=to_cents(income),
                expenses=to_cents(expenses),
                savings=to_cents(savings),
                net_worth=to_cents(net_worth),
                real_net_worth=to_cents(net_worth / price_level),
                goal_progress=to_percent(progress),
            )
        )
    return projections


def _scenario_recommendations(projections: List[YearProjection]) -> List[ScenarioRecommendation]:
    recommendations = []
    deficits = [p for p in projections if p.savings < 0]
    if deficits:
        first = deficits[0]
        recommendations.append(
            ScenarioRecommendation(
                type="expense",
                priority="high",
                message=f"Expenses overtake income in year {first.year} under these assumptions",
                potential_impact=to_cents(-first.savings),
                action_required="Reduce recurring expenses or grow income before the gap opens",
            )
        )
    if projections and projections[-1].goal_progress < HUNDRED:
        last = projections[-1]
        recommendations.append(
            ScenarioRecommendation(
                type="savings",
                priority="medium",
                message=f"Net worth goal reaches {last.goal_progress}% by year {last.year}",
                potential_impact=last.net_worth,
                action_required="Raise the monthly savings rate to close the gap",
            )
        )
    return recommendations


def generate_scenarios(baseline: FinancialBaseline, time_horizon: int = 10) -> List[FinancialScenario]:
    """Optimistic, realistic and pessimistic projections, in that order."""
    if not isinstance(time_horizon, int) or isinstance(time_horizon, bool):
        raise InvalidArgument("time_horizon must be an integer number of years")
    if not settings.SCENARIO_MIN_HORIZON <= time_horizon <= settings.SCENARIO_MAX_HORIZON:
        raise InvalidArgument(
            f"time_horizon must be between {settings.SCENARIO_MIN_HORIZON} and {settings.SCENARIO_MAX_HORIZON} years"
        )

    scenarios = []
    for scenario_type in ScenarioType:
        assumptions = baseline.assumptions.scaled(*SCENARIO_MULTIPLIERS[scenario_type])
        projections = project_years(baseline, assumptions, time_horizon)
        name, description = SCENARIO_DESCRIPTIONS[scenario_type]
        scenarios.append(
            FinancialScenario(
                name=name,
                description=description,
                scenario_type=scenario_type,
                assumptions=assumptions,
                projections=projections,
                recommendations=_scenario_recommendations(projections),
            )
        )
    logger.info(f"Generated {len(scenarios)} scenarios over {time_horizon} years")
    return scenarios
