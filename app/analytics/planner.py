from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from app.analytics.bucketing import DateLike, to_utc
from app.analytics.budget_variance import BudgetVariance, calculate_all_budget_variances, calculate_budget_variance
from app.analytics.cash_flow import CashFlowAnalysis, analyze_cash_flow
from app.analytics.debt_payoff import DebtPayoffPlan, StrategyComparison, compare_strategies, plan_debt_payoff
from app.analytics.goals import GoalProgress, track_goal_progress, update_progress
from app.analytics.recommendations import Recommendation, generate_recommendations
from app.analytics.retirement import RetirementPlan, project_retirement
from app.analytics.scenarios import FinancialBaseline, FinancialScenario, generate_scenarios
from app.analytics.spending import (
    CategoryPerformance,
    PeriodComparison,
    SpendingAnalysis,
    SpendingPatterns,
    analyze_spending,
    category_performance,
    compare_periods,
    spending_patterns,
)
from app.core.config import Settings, settings as default_settings
from app.models.goal import GoalRecord
from app.utils.money import ZERO

logger = logging.getLogger(__name__)


@dataclass
class FinancialSnapshot:
    """Spending, budgets and cash flow over one recent window."""

    start_date: datetime
    end_date: datetime
    spending: SpendingAnalysis
    cash_flow: CashFlowAnalysis
    budgets: List[BudgetVariance] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FinancialPlanner:
    """
    Entry point used by the HTTP routers: wraps the analytics functions with
    logging and applies per-instance overrides of the engine settings.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        alert_threshold: Optional[Decimal] = None,
        lookback_days: Optional[int] = None,
        max_months: Optional[int] = None,
    ) -> None:
        config = config or default_settings
        # None lets a budget's own threshold apply before the configured default
        self._alert_threshold = alert_threshold
        self._lookback_days = lookback_days or config.RECOMMENDATION_LOOKBACK_DAYS
        self._max_months = max_months or config.DEBT_PAYOFF_MAX_MONTHS

    # analytics

    def spending(self, transactions: Iterable[Any], query: Any, categories: Optional[Iterable[Any]] = None) -> SpendingAnalysis:
        logger.info("Analyzing spending")
        analysis = analyze_spending(transactions, query, categories)
        logger.info(f"Spending analysis done: spent={analysis.total_spent} transactions={analysis.transaction_count}")
        return analysis

    def compare(self, current: SpendingAnalysis, previous: SpendingAnalysis) -> PeriodComparison:
        return compare_periods(current, previous)

    def patterns(self, analysis: SpendingAnalysis) -> SpendingPatterns:
        return spending_patterns(analysis)

    def category_performance(self, analysis: SpendingAnalysis) -> List[CategoryPerformance]:
        rated = category_performance(analysis)
        high = [cat.category_name for cat in rated if cat.performance == "high"]
        if high:
            logger.info(f"Categories spending well above average: {', '.join(high)}")
        return rated

    def budget_variance(
        self,
        budget_id: str,
        budgets: Iterable[Any],
        transactions: Iterable[Any],
        start_date: DateLike,
        end_date: DateLike,
        categories: Optional[Iterable[Any]] = None,
    ) -> BudgetVariance:
        logger.info(f"Calculating variance for budget {budget_id}")
        return calculate_budget_variance(
            budget_id, budgets, transactions, start_date, end_date, categories, self._alert_threshold
        )

    def cash_flow(
        self,
        transactions: Iterable[Any],
        start_date: DateLike,
        end_date: DateLike,
        group_by: str = "month",
        opening_balance: Any = ZERO,
        categories: Optional[Iterable[Any]] = None,
    ) -> CashFlowAnalysis:
        logger.info(f"Analyzing cash flow by {group_by}")
        return analyze_cash_flow(transactions, start_date, end_date, group_by, opening_balance, categories)

    # planning

    def goal_progress(self, goal: Any, as_of: Optional[DateLike] = None) -> GoalProgress:
        progress = track_goal_progress(goal, as_of)
        logger.info(f"Goal {progress.goal_id}: {progress.percentage_complete}% complete, on track={progress.is_on_track}")
        return progress

    def update_goal(self, goal: Any, amount: Any) -> GoalRecord:
        return update_progress(goal, amount)

    def debt_payoff(self, debts: Iterable[Any], strategy: str = "avalanche", extra_payment: Any = ZERO) -> DebtPayoffPlan:
        logger.info(f"Planning debt payoff ({strategy})")
        return plan_debt_payoff(debts, strategy, extra_payment, self._max_months)

    def compare_debt_strategies(self, debts: Iterable[Any], extra_payment: Any = ZERO) -> StrategyComparison:
        comparison = compare_strategies(debts, extra_payment, self._max_months)
        logger.info(f"Debt strategies compared: recommended={comparison.recommended.value}")
        return comparison

    def retirement(self, params: Any) -> RetirementPlan:
        logger.info("Projecting retirement savings")
        return project_retirement(params)

    # snapshot based

    def financial_snapshot(
        self,
        transactions: Iterable[Any],
        budgets: Iterable[Any] = (),
        categories: Optional[Iterable[Any]] = None,
        as_of: Optional[DateLike] = None,
    ) -> FinancialSnapshot:
        end = to_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
        start = end - timedelta(days=self._lookback_days)
        transactions = list(transactions)
        categories = list(categories or [])
        logger.info(f"Building financial snapshot {start.date()} -> {end.date()}")

        snapshot = FinancialSnapshot(
            start_date=start,
            end_date=end,
            spending=analyze_spending(transactions, {"start_date": start, "end_date": end}, categories),
            cash_flow=analyze_cash_flow(transactions, start, end, categories=categories),
            budgets=calculate_all_budget_variances(budgets, transactions, start, end, categories, self._alert_threshold),
        )
        logger.info(
            f"Snapshot: income={snapshot.spending.total_income} spent={snapshot.spending.total_spent} "
            f"budgets={len(snapshot.budgets)}"
        )
        return snapshot

    def recommendations_for(
        self,
        snapshot: FinancialSnapshot,
        goals: Iterable[Any] = (),
        debts: Optional[Iterable[Any]] = None,
        retirement: Optional[Any] = None,
        as_of: Optional[DateLike] = None,
    ) -> List[Recommendation]:
        goal_progress = [track_goal_progress(goal, as_of or snapshot.end_date) for goal in goals]
        debt_list = list(debts or [])
        debt_plan = plan_debt_payoff(debt_list, max_months=self._max_months) if debt_list else None
        retirement_plan = project_retirement(retirement) if retirement is not None else None
        return generate_recommendations(
            spending=snapshot.spending,
            budgets=snapshot.budgets,
            cash_flow=snapshot.cash_flow,
            goals=goal_progress,
            debt_plan=debt_plan,
            retirement=retirement_plan,
        )

    def scenarios_for(
        self,
        snapshot: FinancialSnapshot,
        time_horizon: int = 10,
        net_worth: Any = ZERO,
        goal_amount: Optional[Any] = None,
    ) -> List[FinancialScenario]:
        baseline = FinancialBaseline.from_spending(
            snapshot.spending, snapshot.start_date, snapshot.end_date, net_worth, goal_amount
        )
        logger.info(f"Scenario baseline: income={baseline.annual_income} expenses={baseline.annual_expenses}")
        return generate_scenarios(baseline, time_horizon)
