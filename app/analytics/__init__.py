"""
app.analytics
~~~~~~~~~~~~~

Financial planning and analytics engine. Pure functions over caller-supplied
transactions, budgets, categories, goals and debts; nothing here reads or
writes storage. FinancialPlanner bundles them for the HTTP routers.
"""

from .budget_variance import BudgetVariance, calculate_all_budget_variances, calculate_budget_variance
from .cash_flow import CashFlowAnalysis, analyze_cash_flow
from .debt_payoff import DebtPayoffPlan, PayoffStrategy, StrategyComparison, compare_strategies, iter_payoff, plan_debt_payoff
from .goals import GoalProgress, track_goal_progress, update_progress
from .planner import FinancialPlanner, FinancialSnapshot
from .recommendations import Priority, Recommendation, generate_recommendations
from .retirement import RetirementPlan, iter_balances, project_retirement
from .scenarios import FinancialBaseline, FinancialScenario, ScenarioType, generate_scenarios
from .spending import (
    CategoryPerformance,
    PeriodComparison,
    SpendingAnalysis,
    SpendingPatterns,
    analyze_spending,
    category_performance,
    compare_periods,
    spending_patterns,
)

__all__ = [
    "BudgetVariance",
    "CashFlowAnalysis",
    "CategoryPerformance",
    "DebtPayoffPlan",
    "FinancialBaseline",
    "FinancialPlanner",
    "FinancialScenario",
    "FinancialSnapshot",
    "GoalProgress",
    "PayoffStrategy",
    "PeriodComparison",
    "Priority",
    "Recommendation",
    "RetirementPlan",
    "ScenarioType",
    "SpendingAnalysis",
    "SpendingPatterns",
    "StrategyComparison",
    "analyze_cash_flow",
    "analyze_spending",
    "calculate_all_budget_variances",
    "calculate_budget_variance",
    "category_performance",
    "compare_periods",
    "compare_strategies",
    "generate_recommendations",
    "generate_scenarios",
    "iter_balances",
    "iter_payoff",
    "plan_debt_payoff",
    "project_retirement",
    "spending_patterns",
    "track_goal_progress",
    "update_progress",
]
