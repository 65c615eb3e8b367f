from datetime import datetime, timezone
from decimal import Decimal

from app.analytics import FinancialPlanner, ScenarioType

as_of = datetime(2024, 6, 30, 23, 0, tzinfo=timezone.utc)

sample_transactions = [
    {"amount": 5000, "type": "income", "category_id": "salary", "date": "2024-06-01T09:00:00Z"},
    {"amount": 1500, "type": "expense", "category_id": "rent", "date": "2024-06-02T09:00:00Z"},
    {"amount": 600, "type": "expense", "category_id": "food", "date": "2024-06-15T09:00:00Z"},
    {"amount": 900, "type": "expense", "category_id": "food", "date": "2024-04-15T09:00:00Z"},
]

sample_budgets = [{
    "id": "june",
    "name": "June",
    "total_amount": 2000,
    "start_date": "2024-06-01T00:00:00Z",
    "end_date": "2024-06-30T23:59:59Z",
    "category_allocations": [
        {"category_id": "rent", "allocated_amount": 1500},
        {"category_id": "food", "allocated_amount": 500},
    ],
}]


def test_snapshot_covers_lookback_window():
    snapshot = FinancialPlanner().financial_snapshot(sample_transactions, sample_budgets, as_of=as_of)
    assert snapshot.spending.total_spent == Decimal("2100.00")
    assert snapshot.spending.total_income == Decimal("5000.00")
    assert snapshot.cash_flow.net_cash_flow == Decimal("2900.00")
    assert [v.budget_id for v in snapshot.budgets] == ["june"]
    assert snapshot.budgets[0].over_budget_categories[0].category_id == "food"


def test_lookback_override():
    snapshot = FinancialPlanner(lookback_days=120).financial_snapshot(sample_transactions, as_of=as_of)
    assert snapshot.spending.total_spent == Decimal("3000.00")


def test_recommendations_for_snapshot():
    planner = FinancialPlanner()
    snapshot = planner.financial_snapshot(sample_transactions, sample_budgets, as_of=as_of)
    recs = planner.recommendations_for(snapshot)
    assert recs[0].title == "Over budget: June"
    assert any(rec.category == "investment" for rec in recs)


def test_scenarios_for_snapshot():
    planner = FinancialPlanner()
    snapshot = planner.financial_snapshot(sample_transactions, as_of=as_of)
    scenarios = planner.scenarios_for(snapshot, time_horizon=3, net_worth=10000)
    assert {s.scenario_type for s in scenarios} == set(ScenarioType)
    assert all(s.projections[0].savings > 0 for s in scenarios)


def test_debt_cap_override():
    planner = FinancialPlanner(max_months=6)
    plan = planner.debt_payoff([{"name": "loan", "balance": 1200, "interest_rate": 0, "minimum_payment": 100}])
    assert not plan.completed
    assert plan.payoff_time == 6


def test_patterns_and_category_performance():
    planner = FinancialPlanner()
    analysis = planner.spending(sample_transactions, {"start_date": "2024-04-01", "end_date": "2024-06-30"})
    patterns = planner.patterns(analysis)
    assert patterns.most_expensive_day == "2024-06-02"
    assert patterns.most_expensive_month == "2024-06"
    assert patterns.least_expensive_month == "2024-04"
    assert patterns.average_transaction_amount == Decimal("1000.00")
    # everything lands in Uncategorized without category records
    assert [cat.performance for cat in planner.category_performance(analysis)] == ["normal"]
