from decimal import Decimal

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)

sample_transactions = [
    {"amount": 3000, "type": "income", "category_id": "salary", "date": "2024-01-01T09:00:00Z"},
    {"amount": 600, "type": "expense", "category_id": "groceries", "date": "2024-01-05T12:00:00Z"},
]

sample_budget = {
    "id": "b1",
    "name": "January",
    "total_amount": 500,
    "start_date": "2024-01-01T00:00:00Z",
    "end_date": "2024-01-31T23:59:59Z",
    "category_allocations": [{"category_id": "groceries", "allocated_amount": 500}],
}

sample_debt = {"name": "loan", "balance": 1200, "interest_rate": 0, "minimum_payment": 100}


def amount(value):
    return Decimal(str(value))


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_spending():
    body = {
        "transactions": sample_transactions,
        "query": {"start_date": "2024-01-01T00:00:00Z", "end_date": "2024-01-31T23:59:59Z"},
    }
    response = client.post("/api/analytics/spending", json=body)
    assert response.status_code == 200
    assert amount(response.json()["total_spent"]) == 600


def test_spending_date_only_window():
    late = sample_transactions + [{"amount": 40, "type": "expense", "category_id": "groceries", "date": "2024-01-31T15:00:00Z"}]
    body = {"transactions": late, "query": {"start_date": "2024-01-01", "end_date": "2024-01-31"}}
    response = client.post("/api/analytics/spending", json=body)
    assert response.status_code == 200
    assert amount(response.json()["total_spent"]) == 640


def test_insights():
    body = {
        "transactions": sample_transactions + [{"amount": 40, "type": "expense", "category_id": "fun", "date": "2024-01-09T12:00:00Z"}],
        "query": {"start_date": "2024-01-01", "end_date": "2024-01-31"},
    }
    response = client.post("/api/analytics/insights", json=body)
    assert response.status_code == 200
    patterns = response.json()["spending_patterns"]
    assert patterns["most_expensive_day"] == "2024-01-05"
    assert patterns["least_expensive_day"] == "2024-01-09"
    assert amount(patterns["largest_transaction"]) == 600
    assert [cat["performance"] for cat in response.json()["category_performance"]] == ["normal"]

    response = client.post("/api/analytics/category-performance", json=body)
    assert response.status_code == 200
    assert amount(response.json()[0]["benchmark"]) == 640


def test_spending_reversed_window():
    body = {
        "transactions": sample_transactions,
        "query": {"start_date": "2024-02-01T00:00:00Z", "end_date": "2024-01-01T00:00:00Z"},
    }
    response = client.post("/api/analytics/spending", json=body)
    assert response.status_code == 200
    assert amount(response.json()["total_spent"]) == 0


def test_spending_bad_granularity():
    body = {
        "transactions": sample_transactions,
        "query": {"start_date": "2024-01-01T00:00:00Z", "end_date": "2024-01-31T00:00:00Z", "group_by": "hour"},
    }
    assert client.post("/api/analytics/spending", json=body).status_code == 400


def test_budget_variance():
    body = {
        "transactions": sample_transactions,
        "budgets": [sample_budget],
        "start_date": "2024-01-01T00:00:00Z",
        "end_date": "2024-01-31T23:59:59Z",
    }
    response = client.post("/api/analytics/budgets/b1/variance", json=body)
    assert response.status_code == 200
    groceries = response.json()["category_breakdown"][0]
    assert amount(groceries["remaining_amount"]) == -100
    assert amount(groceries["utilization_percentage"]) == 120
    assert groceries["status"] == "over"


def test_budget_variance_unknown_budget():
    body = {"budgets": [sample_budget], "start_date": "2024-01-01T00:00:00Z", "end_date": "2024-01-31T00:00:00Z"}
    response = client.post("/api/analytics/budgets/missing/variance", json=body)
    assert response.status_code == 404
    assert response.json()["detail"] == "Budget not found"


def test_cash_flow():
    body = {"transactions": sample_transactions, "start_date": "2024-01-01T00:00:00Z", "end_date": "2024-03-31T00:00:00Z"}
    response = client.post("/api/analytics/cash-flow", json=body)
    assert response.status_code == 200
    assert [row["period"] for row in response.json()["cash_flow_by_period"]] == ["2024-01", "2024-02", "2024-03"]


def test_cash_flow_date_only_end():
    late = [{"amount": 75, "type": "expense", "category_id": "groceries", "date": "2024-03-31T18:00:00Z"}]
    body = {"transactions": late, "start_date": "2024-03-01", "end_date": "2024-03-31"}
    response = client.post("/api/analytics/cash-flow", json=body)
    assert response.status_code == 200
    assert amount(response.json()["total_outflows"]) == 75

def test_goal_update():
    goal = {"id": "g1", "target_amount": 1000, "current_amount": 900, "start_date": "2024-01-01", "target_date": "2024-12-31"}
    response = client.post("/api/planning/goals/update", json={"goal": goal, "amount": 150})
    assert response.status_code == 200
    assert amount(response.json()["current_amount"]) == 1000
    assert response.json()["status"] == "completed"


def test_debt_payoff():
    response = client.post("/api/planning/debt-payoff", json={"debts": [sample_debt]})
    assert response.status_code == 200
    assert response.json()["payoff_time"] == 12


def test_debt_payoff_requires_debts():
    response = client.post("/api/planning/debt-payoff", json={"debts": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "debts array is required and must not be empty"


def test_debt_payoff_unknown_strategy():
    response = client.post("/api/planning/debt-payoff", json={"debts": [sample_debt], "strategy": "fastest"})
    assert response.status_code == 400


def test_debt_compare():
    response = client.post("/api/planning/debt-payoff/compare", json={"debts": [sample_debt]})
    assert response.status_code == 200
    assert response.json()["recommended"] == "avalanche"


def test_retirement_validation():
    params = {
        "current_age": 17,
        "retirement_age": 65,
        "current_savings": 0,
        "monthly_contribution": 100,
        "expected_return": 5,
        "target_amount": 100000,
    }
    assert client.post("/api/planning/retirement", json=params).status_code == 400
    assert client.post("/api/planning/retirement", json=dict(params, current_age=30)).status_code == 200
    assert client.post("/api/planning/retirement", json=dict(params, expected_return=25)).status_code == 422


def test_scenarios():
    body = {"transactions": sample_transactions, "as_of": "2024-01-31T00:00:00Z", "time_horizon": 5}
    response = client.post("/api/planning/scenarios", json=body)
    assert response.status_code == 200
    assert [s["scenario_type"] for s in response.json()] == ["optimistic", "realistic", "pessimistic"]

    body["time_horizon"] = 0
    assert client.post("/api/planning/scenarios", json=body).status_code == 400


def test_recommendations():
    body = {"transactions": sample_transactions, "budgets": [sample_budget], "as_of": "2024-01-31T00:00:00Z"}
    response = client.post("/api/planning/recommendations", json=body)
    assert response.status_code == 200
    assert response.json()[0]["priority"] == "high"
