from datetime import date, datetime
from decimal import Decimal

import pytest

from app.analytics.budget_variance import VarianceStatus, calculate_all_budget_variances, calculate_budget_variance
from app.core.errors import NotFound

january_budget = {
    "id": "b1",
    "name": "January",
    "total_amount": 1000,
    "start_date": "2024-01-01T00:00:00Z",
    "end_date": "2024-01-31T23:59:59Z",
    "category_allocations": [
        {"category_id": "groceries", "allocated_amount": 500},
        {"category_id": "fun", "allocated_amount": 500, "is_flexible": True},
    ],
}

sample_categories = [{"id": "groceries", "name": "Groceries"}]

sample_transactions = [
    {"amount": 400, "type": "expense", "category_id": "groceries", "date": "2024-01-05T12:00:00Z"},
    {"amount": 100, "type": "expense", "category_id": "fun", "date": "2024-01-07T12:00:00Z"},
    {"amount": 200, "type": "expense", "category_id": "groceries", "date": "2024-01-10T12:00:00Z"},
    {"amount": 300, "type": "expense", "category_id": "fun", "date": "2024-01-12T12:00:00Z", "status": "pending"},
    {"amount": 100, "type": "expense", "category_id": "groceries", "date": "2024-02-02T12:00:00Z"},
    {"amount": 2500, "type": "income", "category_id": "groceries", "date": "2024-01-03T12:00:00Z"},
]

window = (datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59, 59))


def _variance(**kwargs):
    return calculate_budget_variance("b1", [january_budget], sample_transactions, *window, sample_categories, **kwargs)


def test_over_allocated_category():
    variance = _variance()
    groceries = variance.category_breakdown[0]
    assert groceries.spent_amount == Decimal("600.00")
    assert groceries.remaining_amount == Decimal("-100.00")
    assert groceries.utilization_percentage == 120
    assert groceries.status is VarianceStatus.OVER
    assert variance.over_budget_categories == [groceries]


def test_budget_totals_skip_pending_and_out_of_window():
    variance = _variance()
    fun = variance.category_breakdown[1]
    assert fun.spent_amount == Decimal("100.00")
    assert fun.category_name == "Unknown"
    assert variance.total_spent == Decimal("700.00")
    assert variance.remaining_amount == Decimal("300.00")
    assert variance.utilization_percentage == 70
    assert variance.status is VarianceStatus.UNDER


def test_status_follows_utilization():
    budget = dict(
        january_budget,
        category_allocations=[
            {"category_id": "groceries", "allocated_amount": 600},
            {"category_id": "fun", "allocated_amount": 50},
            {"category_id": "travel", "allocated_amount": 0},
        ],
    )
    variance = calculate_budget_variance("b1", [budget], sample_transactions, *window)
    statuses = [cat.status for cat in variance.category_breakdown]
    assert statuses == [VarianceStatus.AT, VarianceStatus.OVER, VarianceStatus.UNDER]
    for cat in variance.category_breakdown:
        assert (cat.status is VarianceStatus.OVER) == (cat.utilization_percentage > 100)
        assert (cat.status is VarianceStatus.AT) == (cat.utilization_percentage == 100)


def test_alerts():
    variance = _variance()
    assert len(variance.alerts) == 1
    assert variance.alerts[0].type == "critical"
    assert variance.alerts[0].category_id == "groceries"
    assert variance.alert_threshold == 80


def test_alert_threshold_precedence():
    assert len(_variance(alert_threshold=15).alerts) == 3

    budget = dict(january_budget, alert_threshold=60)
    variance = calculate_budget_variance("b1", [budget], sample_transactions, *window)
    assert variance.alert_threshold == 60
    assert [alert.type for alert in variance.alerts] == ["warning", "critical"]


def test_daily_progress():
    progress = _variance().daily_progress
    assert [day.date for day in progress] == ["2024-01-05", "2024-01-07", "2024-01-10"]
    assert progress[-1].spent_amount == Decimal("700.00")
    # 1000 spread over 31 days, ten days in
    assert progress[-1].allocated_amount == Decimal("322.58")


def test_unknown_budget():
    with pytest.raises(NotFound, match="Budget not found"):
        calculate_budget_variance("nope", [january_budget], sample_transactions, *window)


def test_all_budgets():
    second = dict(january_budget, id="b2", name="Fun only", total_amount=100, category_allocations=[{"category_id": "fun", "allocated_amount": 100}])
    results = calculate_all_budget_variances([january_budget, second], sample_transactions, *window)
    assert [v.budget_id for v in results] == ["b1", "b2"]
    assert results[1].status is VarianceStatus.AT


def test_date_only_budget_end_covers_the_whole_day():
    budget = dict(january_budget, end_date="2024-01-31")
    late = [{"amount": 50, "type": "expense", "category_id": "fun", "date": "2024-01-31T15:00:00Z"}]
    variance = calculate_budget_variance("b1", [budget], late, datetime(2024, 1, 1), date(2024, 1, 31))
    assert variance.total_spent == Decimal("50.00")
    assert variance.category_breakdown[1].transaction_count == 1


def test_utilization_is_rounded_but_status_is_not():
    budget = dict(january_budget, category_allocations=[{"category_id": "groceries", "allocated_amount": 2500}])
    spend = [{"amount": "2500.10", "type": "expense", "category_id": "groceries", "date": "2024-01-05T12:00:00Z"}]
    variance = calculate_budget_variance("b1", [budget], spend, *window)
    groceries = variance.category_breakdown[0]
    assert groceries.utilization_percentage == Decimal("100.00")
    assert groceries.status is VarianceStatus.OVER
    assert variance.alerts[-1].type == "critical"
    assert variance.alerts[-1].current_value == Decimal("100.00")
