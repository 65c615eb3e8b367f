from decimal import Decimal

import pytest

from app.analytics.retirement import iter_balances, project_retirement
from app.core.errors import InvalidArgument

base_params = {
    "current_age": 30,
    "retirement_age": 60,
    "current_savings": 0,
    "monthly_contribution": 100,
    "expected_return": 0,
    "target_amount": 36000,
}


def test_projection_is_deterministic():
    params = dict(base_params, current_savings=25000, expected_return=7, inflation_rate=2.5, target_amount=1000000)
    assert project_retirement(params) == project_retirement(params)


def test_zero_return_meets_target_exactly():
    plan = project_retirement(base_params)
    assert plan.months == 360
    assert plan.projected_amount == Decimal("36000.00")
    assert plan.shortfall == 0
    assert plan.required_monthly_contribution == Decimal("100.00")
    assert plan.recommendations == []


def test_shortfall_recommends_higher_contribution():
    plan = project_retirement(dict(base_params, target_amount=100000))
    assert plan.shortfall == Decimal("64000.00")
    assert plan.required_monthly_contribution == Decimal("277.78")
    assert [rec.type for rec in plan.recommendations] == ["increase_contribution"]
    assert plan.recommendations[0].impact == Decimal("177.78")


def test_delaying_retirement_is_suggested_when_it_helps():
    plan = project_retirement(dict(base_params, target_amount=40000))
    delay = [rec for rec in plan.recommendations if rec.type == "delay_retirement"]
    assert len(delay) == 1
    assert "4 year(s)" in delay[0].message


def test_inflation_discounts_projection():
    params = dict(base_params, current_age=59, current_savings=10000, monthly_contribution=0, inflation_rate=2, target_amount=5000)
    plan = project_retirement(params)
    assert plan.nominal_amount == Decimal("10000.00")
    assert plan.projected_amount == Decimal("9803.92")


def test_compound_growth():
    params = dict(base_params, current_age=59, current_savings=1000, monthly_contribution=0, expected_return=12)
    balances = list(iter_balances(params))
    assert len(balances) == 12
    assert balances[0] == (1, Decimal("1010.00"))
    assert project_retirement(params).nominal_amount == Decimal("1126.83")


@pytest.mark.parametrize(
    "overrides",
    [
        {"current_age": 17},
        {"retirement_age": 45},
        {"retirement_age": 101},
        {"current_age": 70, "retirement_age": 65},
        {"expected_return": 25},
        {"inflation_rate": 11},
        {"target_amount": 0},
    ],
)
def test_invalid_parameters(overrides):
    with pytest.raises(InvalidArgument):
        project_retirement(dict(base_params, **overrides))
