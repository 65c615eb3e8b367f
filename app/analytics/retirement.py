from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Tuple

from app.core.config import settings
from app.core.errors import InvalidArgument
from app.models.retirement import RetirementParams
from app.utils.money import HUNDRED, ZERO, to_cents

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass
class RetirementRecommendation:
    type: str
    message: str
    impact: Decimal


@dataclass
class RetirementPlan:
    current_age: int
    retirement_age: int
    current_savings: Decimal
    monthly_contribution: Decimal
    expected_return: Decimal
    inflation_rate: Optional[Decimal]
    target_amount: Decimal
    months: int
    nominal_amount: Decimal
    projected_amount: Decimal
    shortfall: Decimal
    required_monthly_contribution: Decimal
    recommendations: List[RetirementRecommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_params(params: Any) -> RetirementParams:
    params = RetirementParams.coerce(params, "retirement parameters")
    if params.current_age < settings.MIN_WORKING_AGE:
        raise InvalidArgument(f"current_age must be at least {settings.MIN_WORKING_AGE}")
    if params.retirement_age < settings.MIN_RETIREMENT_AGE:
        raise InvalidArgument(f"retirement_age must be at least {settings.MIN_RETIREMENT_AGE}")
    if params.current_age > settings.MAX_AGE or params.retirement_age > settings.MAX_AGE:
        raise InvalidArgument(f"ages must not exceed {settings.MAX_AGE}")
    if params.retirement_age <= params.current_age:
        raise InvalidArgument("retirement_age must be greater than current_age")
    return params


def _monthly_rate(params: RetirementParams) -> Decimal:
    return params.expected_return / MONTHS_PER_YEAR / HUNDRED


def _compound(savings: Decimal, contribution: Decimal, rate: Decimal, months: int) -> Iterator[Tuple[int, Decimal]]:
    balance = savings
    for month in range(1, months + 1):
        balance = balance * (1 + rate) + contribution
        yield month, balance


def iter_balances(params: Any) -> Iterator[Tuple[int, Decimal]]:
    """Yield (month, balance) for every month until retirement."""
    params = validate_params(params)
    months = (params.retirement_age - params.current_age) * MONTHS_PER_YEAR
    return _compound(params.current_savings, params.monthly_contribution, _monthly_rate(params), months)


def _final_balance(savings: Decimal, contribution: Decimal, rate: Decimal, months: int) -> Decimal:
    balance = savings
    for _, balance in _compound(savings, contribution, rate, months):
        pass
    return balance


def _inflation_factor(params: RetirementParams, years: int) -> Decimal:
    if not params.inflation_rate:
        return Decimal(1)
    return (1 + params.inflation_rate / HUNDRED) ** years


def required_contribution(params: RetirementParams, years: int) -> Decimal:
    """Monthly contribution that reaches the (inflation-adjusted) target in `years`."""
    rate = _monthly_rate(params)
    months = years * MONTHS_PER_YEAR
    nominal_target = params.target_amount * _inflation_factor(params, years)
    grown_savings = _final_balance(params.current_savings, ZERO, rate, months)
    needed = nominal_target - grown_savings
    if needed <= 0:
        return ZERO
    if rate == 0:
        return needed / months
    annuity_factor = ((1 + rate) ** months - 1) / rate
    return needed / annuity_factor


def _years_to_target(params: RetirementParams, rate: Decimal) -> Optional[int]:
    """Extra working years past retirement_age needed to reach the target, if any fit under MAX_AGE."""
    balance = _final_balance(
        params.current_savings,
        params.monthly_contribution,
        rate,
        (params.retirement_age - params.current_age) * MONTHS_PER_YEAR,
    )
    years = params.retirement_age - params.current_age
    for extra in range(1, settings.MAX_AGE - params.retirement_age + 1):
        balance = _final_balance(balance, params.monthly_contribution, rate, MONTHS_PER_YEAR)
        if balance / _inflation_factor(params, years + extra) >= params.target_amount:
            return extra
    return None


def _recommendations(params: RetirementParams, shortfall: Decimal, required: Decimal) -> List[RetirementRecommendation]:
    recommendations = []
    if shortfall <= 0:
        return recommendations

    if required > params.monthly_contribution:
        recommendations.append(
            RetirementRecommendation(
                type="increase_contribution",
                message=(
                    f"Increase monthly contribution by ${to_cents(required - params.monthly_contribution)} "
                    f"to ${to_cents(required)} to meet your retirement goal by age {params.retirement_age}"
                ),
                impact=to_cents(required - params.monthly_contribution),
            )
        )

    extra_years = _years_to_target(params, _monthly_rate(params))
    if extra_years is not None:
        recommendations.append(
            RetirementRecommendation(
                type="delay_retirement",
                message=f"Consider delaying retirement by {extra_years} year(s) to age {params.retirement_age + extra_years} to meet your goal",
                impact=to_cents(shortfall),
            )
        )
    return recommendations


def project_retirement(params: Any) -> RetirementPlan:
    """
    Compound savings monthly from current_age to retirement_age.

    When an inflation rate is given the projected amount is expressed in
    today's money; nominal_amount keeps the undiscounted balance.
    """
    params = validate_params(params)
    years = params.retirement_age - params.current_age
    months = years * MONTHS_PER_YEAR

    nominal = _final_balance(params.current_savings, params.monthly_contribution, _monthly_rate(params), months)
    projected = nominal / _inflation_factor(params, years)
    shortfall = max(ZERO, params.target_amount - projected)
    required = required_contribution(params, years)

    plan = RetirementPlan(
        current_age=params.current_age,
        retirement_age=params.retirement_age,
        current_savings=to_cents(params.current_savings),
        monthly_contribution=to_cents(params.monthly_contribution),
        expected_return=params.expected_return,
        inflation_rate=params.inflation_rate,
        target_amount=to_cents(params.target_amount),
        months=months,
        nominal_amount=to_cents(nominal),
        projected_amount=to_cents(projected),
        shortfall=to_cents(shortfall),
        required_monthly_contribution=to_cents(required),
        recommendations=_recommendations(params, shortfall, required),
    )
    logger.info(f"Retirement projection: projected={plan.projected_amount} target={plan.target_amount} shortfall={plan.shortfall}")
    return plan
