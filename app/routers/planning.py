"""
Planning Router
Goals, debt payoff, retirement, scenarios and recommendations.
"""
import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException

from app.analytics import FinancialPlanner
from app.core.errors import InvalidArgument
from app.models.requests import (
    DebtPayoffRequest,
    GoalProgressRequest,
    GoalUpdateRequest,
    RecommendationRequest,
    ScenarioRequest,
)
from app.models.retirement import RetirementParams

router = APIRouter()
logger = logging.getLogger(__name__)
planner = FinancialPlanner()


@router.post("/goals/progress")
def goal_progress(body: GoalProgressRequest) -> Dict:
    try:
        progress = planner.goal_progress(body.goal, body.as_of)
    except InvalidArgument as e:
        logger.error(f"Invalid goal: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return progress.to_dict()


@router.post("/goals/update")
def update_goal(body: GoalUpdateRequest) -> Dict:
    """
    Apply a contribution (negative for a withdrawal) and return the updated goal.
    Nothing is persisted; the caller stores the returned record.
    """
    goal = planner.update_goal(body.goal, body.amount)
    return goal.model_dump(mode="json")


@router.post("/debt-payoff")
def debt_payoff(body: DebtPayoffRequest) -> Dict:
    try:
        plan = planner.debt_payoff(body.debts, body.strategy, body.extra_payment)
    except InvalidArgument as e:
        logger.error(f"Invalid debt payoff request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return plan.to_dict()


@router.post("/debt-payoff/compare")
def compare_debt_strategies(body: DebtPayoffRequest) -> Dict:
    try:
        comparison = planner.compare_debt_strategies(body.debts, body.extra_payment)
    except InvalidArgument as e:
        logger.error(f"Invalid debt comparison request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return comparison.to_dict()


@router.post("/retirement")
def retirement_projection(body: RetirementParams) -> Dict:
    try:
        plan = planner.retirement(body)
    except InvalidArgument as e:
        logger.error(f"Invalid retirement parameters: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return plan.to_dict()


@router.post("/scenarios")
def scenarios(body: ScenarioRequest) -> List[Dict]:
    """
    Annualise the last lookback window of transactions and project it under
    optimistic, realistic and pessimistic assumptions.
    """
    try:
        snapshot = planner.financial_snapshot(body.transactions, categories=body.categories, as_of=body.as_of)
        results = planner.scenarios_for(snapshot, body.time_horizon, body.net_worth, body.goal_amount)
    except InvalidArgument as e:
        logger.error(f"Invalid scenario request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return [scenario.to_dict() for scenario in results]


@router.post("/recommendations")
def recommendations(body: RecommendationRequest) -> List[Dict]:
    try:
        snapshot = planner.financial_snapshot(body.transactions, body.budgets, body.categories, body.as_of)
        results = planner.recommendations_for(snapshot, body.goals, body.debts, body.retirement, body.as_of)
    except InvalidArgument as e:
        logger.error(f"Invalid recommendation request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return [recommendation.to_dict() for recommendation in results]
