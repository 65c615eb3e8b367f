"""
Analytics Router
Spending, spending patterns, category performance, cash flow, budget
variance and period comparison over the transactions supplied in the
request body.
"""
import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException

from app.analytics import FinancialPlanner
from app.core.errors import InvalidArgument, NotFound
from app.models.requests import BudgetVarianceRequest, CashFlowRequest, ComparisonRequest, SpendingRequest

router = APIRouter()
logger = logging.getLogger(__name__)
planner = FinancialPlanner()


@router.post("/spending")
def spending_analysis(body: SpendingRequest) -> Dict:
    try:
        analysis = planner.spending(body.transactions, body.query, body.categories)
    except InvalidArgument as e:
        logger.error(f"Invalid spending request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return analysis.to_dict()


@router.post("/insights")
def spending_insights(body: SpendingRequest) -> Dict:
    """
    Spending patterns (busiest and quietest days and months, transaction
    extremes) together with the per-category performance rating.
    """
    try:
        analysis = planner.spending(body.transactions, body.query, body.categories)
    except InvalidArgument as e:
        logger.error(f"Invalid insights request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return {
        "spending_patterns": planner.patterns(analysis).to_dict(),
        "category_performance": [cat.to_dict() for cat in planner.category_performance(analysis)],
    }


@router.post("/category-performance")
def category_performance_rating(body: SpendingRequest) -> List[Dict]:
    try:
        analysis = planner.spending(body.transactions, body.query, body.categories)
    except InvalidArgument as e:
        logger.error(f"Invalid category performance request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return [cat.to_dict() for cat in planner.category_performance(analysis)]


@router.post("/comparison")
def period_comparison(body: ComparisonRequest) -> Dict:
    """
    Compare spending in the `current` window against the `previous` one.
    """
    try:
        current = planner.spending(body.transactions, body.current, body.categories)
        previous = planner.spending(body.transactions, body.previous, body.categories)
    except InvalidArgument as e:
        logger.error(f"Invalid comparison request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return {
        "current": current.to_dict(),
        "previous": previous.to_dict(),
        "comparison": planner.compare(current, previous).to_dict(),
    }


@router.post("/cash-flow")
def cash_flow_analysis(body: CashFlowRequest) -> Dict:
    try:
        analysis = planner.cash_flow(
            body.transactions,
            body.start_date,
            body.end_date,
            group_by=body.group_by,
            opening_balance=body.opening_balance,
            categories=body.categories,
        )
    except InvalidArgument as e:
        logger.error(f"Invalid cash flow request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return analysis.to_dict()


@router.post("/budgets/{budget_id}/variance")
def budget_variance(budget_id: str, body: BudgetVarianceRequest) -> Dict:
    try:
        variance = FinancialPlanner(alert_threshold=body.alert_threshold).budget_variance(
            budget_id, body.budgets, body.transactions, body.start_date, body.end_date, body.categories
        )
    except NotFound as e:
        logger.error(f"Budget {budget_id} not found")
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidArgument as e:
        logger.error(f"Invalid budget variance request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    return variance.to_dict()
