from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.base import WindowEnd
from app.models.budget import BudgetRecord
from app.models.debt import DebtRecord
from app.models.goal import GoalRecord
from app.models.query import SpendingQuery
from app.models.retirement import RetirementParams
from app.models.transaction import CategoryRecord, TransactionRecord


class TransactionsBody(BaseModel):
    transactions: List[TransactionRecord] = Field(default_factory=list)
    categories: List[CategoryRecord] = Field(default_factory=list)


class SpendingRequest(TransactionsBody):
    query: SpendingQuery


class ComparisonRequest(TransactionsBody):
    current: SpendingQuery
    previous: SpendingQuery


class CashFlowRequest(TransactionsBody):
    start_date: datetime
    end_date: WindowEnd
    group_by: str = "month"
    opening_balance: Decimal = Decimal("0")


class BudgetVarianceRequest(TransactionsBody):
    budgets: List[BudgetRecord] = Field(default_factory=list)
    start_date: datetime
    end_date: WindowEnd
    alert_threshold: Optional[Decimal] = Field(default=None, ge=0)


class GoalProgressRequest(BaseModel):
    goal: GoalRecord
    as_of: Optional[date] = None


class GoalUpdateRequest(BaseModel):
    goal: GoalRecord
    amount: Decimal


class DebtPayoffRequest(BaseModel):
    # an empty list is rejected by the planner with a 400, not here
    debts: List[DebtRecord] = Field(default_factory=list)
    strategy: str = "avalanche"
    extra_payment: Decimal = Decimal("0")


class ScenarioRequest(TransactionsBody):
    as_of: Optional[datetime] = None
    time_horizon: int = 10
    net_worth: Decimal = Decimal("0")
    goal_amount: Optional[Decimal] = Field(default=None, gt=0)


class RecommendationRequest(TransactionsBody):
    budgets: List[BudgetRecord] = Field(default_factory=list)
    goals: List[GoalRecord] = Field(default_factory=list)
    debts: List[DebtRecord] = Field(default_factory=list)
    retirement: Optional[RetirementParams] = None
    as_of: Optional[datetime] = None
