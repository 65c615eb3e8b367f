from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from app.models.base import Record


class GoalStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class GoalRecord(Record):
    id: Optional[str] = None
    name: str = ""
    target_amount: Decimal = Field(ge=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: date
    target_date: date
    status: GoalStatus = GoalStatus.NOT_STARTED
    monthly_contribution: Optional[Decimal] = Field(default=None, ge=0)
