from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.models.base import Identifier, Money, Record, WindowEnd


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class CategoryAllocation(Record):
    category_id: Identifier
    allocated_amount: Money = Field(ge=0)
    is_flexible: bool = False
    priority: int = 1


class BudgetRecord(Record):
    id: Identifier
    name: str = ""
    total_amount: Money = Field(ge=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: datetime
    end_date: WindowEnd
    category_allocations: List[CategoryAllocation] = Field(default_factory=list)
    alert_threshold: Optional[Decimal] = Field(default=None, ge=0)
