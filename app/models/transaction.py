from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.models.base import Identifier, Money, Record


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TransactionRecord(Record):
    id: Optional[str] = None
    amount: Money = Field(ge=0)
    type: TransactionType
    category_id: Optional[Identifier] = None
    date: datetime
    status: TransactionStatus = TransactionStatus.COMPLETED
    is_recurring: bool = False
    description: Optional[str] = ""


class CategoryRecord(Record):
    id: Identifier
    name: str
    parent_id: Optional[Identifier] = None
    path: List[str] = Field(default_factory=list)
    level: int = Field(default=0, ge=0)

    @property
    def full_path(self) -> str:
        return " > ".join([*self.path, self.name])
