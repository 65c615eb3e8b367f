from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field

from app.models.base import Record


class DebtRecord(Record):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(min_length=1)
    balance: Decimal = Field(gt=0)
    interest_rate: Decimal = Field(ge=0, le=50)  # annual percentage
    minimum_payment: Decimal = Field(gt=0)
    priority: Optional[int] = Field(default=None, ge=1)
