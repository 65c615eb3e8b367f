from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.models.base import Record


class RetirementParams(Record):
    current_age: int
    retirement_age: int
    current_savings: Decimal = Field(ge=0)
    monthly_contribution: Decimal = Field(ge=0)
    expected_return: Decimal = Field(ge=0, le=20)  # annual percentage
    inflation_rate: Optional[Decimal] = Field(default=None, ge=0, le=10)
    target_amount: Decimal = Field(gt=0)
