from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.models.base import Identifier, Record, WindowEnd
from app.models.transaction import TransactionType


class SpendingQuery(Record):
    """Window and filters for a spending analysis, as sent by the caller."""

    user_id: Optional[Identifier] = None
    start_date: datetime
    end_date: WindowEnd
    group_by: str = "month"
    categories: Optional[List[Identifier]] = None
    transaction_types: Optional[List[TransactionType]] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    include_recurring: bool = True
    include_pending: bool = True
