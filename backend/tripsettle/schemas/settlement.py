"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class BalanceResponse(BaseModel):
    """Schema for a member's position in a trip."""
    user_id: int
    name: str
    paid: Decimal  # Total paid for expenses
    owed: Decimal  # Total share of expenses
    net: Decimal  # paid - owed; positive = is owed money
    outstanding: Decimal  # net after recorded settlement payments


class TransactionResponse(BaseModel):
    """Schema for a single transfer in settlement."""
    from_user_id: int
    from_name: str
    to_user_id: int
    to_name: str
    amount: Decimal
    is_paid: bool = False
    paid_at: Optional[datetime] = None


class SettlementResponse(BaseModel):
    """Schema for settlement response."""
    trip_id: int
    currency: str
    total_expenses: Decimal
    balances: List[BalanceResponse]
    transactions: List[TransactionResponse]


class MarkPaidRequest(BaseModel):
    """Schema for marking a settlement transaction paid."""
    from_user_id: int
    to_user_id: int
    amount: Decimal


class MarkPaidResponse(BaseModel):
    """Schema for mark-paid result."""
    message: str
    created: bool
    transaction: TransactionResponse
