"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Union, Literal
from datetime import datetime
from decimal import Decimal


class CustomSplitItem(BaseModel):
    """An explicit amount charged to one participant for a named item."""
    user_id: int
    label: str
    amount: Decimal


class AdditionalFee(BaseModel):
    """Fee (tax, service, tip...) spread across all participants."""
    label: str
    amount: Decimal


class EqualSplit(BaseModel):
    """Amount divided evenly among participants."""
    split_type: Literal["equal"] = "equal"

    class Config:
        extra = "forbid"


class CustomSplit(BaseModel):
    """Per-participant item amounts plus shared fees."""
    split_type: Literal["custom"] = "custom"
    splits: List[CustomSplitItem]
    fees: List[AdditionalFee] = []

    class Config:
        extra = "forbid"


SplitMode = Union[EqualSplit, CustomSplit]


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    name: str
    description: Optional[str] = None
    amount: Decimal
    payer_id: int
    participant_ids: List[int]  # User IDs who share this expense, in display order
    split: SplitMode = Field(default_factory=EqualSplit, discriminator="split_type")


class ExpenseDetailResponse(BaseModel):
    """Schema for a normalized split line."""
    id: int
    expense_id: int
    user_id: int
    user_name: str
    owed: Decimal
    item: str
    is_paid: bool
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    trip_id: int
    name: str
    description: Optional[str] = None
    amount: Decimal
    payer_id: int
    payer_name: str
    split_type: str
    additional_fees: List[AdditionalFee] = []
    participant_ids: List[int] = []
    created_by: int
    created_at: datetime
    updated_at: datetime


class ExpenseReportResponse(ExpenseResponse):
    """Schema for expense with its split lines."""
    details: List[ExpenseDetailResponse] = []
