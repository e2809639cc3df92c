"""
Expense model for tracking spending.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class Expense(BaseModel):
    """Expense model representing a single payment made for a group."""
    __tablename__ = "expenses"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(18, 4), nullable=False)
    payer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    split_type = Column(String(10), nullable=False, default="equal")  # "equal" or "custom"
    additional_fees = Column(JSON, nullable=True)  # [{"label": ..., "amount": "..."}]
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("User", foreign_keys=[payer_id], back_populates="expenses_paid")
    details = relationship(
        "ExpenseDetail",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseDetail.id"
    )


class ExpenseDetail(BaseModel):
    """Normalized split line: what one participant owes for one expense."""
    __tablename__ = "expense_details"

    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    owed = Column(Numeric(18, 4), nullable=False)
    item = Column(String(255), nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime, nullable=True)

    # Relationships
    expense = relationship("Expense", back_populates="details")
    user = relationship("User", back_populates="expense_details")
