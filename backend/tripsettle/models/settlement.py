"""
Settlement payment model: settlement transactions marked as paid.
"""
from sqlalchemy import Column, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class SettlementPayment(BaseModel):
    """A debtor-to-creditor transfer that has been paid."""
    __tablename__ = "settlement_payments"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 4), nullable=False)
    marked_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="settlement_payments")
    from_user = relationship("User", foreign_keys=[from_user_id])
    to_user = relationship("User", foreign_keys=[to_user_id])
