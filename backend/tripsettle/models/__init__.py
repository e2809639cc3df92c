"""Models package - Import all models for SQLAlchemy registration."""
from tripsettle.models.user import User
from tripsettle.models.trip import Trip, TripParticipant
from tripsettle.models.expense import Expense, ExpenseDetail
from tripsettle.models.settlement import SettlementPayment

__all__ = [
    "User",
    "Trip",
    "TripParticipant",
    "Expense",
    "ExpenseDetail",
    "SettlementPayment",
]
