"""
Trip model for shared expense groups.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class Trip(BaseModel):
    """Trip model representing a group of people sharing costs."""
    __tablename__ = "trips"

    title = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_complete = Column(Boolean, default=False, nullable=False)
    is_archive = Column(Boolean, default=False, nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    participants = relationship(
        "TripParticipant",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripParticipant.id"
    )
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")
    settlement_payments = relationship("SettlementPayment", back_populates="trip", cascade="all, delete-orphan")

    @property
    def participant_ids(self):
        """Roster user ids in the order they joined."""
        return [p.user_id for p in self.participants]


class TripParticipant(BaseModel):
    """Junction table for Trip and User many-to-many relationship."""
    __tablename__ = "trip_participants"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_creator = Column(Boolean, default=False, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="participants")
    user = relationship("User", back_populates="trips")
