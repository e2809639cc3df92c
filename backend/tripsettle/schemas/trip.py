"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class TripBase(BaseModel):
    """Base trip schema."""
    title: str
    destination: Optional[str] = None
    description: Optional[str] = None


class TripCreate(TripBase):
    """Schema for trip creation."""
    pass


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    created_by: int
    is_complete: bool
    is_archive: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TripParticipantResponse(BaseModel):
    """Schema for trip participant response."""
    id: int
    username: str
    name: str
    is_creator: bool
    joined_at: datetime


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with participants."""
    participants: List[TripParticipantResponse] = []


class ParticipantInvite(BaseModel):
    """Schema for participant invitation."""
    username: str


class ArchiveRequest(BaseModel):
    """Schema for archiving or restoring a trip."""
    archived: bool = True
