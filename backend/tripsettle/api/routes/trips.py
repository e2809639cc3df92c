"""
Trip management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from tripsettle.db.session import get_db
from tripsettle.core.exceptions import AuthorizationError, TripStateError
from tripsettle.models.user import User
from tripsettle.models.trip import Trip, TripParticipant
from tripsettle.schemas.trip import (
    TripCreate, TripResponse, TripDetailResponse,
    ParticipantInvite, TripParticipantResponse, ArchiveRequest
)
from tripsettle.services.expense_service import has_ledger_entries
from tripsettle.api.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def check_trip_access(trip_id: int, user_id: int, db: Session) -> Trip:
    """Check if user has access to trip."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )

    participant = db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id,
        TripParticipant.user_id == user_id
    ).first()

    if not participant:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this trip"
        )

    return trip


def check_trip_creator(trip: Trip, user_id: int):
    """Participant management and trip state changes are creator-only."""
    if trip.created_by != user_id:
        raise AuthorizationError("Only the trip creator can do this")


def participant_responses(trip: Trip) -> List[TripParticipantResponse]:
    return [
        TripParticipantResponse(
            id=p.user.id,
            username=p.user.username,
            name=p.user.name,
            is_creator=p.is_creator,
            joined_at=p.created_at
        )
        for p in trip.participants
    ]


def trip_detail(trip: Trip) -> TripDetailResponse:
    return TripDetailResponse(
        **TripResponse.model_validate(trip).model_dump(),
        participants=participant_responses(trip)
    )


@router.post("", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip with the creator as first participant."""
    new_trip = Trip(
        title=trip_data.title,
        destination=trip_data.destination,
        description=trip_data.description,
        created_by=current_user.id
    )
    db.add(new_trip)
    db.flush()

    db.add(TripParticipant(
        trip_id=new_trip.id,
        user_id=current_user.id,
        is_creator=True
    ))
    db.commit()
    db.refresh(new_trip)

    logger.info(f"User {current_user.id} created trip {new_trip.id}")
    return trip_detail(new_trip)


@router.get("", response_model=List[TripResponse])
async def list_trips(
    include_archived: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List trips the current user takes part in, newest first."""
    query = db.query(Trip).join(TripParticipant).filter(
        TripParticipant.user_id == current_user.id
    )
    if not include_archived:
        query = query.filter(Trip.is_archive.is_(False))
    return query.order_by(Trip.created_at.desc(), Trip.id.desc()).all()


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip details."""
    trip = check_trip_access(trip_id, current_user.id, db)
    return trip_detail(trip)


@router.get("/{trip_id}/participants", response_model=List[TripParticipantResponse])
async def get_participants(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the trip roster in join order."""
    trip = check_trip_access(trip_id, current_user.id, db)
    return participant_responses(trip)


@router.post("/{trip_id}/participants", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_participant(
    trip_id: int,
    invite: ParticipantInvite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a participant to the trip."""
    trip = check_trip_access(trip_id, current_user.id, db)
    check_trip_creator(trip, current_user.id)

    user = db.query(User).filter(User.username == invite.username).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if user.id in trip.participant_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a participant"
        )

    db.add(TripParticipant(
        trip_id=trip_id,
        user_id=user.id,
        is_creator=False
    ))
    db.commit()
    db.refresh(trip)

    logger.info(f"User {user.id} added to trip {trip_id}")
    return trip_detail(trip)


@router.delete("/{trip_id}/participants/{username}")
async def remove_participant(
    trip_id: int,
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant from the trip."""
    trip = check_trip_access(trip_id, current_user.id, db)
    check_trip_creator(trip, current_user.id)

    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    participant = db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id,
        TripParticipant.user_id == user.id
    ).first()

    if not participant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Participant not found"
        )

    if participant.is_creator:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The trip creator cannot be removed"
        )

    if has_ledger_entries(trip_id, user.id, db):
        raise TripStateError(
            "Participant has expenses or payments in this trip and cannot be removed",
            details={"user_id": user.id}
        )

    db.delete(participant)
    db.commit()

    logger.info(f"User {user.id} removed from trip {trip_id}")
    return {"message": "Participant removed successfully"}


@router.post("/{trip_id}/complete", response_model=TripResponse)
async def complete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark the trip complete; no further expenses can be added."""
    trip = check_trip_access(trip_id, current_user.id, db)
    check_trip_creator(trip, current_user.id)

    if not trip.is_complete:
        trip.is_complete = True
        db.commit()
        db.refresh(trip)
        logger.info(f"Trip {trip_id} completed")

    return trip


@router.post("/{trip_id}/archive", response_model=TripResponse)
async def archive_trip(
    trip_id: int,
    request: ArchiveRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Archive or restore a trip."""
    trip = check_trip_access(trip_id, current_user.id, db)
    check_trip_creator(trip, current_user.id)

    trip.is_archive = request.archived
    db.commit()
    db.refresh(trip)
    return trip
