"""
User profile routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from tripsettle.db.session import get_db
from tripsettle.schemas.user import UserResponse, ProfileResponse, ProfileUpdate, PasswordChange
from tripsettle.models.user import User
from tripsettle.models.trip import Trip, TripParticipant
from tripsettle.core.security import verify_password, get_password_hash
from tripsettle.api.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def build_profile(user: User, db: Session) -> ProfileResponse:
    trips = db.query(Trip).join(TripParticipant).filter(TripParticipant.user_id == user.id).all()
    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        is_active=user.is_active,
        created_at=user.created_at,
        trip_count=len(trips),
        completed_trip_count=sum(1 for t in trips if t.is_complete)
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The signed-in user's profile."""
    return build_profile(current_user, db)


@router.put("/profile/edit", response_model=ProfileResponse)
async def edit_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update display name and email. Usernames are fixed at signup."""
    if update.username is not None and update.username != current_user.username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username cannot be changed"
        )

    if update.email is not None and update.email != current_user.email:
        taken = db.query(User).filter(User.email == update.email, User.id != current_user.id).first()
        if taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already exists"
            )
        current_user.email = update.email

    if update.name is not None:
        current_user.name = update.name.strip() or current_user.name

    db.commit()
    db.refresh(current_user)

    logger.info(f"User {current_user.id} updated profile")
    return build_profile(current_user, db)


@router.put("/change-password")
async def change_password(
    request: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change password after checking the current one."""
    if not verify_password(request.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    if request.new_password == request.current_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password must differ from the current one"
        )

    current_user.hashed_password = get_password_hash(request.new_password)
    db.commit()

    logger.info(f"User {current_user.id} changed password")
    return {"message": "Password changed successfully"}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get user by ID."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user
