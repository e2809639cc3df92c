"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    """Base user schema."""
    username: str
    email: EmailStr


class UserCreate(UserBase):
    """Schema for user creation."""
    password: str
    name: Optional[str] = None  # Display name, defaults to username


class UserResponse(UserBase):
    """Schema for user response."""
    id: int
    name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileResponse(UserResponse):
    """The signed-in user's profile with trip counts."""
    trip_count: int = 0
    completed_trip_count: int = 0


class ProfileUpdate(BaseModel):
    """
    Editable profile fields. `username` may be sent back unchanged by
    clients that submit the whole form, but cannot be changed.
    """
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class PasswordChange(BaseModel):
    """Accepts camelCase keys as sent by the mobile client."""
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=8)

    class Config:
        populate_by_name = True


class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
