from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from app.schemas.base import CamelModel


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: str = Field(min_length=1, max_length=255)


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class Profile(CamelModel):
    id: int
    email: str
    full_name: str
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    interests: list[str] = []
    created_at: datetime

    @field_validator("interests", mode="before")
    @classmethod
    def default_interests(cls, v):
        return v or []


class ProfileUpdate(CamelModel):
    """Full replacement of the editable profile fields."""
    full_name: str = Field(min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    website: HttpUrl | Literal[""] | None = None
    interests: list[Annotated[str, Field(max_length=50)]] = Field(default_factory=list, max_length=20)


class ProfileResponse(CamelModel):
    user: Profile


class ProfileUpdateResponse(CamelModel):
    message: str = "Profile updated successfully"
    user: Profile
