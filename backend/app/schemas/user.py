"""
EstateHub Backend — User Schemas
==================================

What:  Request/response models for registration, bookings and favorites.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from app.schemas.common import APIModel, EmailRequest


class UserRegister(APIModel):
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=255)
    image: Optional[str] = Field(default=None, max_length=1024)


class BookVisitRequest(EmailRequest):
    date: str = Field(min_length=1, max_length=64, description="Visit date as sent by the client")


class BookedVisit(APIModel):
    id: str = Field(description="Residency id")
    date: str


class UserResponse(APIModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: str
    image: Optional[str] = None
    booked_visits: List[BookedVisit] = Field(default_factory=list)
    # Explicit alias: the client expects the "ID" suffix upper-cased
    fav_residencies_id: List[str] = Field(default_factory=list, alias="favResidenciesID")


class RegisterResponse(APIModel):
    message: str
    user: Optional[UserResponse] = None


class BookingsResponse(APIModel):
    booked_visits: List[BookedVisit]


class FavoritesResponse(APIModel):
    fav_residencies_id: List[str] = Field(alias="favResidenciesID")


class FavoriteToggleResponse(APIModel):
    message: str
    action: Literal["added", "removed"]
    user: UserResponse
