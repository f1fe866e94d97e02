"""
EstateHub Backend — User Route Handlers
=========================================

What:  Registration, visit bookings and favorites under /user.

All endpoints are POST and identify the acting user by the `email` in the
JSON body; the residency id travels in the path. No authentication is
performed: the email is trusted as sent.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import EmailRequest, ErrorResponse, MessageResponse
from app.schemas.user import (
    BookingsResponse,
    BookVisitRequest,
    FavoritesResponse,
    FavoriteToggleResponse,
    RegisterResponse,
    UserRegister,
    UserResponse,
)
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User"])

_USER_NOT_FOUND = {404: {"description": "No user with this email", "model": ErrorResponse}}
_CONFLICT = {409: {"description": "Concurrent modification, retry", "model": ErrorResponse}}


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={200: {"description": "Email already registered", "model": RegisterResponse}},
    summary="Register a user (idempotent on email)",
)
async def register(
    body: UserRegister,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    user, created = await user_service.register_user(db, body)
    if not created:
        # Nothing was created, so 201 would be misleading
        response.status_code = 200
        return RegisterResponse(message="User already registered")
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/bookVisit/{residency_id}",
    response_model=MessageResponse,
    responses={
        **_USER_NOT_FOUND,
        409: {"description": "Already booked, or concurrent modification", "model": ErrorResponse},
    },
    summary="Book a visit to a residency",
)
async def book_visit(
    residency_id: str,
    body: BookVisitRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.book_visit(db, body.email, residency_id, body.date)
    return MessageResponse(message="Your visit is booked successfully")


@router.post(
    "/allBookings",
    response_model=BookingsResponse,
    responses=_USER_NOT_FOUND,
    summary="List the user's booked visits",
)
async def all_bookings(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db_session),
) -> BookingsResponse:
    visits = await user_service.list_bookings(db, body.email)
    return BookingsResponse(booked_visits=visits)


@router.post(
    "/removeBooking/{residency_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Unknown user or no such booking", "model": ErrorResponse},
        **_CONFLICT,
    },
    summary="Cancel a booked visit",
)
async def remove_booking(
    residency_id: str,
    body: EmailRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.cancel_booking(db, body.email, residency_id)
    return MessageResponse(message="Booking cancelled successfully")


@router.post(
    "/toFav/{rid}",
    response_model=FavoriteToggleResponse,
    responses={**_USER_NOT_FOUND, **_CONFLICT},
    summary="Add or remove a residency from favorites",
)
async def toggle_favorite(
    rid: str,
    body: EmailRequest,
    db: AsyncSession = Depends(get_db_session),
) -> FavoriteToggleResponse:
    user, action = await user_service.toggle_favorite(db, body.email, rid)
    message = "Added to favorites" if action == "added" else "Removed from favorites"
    return FavoriteToggleResponse(
        message=message,
        action=action,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/allFav",
    response_model=FavoritesResponse,
    responses=_USER_NOT_FOUND,
    summary="List the user's favorite residency ids",
)
async def all_favorites(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db_session),
) -> FavoritesResponse:
    favorites = await user_service.list_favorites(db, body.email)
    return FavoritesResponse(fav_residencies_id=favorites)
