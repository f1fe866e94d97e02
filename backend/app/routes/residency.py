"""
EstateHub Backend — Residency Route Handlers
==============================================

What:  POST /residency/create, GET /residency/allresd, GET /residency/{id}.

Route order matters: /allresd is declared before /{residency_id} so it is not
captured as an id.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.residency import (
    ResidencyCreateRequest,
    ResidencyCreateResponse,
    ResidencyResponse,
)
from app.services.residency_service import residency_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/residency", tags=["Residency"])


@router.post(
    "/create",
    status_code=201,
    response_model=ResidencyCreateResponse,
    responses={
        404: {"description": "Owner email is not registered", "model": ErrorResponse},
        409: {"description": "Owner already listed this address", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Create a residency listing",
)
async def create_residency(
    body: ResidencyCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ResidencyCreateResponse:
    residency = await residency_service.create_residency(db, body.data)
    return ResidencyCreateResponse(
        message="Residency created successfully",
        residency=ResidencyResponse.model_validate(residency),
    )


@router.get(
    "/allresd",
    response_model=List[ResidencyResponse],
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="List all residencies, newest first",
)
async def list_residencies(
    db: AsyncSession = Depends(get_db_session),
) -> List[ResidencyResponse]:
    residencies = await residency_service.list_residencies(db)
    return [ResidencyResponse.model_validate(r) for r in residencies]


@router.get(
    "/{residency_id}",
    response_model=ResidencyResponse,
    responses={
        404: {"description": "Residency not found", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Get a single residency by id",
)
async def get_residency(
    residency_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ResidencyResponse:
    """Invalid UUIDs are rejected with 422 by FastAPI before reaching the service."""
    residency = await residency_service.get_residency(db, residency_id)
    return ResidencyResponse.model_validate(residency)
