"""
EstateHub Backend — Residency Schemas
=======================================

What:  Request/response models for the /residency endpoints.

The create endpoint keeps the original client's envelope: listing fields are
posted under a top-level `data` key.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field

from app.schemas.common import APIModel


class ResidencyCreate(APIModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="")
    price: int = Field(ge=0, description="Asking price in whole currency units")
    address: str = Field(min_length=1, max_length=512)
    city: str = Field(min_length=1, max_length=255)
    country: str = Field(min_length=1, max_length=255)
    image: Optional[str] = Field(default=None, max_length=1024)
    facilities: Dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form facilities blob, e.g. {\"bedrooms\": 2, \"parkings\": 1}",
    )
    user_email: EmailStr = Field(description="Owner email")


class ResidencyCreateRequest(APIModel):
    data: ResidencyCreate


class ResidencyResponse(APIModel):
    id: uuid.UUID
    title: str
    description: str
    price: int
    address: str
    city: str
    country: str
    image: Optional[str] = None
    facilities: Dict[str, Any]
    user_email: str
    created_at: datetime
    updated_at: datetime


class ResidencyCreateResponse(APIModel):
    message: str = "Residency created successfully"
    residency: ResidencyResponse
