"""
EstateHub Backend — Residency SQLAlchemy Model
================================================

What:  ORM model for the `residencies` table (property listings).

Table Design:
    - user_email references users.email (not users.id): listings are owned by
      the email the client sends, mirroring how every user endpoint is keyed
    - (address, user_email) is unique: one owner cannot list the same
      address twice; different owners can
    - facilities is an opaque JSON blob owned by the frontend
    - created_at DESC index backs GET /residency/allresd
    - updated_at is refreshed by SQLAlchemy on every UPDATE
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import JSONType, User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Residency(Base):
    __tablename__ = "residencies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    facilities: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )

    user_email: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.email"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    owner: Mapped[User] = relationship(back_populates="residencies", lazy="raise")

    __table_args__ = (
        UniqueConstraint("address", "user_email", name="uq_residencies_address_user_email"),
        Index("idx_residencies_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Residency(id={self.id}, title='{self.title}', owner='{self.user_email}')>"
