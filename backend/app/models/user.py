"""
EstateHub Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.

Table Design:
    - email is unique and is the key every user-facing endpoint works with
    - booked_visits / fav_residencies_id are embedded JSON arrays (JSONB on
      PostgreSQL); they reference residency ids by value, without a foreign key
    - version_id is the optimistic-lock stamp: every UPDATE is issued as
      `... WHERE id = :id AND version_id = :seen`, so a concurrent writer makes
      the flush raise StaleDataError instead of silently losing an update

Mutating the JSON arrays:
    Plain JSON columns do not track in-place mutation. Services always assign
    a new list (`user.booked_visits = [*user.booked_visits, visit]`), which
    marks the attribute dirty and bumps version_id on flush.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Integer, String, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# JSON everywhere, JSONB on PostgreSQL
JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Unique login/contact email; external key for all user endpoints",
    )

    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # [{"id": "<residency id>", "date": "<visit date>"}, ...] in booking order
    booked_visits: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )

    # ["<residency id>", ...] in the order they were favorited
    fav_residencies_id: Mapped[List[str]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )

    version_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("1"),
    )

    residencies: Mapped[List["Residency"]] = relationship(  # noqa: F821
        back_populates="owner",
        lazy="raise",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def has_booking(self, residency_id: str) -> bool:
        return any(visit.get("id") == residency_id for visit in self.booked_visits)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
