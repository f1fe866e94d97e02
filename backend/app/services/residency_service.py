"""
EstateHub Backend — Residency Service
=======================================

What:  Create, list and fetch property listings.
Who:   Called by the /residency route handlers.

Error mapping:
    owner email unknown            → NotFoundError (404)
    (address, owner) already taken → UniquenessViolationError (409)
    any other SQLAlchemyError      → DatabaseError (500, driver message kept)
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, UniquenessViolationError
from app.models.residency import Residency
from app.models.user import User
from app.schemas.residency import ResidencyCreate

logger = logging.getLogger(__name__)

ADDRESS_CONSTRAINT = "uq_residencies_address_user_email"


def _is_address_conflict(exc: IntegrityError) -> bool:
    # PostgreSQL names the constraint; SQLite lists the columns instead
    detail = str(exc.orig)
    return ADDRESS_CONSTRAINT in detail or "residencies.address, residencies.user_email" in detail


class ResidencyService:
    """Stateless; receives the request's session on every call."""

    async def create_residency(self, db: AsyncSession, data: ResidencyCreate) -> Residency:
        """
        Persist a new listing owned by `data.user_email`.

        The owner lookup gives a clear 404 for unknown emails; the foreign key
        on residencies.user_email still guards the write itself. Uniqueness of
        (address, user_email) is left to the database constraint so two
        concurrent creates cannot both succeed.

        Raises:
            NotFoundError: No user has the owner email.
            UniquenessViolationError: Same address already listed by this owner.
            DatabaseError: Any other write failure.
        """
        try:
            owner = await db.scalar(select(User.id).where(User.email == data.user_email))
            if owner is None:
                raise NotFoundError(resource="user", resource_id=data.user_email)

            residency = Residency(
                title=data.title,
                description=data.description,
                price=data.price,
                address=data.address,
                city=data.city,
                country=data.country,
                image=data.image,
                facilities=data.facilities,
                user_email=data.user_email,
            )
            db.add(residency)
            await db.flush()
        except IntegrityError as e:
            if not _is_address_conflict(e):
                logger.error("Integrity error creating residency: %s", str(e), exc_info=True)
                raise DatabaseError(message=str(e), context={"operation": "create_residency"}) from e
            logger.info(
                "Duplicate residency rejected: address=%r owner=%s", data.address, data.user_email
            )
            raise UniquenessViolationError(
                message="A residency with this address already exists",
                context={"address": data.address, "user_email": data.user_email},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating residency: %s", str(e), exc_info=True)
            raise DatabaseError(message=str(e), context={"operation": "create_residency"}) from e

        logger.info("Residency %s created by %s", residency.id, residency.user_email)
        return residency

    async def list_residencies(self, db: AsyncSession) -> List[Residency]:
        """All listings, newest first. An empty table yields an empty list."""
        try:
            result = await db.execute(select(Residency).order_by(desc(Residency.created_at)))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing residencies: %s", str(e), exc_info=True)
            raise DatabaseError(message=str(e), context={"operation": "list_residencies"}) from e

    async def get_residency(self, db: AsyncSession, residency_id: UUID) -> Residency:
        """
        Fetch one listing by id.

        Raises:
            NotFoundError: No listing has this id (404, never an empty body).
        """
        try:
            residency = await db.get(Residency, residency_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching residency %s: %s", residency_id, str(e))
            raise DatabaseError(message=str(e), context={"residency_id": str(residency_id)}) from e

        if residency is None:
            raise NotFoundError(resource="residency", resource_id=str(residency_id))
        return residency


residency_service = ResidencyService()
