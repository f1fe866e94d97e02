"""
EstateHub Backend — User Service (registration, bookings, favorites)
======================================================================

What:  Business rules for users and their embedded booking/favorite lists.
Who:   Called by the /user route handlers.

Write protocol for bookings and favorites:
    ┌──────────┐    ┌───────────────┐    ┌────────────────────────────┐
    │  SELECT  │───▶│ check + build │───▶│ UPDATE ... WHERE id = :id  │
    │   user   │    │   new list    │    │   AND version_id = :seen   │
    └──────────┘    └───────────────┘    └────────────────────────────┘
         ▲                                          │ 0 rows matched
         └──────── rollback, back off, retry ◀──────┘ (StaleDataError)

    The version column on User turns every flush into a compare-and-swap, so
    two requests racing on the same user cannot both pass the duplicate check
    or overwrite each other's list. Retries use tenacity with exponential
    backoff and jitter; when they run out the caller gets ConcurrentUpdateError.

Registration relies on the unique index on users.email: a concurrent insert
of the same email fails with IntegrityError and is reported as "already
registered" rather than as an error.
"""

import logging
from typing import Callable, List, Optional, Tuple, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from app.config import settings
from app.exceptions import (
    ConcurrentUpdateError,
    DatabaseError,
    DuplicateBookingError,
    NotFoundError,
)
from app.models.user import User
from app.schemas.user import UserRegister

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UserService:
    """Stateless; receives the request's session on every call."""

    # ── Helpers ───────────────────────────────────────────────────────────

    def _conflict_retrying(self) -> AsyncRetrying:
        # Built per call so tests and runtime config changes take effect
        return AsyncRetrying(
            retry=retry_if_exception_type(StaleDataError),
            stop=stop_after_attempt(settings.conflict_retry_attempts),
            wait=wait_exponential(
                multiplier=settings.conflict_retry_min_wait,
                max=settings.conflict_retry_max_wait,
            )
            + wait_random(0, settings.conflict_retry_min_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _find_user(self, db: AsyncSession, email: str) -> Optional[User]:
        return await db.scalar(select(User).where(User.email == email))

    async def _get_user(self, db: AsyncSession, email: str) -> User:
        user = await self._find_user(db, email)
        if user is None:
            raise NotFoundError(resource="user", resource_id=email)
        return user

    async def _mutate_user(
        self,
        db: AsyncSession,
        email: str,
        mutate: Callable[[User], T],
        operation: str,
    ) -> Tuple[User, T]:
        """
        Load the user, apply `mutate`, and flush under the optimistic lock.

        `mutate` may raise an application error (duplicate, not found) to abort
        without writing; such errors are not retried. Only a lost version race
        (StaleDataError) is retried, each time from a fresh read.

        Raises:
            NotFoundError: No user with this email.
            ConcurrentUpdateError: Version conflicts on every attempt.
            DatabaseError: Any other datastore failure.
        """
        try:
            async for attempt in self._conflict_retrying():
                with attempt:
                    user = await self._get_user(db, email)
                    outcome = mutate(user)
                    try:
                        await db.flush()
                    except StaleDataError:
                        # The session cannot be used again until rolled back;
                        # rollback also expires `user` so the next read is fresh
                        await db.rollback()
                        raise
        except StaleDataError as e:
            logger.warning("Giving up on %s for %s after repeated version conflicts", operation, email)
            raise ConcurrentUpdateError(
                attempts=settings.conflict_retry_attempts,
                context={"operation": operation},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error during %s for %s: %s", operation, email, str(e), exc_info=True)
            raise DatabaseError(message=str(e), context={"operation": operation}) from e

        return user, outcome

    # ── Registration ──────────────────────────────────────────────────────

    async def register_user(self, db: AsyncSession, data: UserRegister) -> Tuple[User, bool]:
        """
        Create the user unless the email is already registered.

        Returns:
            (user, created): `created` is False when the email existed, in
            which case `user` is the stored record and nothing was written.
        """
        try:
            existing = await self._find_user(db, data.email)
            if existing is not None:
                logger.info("Registration skipped, %s already registered", data.email)
                return existing, False

            user = User(
                email=data.email,
                name=data.name,
                image=data.image,
                booked_visits=[],
                fav_residencies_id=[],
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                # Lost the race against a concurrent registration of the same email
                await db.rollback()
                logger.info("Concurrent registration of %s detected", data.email)
                return await self._get_user(db, data.email), False
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", data.email, str(e), exc_info=True)
            raise DatabaseError(message=str(e), context={"operation": "register_user"}) from e

        logger.info("User %s registered (%s)", user.id, user.email)
        return user, True

    # ── Bookings ──────────────────────────────────────────────────────────

    async def book_visit(self, db: AsyncSession, email: str, residency_id: str, date: str) -> User:
        """
        Append {id, date} to the user's bookings.

        Raises:
            DuplicateBookingError: The user already booked this residency.
        """

        def add_visit(user: User) -> None:
            if user.has_booking(residency_id):
                raise DuplicateBookingError(residency_id=residency_id, context={"email": email})
            user.booked_visits = [*user.booked_visits, {"id": residency_id, "date": date}]

        user, _ = await self._mutate_user(db, email, add_visit, "book_visit")
        logger.info("%s booked a visit to %s on %s", email, residency_id, date)
        return user

    async def cancel_booking(self, db: AsyncSession, email: str, residency_id: str) -> User:
        """
        Remove the first booking for `residency_id`.

        Raises:
            NotFoundError: The user has no booking for this residency.
        """

        def remove_visit(user: User) -> None:
            visits = list(user.booked_visits)
            for index, visit in enumerate(visits):
                if visit.get("id") == residency_id:
                    del visits[index]
                    break
            else:
                raise NotFoundError(
                    resource="booking",
                    resource_id=residency_id,
                    message="Booking not found",
                )
            user.booked_visits = visits

        user, _ = await self._mutate_user(db, email, remove_visit, "cancel_booking")
        logger.info("%s cancelled the booking for %s", email, residency_id)
        return user

    async def list_bookings(self, db: AsyncSession, email: str) -> List[dict]:
        try:
            user = await self._get_user(db, email)
        except SQLAlchemyError as e:
            raise DatabaseError(message=str(e), context={"operation": "list_bookings"}) from e
        return list(user.booked_visits)

    # ── Favorites ─────────────────────────────────────────────────────────

    async def toggle_favorite(self, db: AsyncSession, email: str, residency_id: str) -> Tuple[User, str]:
        """
        Add `residency_id` to favorites, or remove it if already present.

        Returns:
            (user, action) where action is "added" or "removed".
        """

        def toggle(user: User) -> str:
            if residency_id in user.fav_residencies_id:
                user.fav_residencies_id = [rid for rid in user.fav_residencies_id if rid != residency_id]
                return "removed"
            user.fav_residencies_id = [*user.fav_residencies_id, residency_id]
            return "added"

        user, action = await self._mutate_user(db, email, toggle, "toggle_favorite")
        logger.info("%s %s favorite %s", email, action, residency_id)
        return user, action

    async def list_favorites(self, db: AsyncSession, email: str) -> List[str]:
        try:
            user = await self._get_user(db, email)
        except SQLAlchemyError as e:
            raise DatabaseError(message=str(e), context={"operation": "list_favorites"}) from e
        return list(user.fav_residencies_id)


user_service = UserService()
