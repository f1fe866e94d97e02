"""
EstateHub Backend — Residency Service Tests
=============================================

What we test:
    ✅ Create assigns an id and timestamps
    ✅ Unknown owner email is NotFound
    ✅ Same (address, owner) twice is a UniquenessViolation; the first survives
    ✅ Other integrity failures surface as DatabaseError
    ✅ Same address under a different owner is allowed
    ✅ Listing is newest first; empty table gives an empty list
    ✅ Fetching an unknown id is NotFound
"""

from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from app.exceptions import DatabaseError, NotFoundError, UniquenessViolationError
from app.schemas.residency import ResidencyCreate
from app.schemas.user import UserRegister
from app.services.residency_service import ResidencyService
from app.services.user_service import user_service

from conftest import OWNER_EMAIL


def make_listing(**overrides) -> ResidencyCreate:
    fields = {
        "title": "Sunny loft",
        "description": "Two bedrooms near the river",
        "price": 1200,
        "address": "12 River Street",
        "city": "Lisbon",
        "country": "Portugal",
        "image": "https://img.example.com/loft.jpg",
        "facilities": {"bedrooms": 2},
        "user_email": OWNER_EMAIL,
    }
    fields.update(overrides)
    return ResidencyCreate(**fields)


class TestCreateResidency:

    def setup_method(self):
        self.service = ResidencyService()

    @pytest.mark.asyncio
    async def test_create_success(self, db_session, registered_user):
        residency = await self.service.create_residency(db_session, make_listing())

        assert residency.id is not None
        assert residency.user_email == OWNER_EMAIL
        assert residency.facilities == {"bedrooms": 2}
        assert residency.created_at is not None
        assert residency.updated_at is not None

    @pytest.mark.asyncio
    async def test_unknown_owner(self, db_session, database):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_residency(db_session, make_listing(user_email="ghost@example.com"))

        assert exc_info.value.context["resource"] == "user"

    @pytest.mark.asyncio
    async def test_duplicate_address_for_same_owner(self, db_session, registered_user):
        first = await self.service.create_residency(db_session, make_listing())
        first_id = first.id
        await db_session.commit()

        with pytest.raises(UniquenessViolationError) as exc_info:
            await self.service.create_residency(db_session, make_listing(title="Same place again"))

        assert exc_info.value.message == "A residency with this address already exists"
        await db_session.rollback()

        fetched = await self.service.get_residency(db_session, first_id)
        assert fetched.title == "Sunny loft"

    @pytest.mark.asyncio
    async def test_other_integrity_errors_are_database_errors(self, db_session, registered_user, monkeypatch):
        async def not_null_failure(*args, **kwargs):
            raise IntegrityError(
                "INSERT INTO residencies ...", {}, Exception("NOT NULL constraint failed: residencies.title")
            )

        monkeypatch.setattr(db_session, "flush", not_null_failure)

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_residency(db_session, make_listing())

        assert "NOT NULL constraint failed" in exc_info.value.message
        assert exc_info.value.context == {"operation": "create_residency"}

    @pytest.mark.asyncio
    async def test_same_address_different_owner(self, db_session, registered_user):
        await user_service.register_user(db_session, UserRegister(email="second@example.com"))
        await self.service.create_residency(db_session, make_listing())

        other = await self.service.create_residency(
            db_session, make_listing(user_email="second@example.com")
        )

        assert other.user_email == "second@example.com"


class TestReadResidencies:

    def setup_method(self):
        self.service = ResidencyService()

    @pytest.mark.asyncio
    async def test_list_empty(self, db_session, database):
        assert await self.service.list_residencies(db_session) == []

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session, registered_user):
        created = []
        for n in range(3):
            residency = await self.service.create_residency(
                db_session, make_listing(address=f"{n} Harbour Road")
            )
            await db_session.commit()
            created.append(residency.id)

        listed = await self.service.list_residencies(db_session)

        assert [r.id for r in listed] == list(reversed(created))

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, db_session, database):
        with pytest.raises(NotFoundError):
            await self.service.get_residency(db_session, uuid4())
