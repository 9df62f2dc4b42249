"""Tests for RequestRepository."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import RequestStatus
from repositories.request_repository import RequestRepository
from tests.factories import (
    CategoryFactory,
    ParticipationRequestFactory,
    PublishedEventFactory,
    UserFactory,
    create_async,
)


@pytest.fixture
async def event(db_session: AsyncSession):
    owner = await create_async(UserFactory, db_session)
    category = await create_async(CategoryFactory, db_session)
    return await create_async(
        PublishedEventFactory, db_session, category=category, initiator=owner
    )


async def _request(db_session, event, status=RequestStatus.PENDING):
    requester = await create_async(UserFactory, db_session)
    return await create_async(
        ParticipationRequestFactory,
        db_session,
        event_id=event.id,
        requester_id=requester.id,
        status=status,
    )


class TestRequestRepositoryCreate:
    async def test_create_sets_created(self, db_session: AsyncSession, event):
        requester = await create_async(UserFactory, db_session)
        repo = RequestRepository(db_session)

        request = await repo.create(event.id, requester.id, RequestStatus.CONFIRMED)

        assert request.id is not None
        assert request.status == RequestStatus.CONFIRMED
        assert request.created is not None
        assert await repo.exists_for(event.id, requester.id) is True

    async def test_one_request_per_user_and_event(
        self, db_session: AsyncSession, event
    ):
        requester = await create_async(UserFactory, db_session)
        repo = RequestRepository(db_session)
        await repo.create(event.id, requester.id, RequestStatus.PENDING)

        with pytest.raises(IntegrityError):
            await repo.create(event.id, requester.id, RequestStatus.PENDING)


class TestRequestRepositoryQueries:
    async def test_get_by_ids_sorted(self, db_session: AsyncSession, event):
        first = await _request(db_session, event)
        second = await _request(db_session, event)
        repo = RequestRepository(db_session)

        result = await repo.get_by_ids([second.id, first.id, 99999])

        assert [r.id for r in result] == [first.id, second.id]
        assert await repo.get_by_ids([]) == []

    async def test_get_by_requester(self, db_session: AsyncSession, event):
        mine = await _request(db_session, event)
        await _request(db_session, event)
        repo = RequestRepository(db_session)

        result = await repo.get_by_requester(mine.requester_id)

        assert [r.id for r in result] == [mine.id]

    async def test_get_pending_by_event_excludes(self, db_session: AsyncSession, event):
        first = await _request(db_session, event)
        second = await _request(db_session, event)
        await _request(db_session, event, RequestStatus.CONFIRMED)
        repo = RequestRepository(db_session)

        assert [r.id for r in await repo.get_pending_by_event(event.id)] == [
            first.id,
            second.id,
        ]
        remaining = await repo.get_pending_by_event(event.id, {first.id})
        assert [r.id for r in remaining] == [second.id]

    async def test_count_confirmed(self, db_session: AsyncSession, event):
        await _request(db_session, event, RequestStatus.CONFIRMED)
        await _request(db_session, event, RequestStatus.CONFIRMED)
        await _request(db_session, event, RequestStatus.CANCELED)
        repo = RequestRepository(db_session)

        assert await repo.count_confirmed(event.id) == 2


class TestRequestRepositorySetStatus:
    async def test_set_status_updates_all(self, db_session: AsyncSession, event):
        requests = [await _request(db_session, event) for _ in range(3)]
        repo = RequestRepository(db_session)

        await repo.set_status(requests[:2], RequestStatus.REJECTED)

        by_event = await repo.get_by_event(event.id)
        assert [r.status for r in by_event] == [
            RequestStatus.REJECTED,
            RequestStatus.REJECTED,
            RequestStatus.PENDING,
        ]

    async def test_set_status_noop_on_empty(self, db_session: AsyncSession):
        await RequestRepository(db_session).set_status([], RequestStatus.REJECTED)
