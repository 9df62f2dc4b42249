"""Factory Boy factories for generating test data.

Factories provide a clean way to create test objects with sensible defaults.
Override specific fields as needed in tests.

Usage:
    # Create a user
    user = UserFactory.build()  # In-memory only
    user = await create_async(UserFactory, db_session)  # Persisted

    # Events need their category and initiator objects
    event = await create_async(
        PublishedEventFactory, db_session, category=category, initiator=user
    )
"""

from datetime import timedelta

import factory
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from core.formats import utcnow
from models import (
    Category,
    Comment,
    Event,
    EventState,
    ParticipationRequest,
    RequestStatus,
    User,
)

fake = Faker()


# =============================================================================
# Async Factory Helpers
# =============================================================================


async def create_async(
    factory_class: type[factory.Factory], db: AsyncSession, **kwargs
):
    """Create an instance using a factory and persist to database.

    Usage:
        user = await create_async(UserFactory, db_session, email="test@example.com")
    """
    instance = factory_class.build(**kwargs)
    db.add(instance)
    await db.flush()
    await db.refresh(instance)
    return instance


async def create_batch_async(
    factory_class: type[factory.Factory], db: AsyncSession, size: int, **kwargs
):
    """Create multiple instances and persist to database."""
    instances = factory_class.build_batch(size, **kwargs)
    for instance in instances:
        db.add(instance)
    await db.flush()
    for instance in instances:
        await db.refresh(instance)
    return instances


# =============================================================================
# Users and categories
# =============================================================================


class UserFactory(factory.Factory):
    """Factory for creating User instances."""

    class Meta:
        model = User

    # Let DB assign autoincrement ID
    name = factory.LazyAttribute(lambda _: fake.name())
    email = factory.Sequence(lambda n: f"user{n}_{fake.user_name()}@example.com")


class CategoryFactory(factory.Factory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"category-{n}")


# =============================================================================
# Events
# =============================================================================


class EventFactory(factory.Factory):
    """Factory for PENDING events. Pass ``category`` and ``initiator``."""

    class Meta:
        model = Event

    annotation = factory.LazyAttribute(lambda _: fake.text(max_nb_chars=200).ljust(20))
    description = factory.LazyAttribute(
        lambda _: fake.text(max_nb_chars=1000).ljust(20)
    )
    title = factory.LazyAttribute(lambda _: fake.sentence(nb_words=4)[:120])
    lat = factory.LazyAttribute(lambda _: float(fake.latitude()))
    lon = factory.LazyAttribute(lambda _: float(fake.longitude()))
    paid = False
    participant_limit = 0
    request_moderation = True
    state = EventState.PENDING
    event_date = factory.LazyFunction(lambda: utcnow() + timedelta(days=3))
    created_on = factory.LazyFunction(utcnow)
    published_on = None


class PublishedEventFactory(EventFactory):
    state = EventState.PUBLISHED
    published_on = factory.LazyFunction(utcnow)


class CanceledEventFactory(EventFactory):
    state = EventState.CANCELED


# =============================================================================
# Requests and comments
# =============================================================================


class ParticipationRequestFactory(factory.Factory):
    """Pass ``event_id`` and ``requester_id``."""

    class Meta:
        model = ParticipationRequest

    status = RequestStatus.PENDING
    created = factory.LazyFunction(utcnow)


class CommentFactory(factory.Factory):
    """Pass ``event_id`` and ``author``."""

    class Meta:
        model = Comment

    text = factory.LazyAttribute(lambda _: fake.sentence(nb_words=12))
    created = factory.LazyFunction(utcnow)
    updated = None
