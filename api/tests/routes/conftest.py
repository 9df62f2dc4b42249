"""Route test configuration: disable the rate limiter, seed data through the API."""

from itertools import count
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from tests.payloads import event_body


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Disable slowapi rate limiting so route handlers can be called directly."""
    with patch("core.ratelimit.limiter.enabled", False):
        yield


class EwmApi:
    """Creates users, categories and events via the public HTTP surface."""

    _seq = count(1)

    def __init__(self, client: AsyncClient):
        self.client = client

    async def user(self, name: str = "Test User") -> dict:
        n = next(self._seq)
        response = await self.client.post(
            "/admin/users", json={"name": name, "email": f"user{n}@example.com"}
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def category(self) -> dict:
        n = next(self._seq)
        response = await self.client.post(
            "/admin/categories", json={"name": f"category-{n}"}
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def event(self, user_id: int, category_id: int, **overrides) -> dict:
        response = await self.client.post(
            f"/users/{user_id}/events", json=event_body(category_id, **overrides)
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def publish(self, event_id: int) -> dict:
        response = await self.client.patch(
            f"/admin/events/{event_id}", json={"stateAction": "PUBLISH_EVENT"}
        )
        assert response.status_code == 200, response.text
        return response.json()

    async def published_event(self, **overrides) -> tuple[dict, dict]:
        """Returns (initiator, published event)."""
        initiator = await self.user()
        category = await self.category()
        event = await self.event(initiator["id"], category["id"], **overrides)
        return initiator, await self.publish(event["id"])


@pytest.fixture
def ewm(client: AsyncClient) -> EwmApi:
    return EwmApi(client)
