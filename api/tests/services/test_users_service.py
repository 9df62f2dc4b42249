"""Tests for users_service module.

Tests cover:
- require_user found / not found
- create_user email uniqueness
- get_users passes ids and paging through
- delete_user success and not found
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.errors import ConflictError, NotFoundError
from schemas import NewUserRequest
from services.users_service import create_user, delete_user, get_users, require_user


@pytest.mark.unit
class TestRequireUser:
    async def test_returns_user(self):
        mock_db = AsyncMock()
        mock_user = MagicMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo_class.return_value.get_by_id = AsyncMock(return_value=mock_user)

            assert await require_user(mock_db, 7) is mock_user

    async def test_missing_user_raises(self):
        mock_db = AsyncMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo_class.return_value.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError, match="User with id=7"):
                await require_user(mock_db, 7)


@pytest.mark.unit
class TestCreateUser:
    async def test_creates_user(self):
        """New email creates the user (caller commits)."""
        mock_db = AsyncMock()
        created = MagicMock(id=1, email="ann@example.com")
        created.name = "Ann"

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo = mock_repo_class.return_value
            mock_repo.get_by_email = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=created)

            result = await create_user(
                mock_db, NewUserRequest(name="Ann", email="ann@example.com")
            )

            mock_repo.create.assert_awaited_once_with(
                name="Ann", email="ann@example.com"
            )
            mock_db.commit.assert_not_awaited()

        assert result.id == 1
        assert result.name == "Ann"

    async def test_duplicate_email_conflicts(self):
        mock_db = AsyncMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo = mock_repo_class.return_value
            mock_repo.get_by_email = AsyncMock(return_value=MagicMock())
            mock_repo.create = AsyncMock()

            with pytest.raises(ConflictError):
                await create_user(
                    mock_db, NewUserRequest(name="Ann", email="ann@example.com")
                )

            mock_repo.create.assert_not_awaited()


@pytest.mark.unit
class TestGetUsers:
    async def test_passes_filters_through(self):
        mock_db = AsyncMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo = mock_repo_class.return_value
            mock_repo.get_all = AsyncMock(return_value=[])

            assert await get_users(mock_db, [1, 2], 20, 5) == []

            mock_repo.get_all.assert_awaited_once_with([1, 2], offset=20, limit=5)


@pytest.mark.unit
class TestDeleteUser:
    async def test_delete_existing_user(self):
        mock_db = AsyncMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo = mock_repo_class.return_value
            mock_repo.delete = AsyncMock(return_value=True)

            await delete_user(mock_db, 12345)

            mock_repo.delete.assert_awaited_once_with(12345)

    async def test_delete_nonexistent_user_raises(self):
        mock_db = AsyncMock()

        with patch(
            "services.users_service.UserRepository", autospec=True
        ) as mock_repo_class:
            mock_repo_class.return_value.delete = AsyncMock(return_value=False)

            with pytest.raises(NotFoundError):
                await delete_user(mock_db, 12345)
