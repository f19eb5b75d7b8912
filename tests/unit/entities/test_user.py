"""Unit tests for the user entity package."""

import pytest
from pydantic import ValidationError

from src.users_api.entities.core.user import User, UserCandidate


class TestUser:
    """Test the User domain entity."""

    def test_user_creation(self):
        user = User(id=1, username="alice", email="alice@example.com")

        assert user.id == 1
        assert user.username == "alice"
        assert user.email == "alice@example.com"

    def test_user_requires_all_fields(self):
        with pytest.raises(ValidationError):
            User(username="alice", email="alice@example.com")

    def test_user_serializes_with_id_first(self):
        user = User(id=7, username="bob", email="bob@example.com")
        assert list(user.model_dump()) == ["id", "username", "email"]

    def test_users_compare_by_value(self):
        assert User(id=1, username="alice", email="a@example.com") == User(
            id=1, username="alice", email="a@example.com"
        )


class TestUserCandidate:
    """Test the write payload model."""

    def test_fields_default_to_none(self):
        candidate = UserCandidate()
        assert candidate.username is None
        assert candidate.email is None

    def test_client_supplied_id_is_ignored(self):
        candidate = UserCandidate.model_validate(
            {"id": 99, "username": "alice", "email": "alice@example.com"}
        )
        assert not hasattr(candidate, "id")
        assert candidate.model_dump() == {
            "username": "alice",
            "email": "alice@example.com",
        }

    def test_non_string_username_is_rejected(self):
        with pytest.raises(ValidationError):
            UserCandidate.model_validate({"username": ["alice"]})
