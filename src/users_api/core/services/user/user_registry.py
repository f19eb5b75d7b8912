"""In-memory user registry.

Owns every stored user together with the lookup indexes derived from them
(by id, by username, by email) and the id counter. All public operations run
under a single re-entrant lock, and every check happens before the first
mutation, so each call either applies its full state transition or none of
it.
"""

from __future__ import annotations

import threading

from email_validator import EmailNotValidError, validate_email
from loguru import logger

from src.users_api.core.services.user.errors import (
    UserConflictError,
    UserNotFoundError,
    UserValidationError,
)
from src.users_api.entities.core.user import User, UserCandidate

MIN_USERNAME_LENGTH = 3


def validate_candidate(candidate: UserCandidate) -> list[str]:
    """Return one message per validation rule the candidate violates."""
    errors: list[str] = []

    username = candidate.username
    if not username:
        errors.append("Username is required.")
    elif len(username) < MIN_USERNAME_LENGTH:
        errors.append(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters long."
        )

    email = candidate.email
    if not email:
        errors.append("Email is required.")
    else:
        try:
            validate_email(
                email,
                check_deliverability=False,
                globally_deliverable=False,
                test_environment=True,
            )
        except EmailNotValidError:
            errors.append("Email is not a valid email address.")

    return errors


class UserRegistry:
    """Registry of users with unique usernames and emails."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: list[User] = []
        self._by_id: dict[int, User] = {}
        self._usernames: set[str] = set()
        self._emails: set[str] = set()
        self._next_id = 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def count(self) -> int:
        return len(self)

    def create(self, candidate: UserCandidate) -> User:
        """Validate ``candidate`` and store it under a freshly assigned id.

        Raises:
            UserValidationError: If a field rule is violated.
            UserConflictError: If the username or email is already in use.
        """
        with self._lock:
            username, email = self._validated(candidate)

            if username in self._usernames:
                raise UserConflictError("username", username)
            if email in self._emails:
                raise UserConflictError("email", email)

            user = User(id=self._next_id, username=username, email=email)
            self._next_id += 1

            self._users.append(user)
            self._by_id[user.id] = user
            self._usernames.add(username)
            self._emails.add(email)

            logger.bind(user_id=user.id, username=username).info("user.created")
            return user.model_copy()

    def list_all(self) -> list[User]:
        """Return every stored user in insertion order."""
        with self._lock:
            return [user.model_copy() for user in self._users]

    def get(self, user_id: int) -> User:
        """Return the user stored under ``user_id``.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        with self._lock:
            return self._require(user_id).model_copy()

    def update(self, user_id: int, candidate: UserCandidate) -> User:
        """Replace the username and email of an existing user.

        A user keeping its current username or email never conflicts with
        itself.

        Raises:
            UserNotFoundError: If no such user exists.
            UserValidationError: If a field rule is violated.
            UserConflictError: If the new username or email belongs to
                another user.
        """
        with self._lock:
            user = self._require(user_id)
            username, email = self._validated(candidate)

            username_changed = username != user.username
            email_changed = email != user.email

            if username_changed and username in self._usernames:
                raise UserConflictError("username", username)
            if email_changed and email in self._emails:
                raise UserConflictError("email", email)

            if username_changed:
                self._usernames.discard(user.username)
                self._usernames.add(username)
            if email_changed:
                self._emails.discard(user.email)
                self._emails.add(email)

            user.username = username
            user.email = email

            logger.bind(user_id=user_id, username=username).info("user.updated")
            return user.model_copy()

    def delete(self, user_id: int) -> None:
        """Remove the user stored under ``user_id``.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        with self._lock:
            user = self._require(user_id)

            self._users.remove(user)
            del self._by_id[user_id]
            self._usernames.discard(user.username)
            self._emails.discard(user.email)

            logger.bind(user_id=user_id, username=user.username).info("user.deleted")

    def _require(self, user_id: int) -> User:
        user = self._by_id.get(user_id)
        if user is None:
            logger.bind(user_id=user_id).debug("user.not_found")
            raise UserNotFoundError(user_id)
        return user

    def _validated(self, candidate: UserCandidate) -> tuple[str, str]:
        errors = validate_candidate(candidate)
        if errors:
            logger.bind(errors=errors).debug("user.validation_failed")
            raise UserValidationError(errors)
        # validate_candidate guarantees both are non-empty strings here
        return candidate.username or "", candidate.email or ""
