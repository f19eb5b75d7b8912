"""Errors raised by the user registry.

All of them are recoverable by the caller; the registry stays consistent
and usable after any of them is raised.
"""


class UserRegistryError(Exception):
    """Base class for user registry failures."""


class UserValidationError(UserRegistryError):
    """One or more candidate fields broke a validation rule."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class UserConflictError(UserRegistryError):
    """A unique field is already used by a different user."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field.capitalize()} '{value}' is already in use")


class UserNotFoundError(UserRegistryError):
    """No user is stored under the requested id."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")
