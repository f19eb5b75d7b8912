"""Core services exports."""

# User Services
from .user.errors import (
    UserConflictError,
    UserNotFoundError,
    UserRegistryError,
    UserValidationError,
)
from .user.user_registry import UserRegistry

__all__ = [
    # User Services
    "UserRegistry",
    # Errors
    "UserRegistryError",
    "UserValidationError",
    "UserConflictError",
    "UserNotFoundError",
]
