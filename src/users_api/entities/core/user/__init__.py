"""Entity package: User."""

from .entity import User, UserCandidate

__all__ = ["User", "UserCandidate"]
