"""Entities module organized by business concept.

Each entity has its own package containing the domain model (``entity.py``)
and the payload models used to create or change it.
"""

from .core.user import User, UserCandidate

__all__ = [
    "User",
    "UserCandidate",
]
