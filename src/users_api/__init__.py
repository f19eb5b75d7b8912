"""Users API.

An HTTP CRUD service for user accounts backed by an in-memory registry that
assigns identifiers and enforces username/email uniqueness.
"""

__version__ = "0.1.0"
