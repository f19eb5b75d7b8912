"""User domain entity."""

from pydantic import BaseModel, ConfigDict, Field


class UserCandidate(BaseModel):
    """Client-supplied fields for creating or replacing a user.

    Fields are optional at this layer so that missing values surface as
    registry validation messages rather than framework parsing errors. Any
    ``id`` sent by the client is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    username: str | None = Field(default=None, description="Requested username")
    email: str | None = Field(default=None, description="Requested email address")


class User(BaseModel):
    """User entity representing a registered account.

    The ``id`` is assigned by the registry on creation and never changes.
    """

    id: int = Field(description="Registry-assigned identifier")
    username: str = Field(description="Unique username")
    email: str = Field(description="Unique email address")
