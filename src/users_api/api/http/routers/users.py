"""User API router with CRUD operations."""

from fastapi import APIRouter, Depends, Response, status

from src.users_api.api.http.deps import get_user_registry
from src.users_api.core.services import UserRegistry
from src.users_api.entities.core.user import User, UserCandidate

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    candidate: UserCandidate,
    response: Response,
    registry: UserRegistry = Depends(get_user_registry),
) -> User:
    """Create a new user."""
    user = registry.create(candidate)
    response.headers["Location"] = f"/users/{user.id}"
    return user


@router.get("", response_model=list[User])
def list_users(
    registry: UserRegistry = Depends(get_user_registry),
) -> list[User]:
    """List all users in creation order."""
    return registry.list_all()


@router.get("/{user_id:int}", response_model=User)
def get_user(
    user_id: int,
    registry: UserRegistry = Depends(get_user_registry),
) -> User:
    """Get a user by ID."""
    return registry.get(user_id)


@router.put("/{user_id:int}", response_model=User)
def update_user(
    user_id: int,
    candidate: UserCandidate,
    registry: UserRegistry = Depends(get_user_registry),
) -> User:
    """Replace a user's username and email."""
    return registry.update(user_id, candidate)


@router.delete("/{user_id:int}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    registry: UserRegistry = Depends(get_user_registry),
) -> Response:
    """Delete a user."""
    registry.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
