"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.users_api.api.http.app_data import ApplicationDependencies
from src.users_api.core.services import UserRegistry


def get_user_registry(request: Request) -> UserRegistry:
    """Get the user registry instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.user_registry
