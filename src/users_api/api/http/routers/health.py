"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request

from src.users_api.api.http.app_data import ApplicationDependencies

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Basic health check endpoint - checks if app is running.

    This is a liveness probe that returns 200 OK as long as the application
    process is running.
    """
    return {"status": "healthy", "service": "users-api"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, Any]:
    """Readiness check reporting the state of the user registry."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies

    checks = {
        "user_registry": {
            "status": "healthy",
            "type": "in-memory",
            "users": app_deps.user_registry.count(),
        }
    }

    return {
        "status": "ready",
        "environment": request.app.state.config.app.environment,
        "checks": checks,
    }
