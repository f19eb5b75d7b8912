"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.responses import JSONResponse

from src.users_api.api.http.app_data import ApplicationDependencies
from src.users_api.api.http.routers.health import router as health_router
from src.users_api.api.http.routers.users import router as users_router
from src.users_api.api.utils.app_startup import configure_logging
from src.users_api.core.services import (
    UserConflictError,
    UserNotFoundError,
    UserRegistry,
    UserValidationError,
)
from src.users_api.runtime.config.config_data import ConfigData
from src.users_api.runtime.context import get_config

__all__ = ["app", "create_app", "startup", "shutdown"]


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if request.app.state.config.app.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Lifecycle hooks ---
async def startup(app: FastAPI) -> None:
    config: ConfigData = app.state.config
    logger.info("Starting up application in {} environment", config.app.environment)

    app.state.app_dependencies = ApplicationDependencies(
        user_registry=UserRegistry(),
    )


async def shutdown(app: FastAPI) -> None:
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is None:
        logger.warning("Shutting down before startup completed")
        return
    logger.info(
        "Shutting down application; discarding {} in-memory users",
        app_dependencies.user_registry.count(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


# --- Error mapping ---
async def handle_user_validation_error(
    request: Request, exc: UserValidationError
) -> JSONResponse:
    logger.bind(errors=exc.messages).info("user.rejected")
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": exc.messages},
    )


async def handle_user_conflict_error(
    request: Request, exc: UserConflictError
) -> JSONResponse:
    logger.bind(field=exc.field).info("user.conflict")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "field": exc.field},
    )


async def handle_user_not_found_error(
    request: Request, exc: UserNotFoundError
) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "User not found"})


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.bind(errors=errors).info("request.validation_error")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": errors},
    )


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the application for ``config`` (the current config by default)."""
    config = config or get_config()
    is_production = config.app.is_production

    app = FastAPI(
        title="Users API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.config = config

    # --- Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    if is_production and config.app.cors.allows_any_origin:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    if config.app.https_redirect:
        app.add_middleware(HTTPSRedirectMiddleware)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        xff = request.headers.get("x-forwarded-for")
        client_ip = (
            xff.split(",")[0].strip()
            if xff
            else request.client.host
            if request.client
            else "unknown"
        )

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }

        start = time.perf_counter()

        # Everything that logs within this block inherits base_ctx
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)

                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

                response.headers.setdefault("X-Request-ID", request_id)
                return response

            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                content = {"detail": "Internal Server Error", "request_id": request_id}
                if config.app.expose_error_details:
                    content["error_type"] = type(exc).__name__
                    content["error"] = str(exc)
                return JSONResponse(
                    status_code=500,
                    content=content,
                    headers={"X-Request-ID": request_id},
                )

    # --- Exception handlers ---
    app.add_exception_handler(UserValidationError, handle_user_validation_error)
    app.add_exception_handler(UserConflictError, handle_user_conflict_error)
    app.add_exception_handler(UserNotFoundError, handle_user_not_found_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    # --- Router registration ---
    app.include_router(health_router)
    app.include_router(users_router)

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # Access logging happens in middleware
    )
