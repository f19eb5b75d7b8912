"""Typed view of the ``config:`` section of config.yaml."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

Environment = Literal["development", "production", "test"]


class CORSConfig(BaseModel):
    """Cross-origin rules handed to Starlette's CORSMiddleware."""

    origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.origins


class LoggingConfig(BaseModel):
    """Loguru sink settings."""

    level: str = "INFO"
    format: Literal["json", "plain"] = Field(
        default="json", description="Encoding of the file sink"
    )
    file: str | None = Field(default=None, description="File sink path; None disables it")
    max_size_mb: int = Field(default=10, gt=0)
    backup_count: int = Field(default=5, ge=0)

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("file")
    @classmethod
    def _blank_file_disables_sink(cls, value: str | None) -> str | None:
        return value or None


class AppConfig(BaseModel):
    """HTTP application settings."""

    environment: Environment = "development"
    host: str = "localhost"
    port: int = Field(default=8000, ge=1, le=65535)
    https_redirect: bool = Field(
        default=False, description="Redirect plain HTTP requests to HTTPS"
    )
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def expose_error_details(self) -> bool:
        """Whether 500 responses may carry the exception type and message."""
        return self.environment == "development"


class ConfigData(BaseModel):
    """Root configuration model."""

    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
