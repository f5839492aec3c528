"""Settings of the Request Envelope service.

Everything is declared as pydantic-settings models, read in this order:

1. Process environment (nested values use ``__``, e.g. ``ERROR_HANDLING__HANDLED_LOG_LEVEL``)
2. A ``.env`` file in the working directory
3. Field defaults
4. Derived defaults (the log formatter, when left unset)
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

type FormatterType = Literal["console", "json"]
type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogConfig(BaseModel):
    """Loguru sink settings."""

    log_level: LogLevel = Field(default="INFO", description="Minimum level written")
    log_formatter_type: FormatterType | None = Field(
        default=None,
        description="Sink format, derived from the environment when unset",
    )


class ErrorHandlingConfig(BaseModel):
    """How classified request failures are reported in the logs."""

    handled_log_level: LogLevel = Field(
        default="DEBUG",
        description="Level for failures the classification table recognizes",
    )


class Settings(BaseSettings):
    """Service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        validate_default=True,
    )

    app_name: str = Field(default="Request Envelope", description="Service title")
    app_version: str = Field(default="0.1.0", description="Service version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment stage"
    )
    debug: bool = Field(default=True, description="Reload and verbose tracebacks")

    api_host: str = Field(default="127.0.0.1", description="Bind address")
    api_port: int = Field(default=8000, description="Bind port")
    docs_url: str | None = Field(default="/docs", description="Swagger UI path")
    redoc_url: str | None = Field(default="/redoc", description="ReDoc path")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI document path"
    )

    log_config: LogConfig = Field(default_factory=LogConfig)
    error_handling: ErrorHandlingConfig = Field(default_factory=ErrorHandlingConfig)

    def model_post_init(self, __context: object) -> None:
        """Derive the log formatter when none was configured."""
        super().model_post_init(__context)
        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._default_formatter()

    def _default_formatter(self) -> FormatterType:
        # Cloud Run and Lambda collect structured stdout
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"
        return "console" if self.environment == "development" else "json"

    @field_validator("docs_url", "redoc_url", "openapi_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Treat an empty path as a disabled documentation route."""
        return None if v == "" else v


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
