import os
from enum import Enum
from typing import Any, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment types."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):  # type: ignore[misc]
    """
    Main settings class.

    Values are read from case-sensitive environment variables and an
    optional `.env` file in the working directory.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True, env_file=".env", extra="ignore"
    )

    # Environment configuration
    ENV: Environment = Environment.DEV

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Static client hosting
    SERVE_CLIENT: bool = True
    CLIENT_DIR: str = "client"

    # "*" or a comma separated list of allowed origins
    CORS_ORIGIN: str = "*"

    # WebSocket settings
    WS_SEND_QUEUE_SIZE: int = 256

    # Logging settings
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]
    LOG_LEVEL: str = "INFO"
    LOG_CONSOLE_FORMAT: Literal["human", "json"] = "human"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings with environment-specific defaults."""
        super().__init__(**kwargs)
        self._apply_environment_defaults(kwargs)

    def _apply_environment_defaults(self, overrides: dict[str, Any]) -> None:
        """Apply environment-specific logging defaults."""

        def unset(name: str) -> bool:
            return name not in overrides and os.getenv(name) is None

        if self.ENV == Environment.PRODUCTION:
            level, console_format = "WARNING", "json"
        elif self.ENV == Environment.STAGING:
            level, console_format = "INFO", "json"
        else:  # Environment.DEV
            level, console_format = "DEBUG", "human"

        if unset("LOG_LEVEL"):
            self.LOG_LEVEL = level
        if unset("LOG_CONSOLE_FORMAT"):
            self.LOG_CONSOLE_FORMAT = console_format

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins parsed from CORS_ORIGIN."""
        if self.CORS_ORIGIN.strip() == "*":
            return ["*"]
        return [
            origin.strip()
            for origin in self.CORS_ORIGIN.split(",")
            if origin.strip()
        ]


app_settings = Settings()
