"""Root settings model for Todo App configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from todo_app.config.models.observability import LogFormat, LogLevel, ObservabilityConfig

Environment = Literal["development", "production", "test"]

CONFIG_DIR_ENV_VAR = "TODO_APP_CONFIG_DIR"
ENVIRONMENT_ENV_VAR = "TODO_APP_ENV"


def get_environment() -> str:
    """Deployment environment named by TODO_APP_ENV, 'development' if unset."""
    return os.environ.get(ENVIRONMENT_ENV_VAR, "development")


def get_config_dir() -> Path:
    """Directory holding the TOML files: TODO_APP_CONFIG_DIR, else ./config."""
    return Path(os.environ.get(CONFIG_DIR_ENV_VAR, "config"))


def config_files() -> tuple[Path, Path]:
    """Base file and environment overlay, lowest precedence first.

    Either may be missing; a missing file contributes nothing.
    """
    config_dir = get_config_dir()
    return config_dir / "default.toml", config_dir / f"{get_environment()}.toml"


class Settings(BaseSettings):
    """Root configuration object.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{TODO_APP_ENV}.toml (environment overrides)
    4. TODO_APP_* environment variables, plus PORT (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="TODO_APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="todo-app", description="Application name for logging/tracing")
    environment: Environment = Field(
        default_factory=get_environment,
        validate_default=True,
        description="Deployment environment; only affects log verbosity and format",
    )
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
        description="Listen port",
    )

    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def log_level(self) -> LogLevel:
        """Configured log level, or DEBUG outside production and INFO in it."""
        configured = self.observability.logging.level
        if configured is not None:
            return configured
        return "INFO" if self.is_production else "DEBUG"

    @property
    def log_format(self) -> LogFormat:
        """Configured log format, or console outside production and json in it."""
        configured = self.observability.logging.format
        if configured is not None:
            return configured
        return "json" if self.is_production else "console"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include the TOML files.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (TODO_APP_* and PORT environment variables)
        3. config/{TODO_APP_ENV}.toml
        4. config/default.toml
        5. (defaults from model)

        Each file is its own source, so the overlay is merged into the
        base section by section rather than replacing whole tables.
        """
        default_file, environment_file = config_files()
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=environment_file),
            TomlConfigSettingsSource(settings_cls, toml_file=default_file),
        )
