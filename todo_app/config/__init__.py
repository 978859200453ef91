"""Configuration loading for Todo App.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from todo_app.config import get_settings

    settings = get_settings()
    port = settings.port
"""

from functools import lru_cache

import structlog

from todo_app.config.settings import Settings, config_files


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Falls back to code defaults (plus environment variables) when no
    config/default.toml can be found. The result is cached for the
    lifetime of the process; call `get_settings.cache_clear()` to reload.
    """
    default_file, _ = config_files()
    if not default_file.is_file():
        structlog.get_logger(__name__).warning(
            "config_file_not_found", path=str(default_file), msg="Using default configuration"
        )

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
