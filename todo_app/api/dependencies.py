"""Dependency injection for API routes.

The metrics registry and todo store are owned by the
application instance (``app.state``) rather than by module globals, so
each app, and each test, works on its own state. Routes receive them
through these FastAPI dependencies, which tests may override.
"""

from typing import Annotated

from fastapi import Depends, Request

from todo_app.config import Settings
from todo_app.observability.metrics import MetricsRegistry
from todo_app.todos.service import TodosService


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_metrics_registry(request: Request) -> MetricsRegistry:
    """Metrics registry owned by the application."""
    return request.app.state.metrics  # type: ignore[no-any-return]


def get_todos_service(request: Request) -> TodosService:
    """In-memory todo store owned by the application."""
    return request.app.state.todos_service  # type: ignore[no-any-return]


SettingsDep = Annotated[Settings, Depends(get_settings)]
MetricsRegistryDep = Annotated[MetricsRegistry, Depends(get_metrics_registry)]
TodosServiceDep = Annotated[TodosService, Depends(get_todos_service)]
