"""Todo domain: models and the in-memory store."""

from todo_app.todos.models import Todo, TodoCreate, TodoUpdate
from todo_app.todos.service import TodosService

__all__ = ["Todo", "TodoCreate", "TodoUpdate", "TodosService"]
