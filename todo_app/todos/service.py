"""In-memory todo store instrumented with tracing and metrics."""

import threading
from collections.abc import Generator
from contextlib import contextmanager

from opentelemetry.trace import Span

from todo_app.api.exceptions import TodoNotFoundError
from todo_app.observability.logging import get_logger
from todo_app.observability.metrics import MetricsRegistry
from todo_app.observability.tracing import SpanRecorder
from todo_app.todos.models import Todo, TodoCreate, TodoUpdate

logger = get_logger("TodosService")

NOT_FOUND = "NotFound"
UNKNOWN = "Unknown"


class TodosService:
    """CRUD over an in-memory, insertion-ordered list of todos.

    Each public operation runs in a ``TodosService.<operation>`` span and
    records an operation counter outcome. A missing todo is classified as
    ``NotFound`` once, by the lookup that detected it; any other fault is
    classified as ``Unknown`` by the operation it escaped from.

    A single re-entrant lock serializes access to the list, so an update
    (which looks the todo up through find_one) holds it throughout.
    """

    def __init__(self, metrics: MetricsRegistry, spans: SpanRecorder) -> None:
        self._metrics = metrics
        self._spans = spans
        self._todos: list[Todo] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._todos)

    @contextmanager
    def _operation(self, operation: str) -> Generator[Span, None, None]:
        with self._lock, self._spans.span(f"TodosService.{operation}") as span:
            try:
                yield span
            except TodoNotFoundError:
                self._metrics.increment_operation_counter(operation, "failure")
                raise
            except Exception as e:
                logger.error(
                    "todo_operation_failed",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._metrics.increment_operation_counter(operation, "failure")
                self._metrics.increment_error_counter(operation, UNKNOWN)
                raise

    def _not_found(self, operation: str, todo_id: str) -> TodoNotFoundError:
        self._metrics.increment_error_counter(operation, NOT_FOUND)
        return TodoNotFoundError(todo_id)

    def _index_of(self, todo_id: str) -> int:
        for index, todo in enumerate(self._todos):
            if todo.id == todo_id:
                return index
        return -1

    def _publish_counts(self) -> None:
        completed = sum(1 for todo in self._todos if todo.completed)
        pending = sum(1 for todo in self._todos if not todo.completed)
        self._metrics.set_todo_count(completed, pending)

    def find_all(self) -> list[Todo]:
        """Return a snapshot of every todo in insertion order."""
        with self._operation("findAll") as span:
            logger.info("fetching_all_todos")
            logger.debug("current_todos_count", count=len(self._todos))
            self._spans.set_attribute(span, "todo.count", len(self._todos))
            self._metrics.increment_operation_counter("findAll", "success")
            return list(self._todos)

    def find_one(self, todo_id: str) -> Todo:
        """Return the todo with the given id.

        Raises:
            TodoNotFoundError: If no todo has this id
        """
        with self._operation("findOne") as span:
            logger.info("fetching_todo", todo_id=todo_id)
            self._spans.set_attribute(span, "todo.id", todo_id)

            index = self._index_of(todo_id)
            if index == -1:
                logger.warning("todo_not_found", todo_id=todo_id)
                self._spans.add_event(span, "todo.not_found")
                raise self._not_found("findOne", todo_id)

            todo = self._todos[index]
            logger.debug("todo_found", todo_id=todo_id, title=todo.title)
            self._metrics.increment_operation_counter("findOne", "success")
            return todo

    def create(self, payload: TodoCreate) -> Todo:
        """Append a new, not yet completed todo and return it."""
        with self._operation("create") as span:
            logger.info("creating_todo", title=payload.title)

            todo = Todo(title=payload.title, description=payload.description)
            self._todos.append(todo)
            self._spans.set_attribute(span, "todo.id", todo.id)
            self._spans.add_event(span, "todo.created")

            logger.info("todo_created", todo_id=todo.id, title=todo.title)
            logger.debug("todo_details", todo=todo.model_dump(mode="json"))
            self._publish_counts()
            self._metrics.increment_operation_counter("create", "success")
            return todo

    def update(self, todo_id: str, changes: TodoUpdate) -> Todo:
        """Overwrite the fields present in ``changes`` and return the result.

        Fields absent from the request are left as they are; id and
        creation time are never changed.

        Raises:
            TodoNotFoundError: If no todo has this id
        """
        with self._operation("update") as span:
            fields = changes.model_dump(exclude_unset=True)
            logger.info("updating_todo", todo_id=todo_id, updates=fields)
            self._spans.set_attribute(span, "todo.id", todo_id)

            todo = self.find_one(todo_id)
            updated = todo.model_copy(update=fields)
            self._todos[self._index_of(todo_id)] = updated
            self._spans.add_event(span, "todo.updated")

            logger.info("todo_updated", todo_id=todo_id)
            self._publish_counts()
            self._metrics.increment_operation_counter("update", "success")
            return updated

    def delete(self, todo_id: str) -> None:
        """Remove the todo with the given id.

        Raises:
            TodoNotFoundError: If no todo has this id
        """
        with self._operation("delete") as span:
            logger.info("deleting_todo", todo_id=todo_id)
            self._spans.set_attribute(span, "todo.id", todo_id)

            index = self._index_of(todo_id)
            if index == -1:
                logger.warning("todo_not_found_for_deletion", todo_id=todo_id)
                self._spans.add_event(span, "todo.not_found")
                raise self._not_found("delete", todo_id)

            del self._todos[index]
            self._spans.add_event(span, "todo.deleted")

            logger.info("todo_deleted", todo_id=todo_id)
            logger.debug("remaining_todos_count", count=len(self._todos))
            self._publish_counts()
            self._metrics.increment_operation_counter("delete", "success")
