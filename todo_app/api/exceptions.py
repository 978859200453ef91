"""API exception hierarchy for consistent error handling.

All API exceptions inherit from TodoAppAPIError, which provides the
status_code and error_code used by the global exception handler and by
the request metrics and tracing middleware.
"""

from todo_app.api.models.errors import ErrorCode


class TodoAppAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TodoNotFoundError(TodoAppAPIError):
    """Raised when a todo id does not exist."""

    status_code = 404
    error_code = ErrorCode.TODO_NOT_FOUND

    def __init__(self, todo_id: str) -> None:
        super().__init__(f"Todo with ID {todo_id} not found")
        self.todo_id = todo_id
