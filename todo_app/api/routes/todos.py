"""Todo CRUD endpoints."""

from fastapi import APIRouter

from todo_app.api.dependencies import TodosServiceDep
from todo_app.observability.logging import get_logger
from todo_app.todos.models import Todo, TodoCreate, TodoUpdate

logger = get_logger("TodosController")

router = APIRouter(prefix="/todos")


@router.get("", response_model=list[Todo])
async def find_all(todos_service: TodosServiceDep) -> list[Todo]:
    """List every todo in insertion order."""
    logger.info("list_todos_request")
    todos = todos_service.find_all()
    logger.info("todos_listed", count=len(todos))
    return todos


@router.get("/{todo_id}", response_model=Todo)
async def find_one(todo_id: str, todos_service: TodosServiceDep) -> Todo:
    """Get a todo by ID.

    Raises:
        TodoNotFoundError: If the todo doesn't exist
    """
    logger.info("get_todo_request", todo_id=todo_id)
    todo = todos_service.find_one(todo_id)
    logger.info("todo_found", todo_id=todo_id)
    return todo


@router.post("", response_model=Todo, status_code=201)
async def create(request: TodoCreate, todos_service: TodosServiceDep) -> Todo:
    """Create a new todo."""
    logger.info("create_todo_request", title=request.title)
    todo = todos_service.create(request)
    logger.info("todo_created", todo_id=todo.id)
    return todo


@router.put("/{todo_id}", response_model=Todo)
async def update(todo_id: str, request: TodoUpdate, todos_service: TodosServiceDep) -> Todo:
    """Apply a partial update to a todo.

    Raises:
        TodoNotFoundError: If the todo doesn't exist
    """
    logger.info("update_todo_request", todo_id=todo_id)
    todo = todos_service.update(todo_id, request)
    logger.info("todo_updated", todo_id=todo_id)
    return todo


@router.delete("/{todo_id}", status_code=204)
async def delete(todo_id: str, todos_service: TodosServiceDep) -> None:
    """Delete a todo.

    Raises:
        TodoNotFoundError: If the todo doesn't exist
    """
    logger.info("delete_todo_request", todo_id=todo_id)
    todos_service.delete(todo_id)
    logger.info("todo_deleted", todo_id=todo_id)
