"""Run the Todo App API server: ``python -m todo_app``."""

import uvicorn

from todo_app.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "todo_app.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
