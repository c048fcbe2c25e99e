"""Run the Todo API with uvicorn: ``python -m todo_api``."""

import uvicorn

from todo_api.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "todo_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
