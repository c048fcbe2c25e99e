"""Route table for the Todo API."""

from todo_api.api.auth import AuthHandlers
from todo_api.api.health import HealthHandlers
from todo_api.api.lists import ListHandlers
from todo_api.api.tasks import TaskHandlers
from todo_api.core.config import Settings
from todo_api.core.database import Database
from todo_api.core.router import Router
from todo_api.services.auth import Authenticator


def build_router(settings: Settings, database: Database, authenticator: Authenticator) -> Router:
    """Register every endpoint. Registration order is match priority."""
    router = Router()
    prefix = settings.api_prefix

    health = HealthHandlers(settings, database)
    lists = ListHandlers(database)
    tasks = TaskHandlers(database)
    auth = AuthHandlers(database, authenticator)

    # Health at root level
    router.get("/health", health.health)

    router.get(f"{prefix}/lists", lists.list_all)
    router.post(f"{prefix}/lists", lists.create)
    router.get(f"{prefix}/lists/:id", lists.get)
    router.patch(f"{prefix}/lists/:id", lists.update)
    router.delete(f"{prefix}/lists/:id", lists.delete)

    router.get(f"{prefix}/lists/:listId/tasks", tasks.list_for_list)
    router.post(f"{prefix}/lists/:listId/tasks", tasks.create)
    router.get(f"{prefix}/tasks/:id", tasks.get)
    router.patch(f"{prefix}/tasks/:id", tasks.update)
    router.delete(f"{prefix}/tasks/:id", tasks.delete)

    router.post(f"{prefix}/auth/signup", auth.signup)
    router.post(f"{prefix}/auth/login", auth.login)
    # Logout reads only the Authorization header
    router.post(f"{prefix}/auth/logout", auth.logout, expects_json=False)
    router.get(f"{prefix}/users/profile", auth.profile)

    return router
