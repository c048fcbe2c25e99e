"""Route table with ordered, first-match-wins path matching.

Patterns are slash-separated paths where a segment prefixed with ``:`` is a
named capture matching exactly one non-empty path segment::

    /api/v1/lists/:listId/tasks

Routes are registered at startup and the table is frozen once the
dispatcher takes ownership of it. Registration order is match priority.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

Handler = Callable[[Request, dict[str, str]], Awaitable[Any]]


@dataclass(frozen=True)
class Segment:
    value: str
    is_param: bool = False


@dataclass(frozen=True)
class RoutePattern:
    """A parsed route pattern."""

    raw: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, pattern: str) -> "RoutePattern":
        if not pattern.startswith("/"):
            raise ValueError(f"Route pattern must start with '/': {pattern!r}")

        segments = []
        seen: set[str] = set()
        for part in pattern.split("/")[1:]:
            if part.startswith(":"):
                name = part[1:]
                if not name:
                    raise ValueError(f"Empty parameter name in route pattern {pattern!r}")
                if name in seen:
                    raise ValueError(f"Duplicate parameter {name!r} in route pattern {pattern!r}")
                seen.add(name)
                segments.append(Segment(name, is_param=True))
            else:
                segments.append(Segment(part))
        return cls(raw=pattern, segments=tuple(segments))

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.value for s in self.segments if s.is_param)

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured parameters, or None if the path does not match."""
        if not path.startswith("/"):
            return None

        parts = path.split("/")[1:]
        if len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts):
            if segment.is_param:
                if not part:
                    return None
                params[segment.value] = part
            elif segment.value != part:
                return None
        return params


@dataclass(frozen=True)
class Route:
    method: str
    pattern: RoutePattern
    handler: Handler
    # Content type and JSON body are checked by the dispatcher before the handler runs
    expects_json: bool = False


class Router:
    """Ordered route table."""

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._frozen = False

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the route table immutable."""
        self._frozen = True

    def register(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        expects_json: bool = False,
    ) -> Route:
        """Append a route.

        Registering the same method and pattern twice is allowed; the earlier
        route shadows the later one.
        """
        if self._frozen:
            raise RuntimeError("Cannot register routes after the router is frozen")

        route = Route(
            method=method.upper(),
            pattern=RoutePattern.parse(pattern),
            handler=handler,
            expects_json=expects_json,
        )
        self._routes.append(route)
        return route

    def get(self, pattern: str, handler: Handler) -> Route:
        return self.register("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler, expects_json: bool = True) -> Route:
        return self.register("POST", pattern, handler, expects_json=expects_json)

    def patch(self, pattern: str, handler: Handler, expects_json: bool = True) -> Route:
        return self.register("PATCH", pattern, handler, expects_json=expects_json)

    def delete(self, pattern: str, handler: Handler) -> Route:
        return self.register("DELETE", pattern, handler)

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Find the first route matching method and path, in registration order."""
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue
            params = route.pattern.match(path)
            if params is not None:
                return route, params
        return None
