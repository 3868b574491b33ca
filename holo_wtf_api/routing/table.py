"""Route table with fail-fast registration and specificity-based resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Iterable

from .errors import MethodNotAllowedError, RouteNotFoundError, RouteRegistrationError
from .interfaces import RequestHandlerPort
from .patterns import RoutePattern, routing_parse_pattern, routing_split_path

ROUTING_SUPPORTED_METHODS: Final[frozenset[str]] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredRoute:
    """One immutable route table entry.

    Attributes:
        method: Uppercase HTTP method.
        pattern: Parsed path pattern.
        handler: Handler invoked for matching requests.
    """

    method: str
    pattern: RoutePattern
    handler: RequestHandlerPort


@dataclass(frozen=True)
class RouteMatch:
    """Resolution result for one request.

    Attributes:
        route: Most specific matching route.
        path_parameters: Values captured from the request path.
    """

    route: RegisteredRoute
    path_parameters: dict[str, str]


class RouteTable:
    """Registry of routes built once before serving and read-only afterwards."""

    def __init__(self, reserved_paths: Iterable[str] = ()):
        """Initialize an empty, writable route table.

        Args:
            reserved_paths: Concrete paths served outside the table, such as health checks.

        Raises:
            RouteRegistrationError: Raised when a reserved path is not absolute.
        """

        self._routes: list[RegisteredRoute] = []
        self._reserved_paths: tuple[str, ...] = tuple(reserved_paths)
        for reserved_path in self._reserved_paths:
            if not reserved_path.startswith("/"):
                raise RouteRegistrationError(f"reserved path must start with '/': {reserved_path!r}")
        self._frozen = False

    def table_register(self, method: str, pattern: str, handler: RequestHandlerPort) -> RegisteredRoute:
        """Register one route, rejecting duplicates and ambiguities.

        Args:
            method: HTTP method, case-insensitive.
            pattern: Path pattern text.
            handler: Object exposing `handler_process(request)`.

        Returns:
            RegisteredRoute: Newly registered entry.

        Raises:
            RouteRegistrationError: Raised when the table is frozen, the method or pattern is
                invalid, the handler lacks `handler_process`, the pattern claims a reserved
                path, or the route duplicates or is ambiguous with an existing route.
        """

        if self._frozen:
            raise RouteRegistrationError("route table is frozen; routes must be registered before serving")

        normalized_method = str(method).strip().upper()
        if normalized_method not in ROUTING_SUPPORTED_METHODS:
            raise RouteRegistrationError(f"unsupported HTTP method: {method!r}")
        if not callable(getattr(handler, "handler_process", None)):
            raise RouteRegistrationError(f"handler for {normalized_method} {pattern} must define handler_process()")

        parsed_pattern = routing_parse_pattern(pattern)
        for reserved_path in self._reserved_paths:
            if parsed_pattern.pattern_match(routing_split_path(reserved_path)) is not None:
                raise RouteRegistrationError(f"route pattern {pattern!r} would shadow reserved path {reserved_path!r}")

        for existing_route in self._routes:
            existing_pattern = existing_route.pattern
            if existing_pattern.normalized == parsed_pattern.normalized:
                if existing_route.method == normalized_method:
                    raise RouteRegistrationError(
                        f"duplicate route {normalized_method} {pattern!r} "
                        f"(already registered as {existing_pattern.raw_pattern!r})"
                    )
                continue
            if (
                existing_pattern.pattern_specificity() == parsed_pattern.pattern_specificity()
                and existing_pattern.pattern_overlaps(parsed_pattern)
            ):
                raise RouteRegistrationError(
                    f"route pattern {pattern!r} is ambiguous with {existing_pattern.raw_pattern!r}"
                )

        registered_route = RegisteredRoute(method=normalized_method, pattern=parsed_pattern, handler=handler)
        self._routes.append(registered_route)
        logger.debug("Registered route %s %s", normalized_method, pattern)
        return registered_route

    def table_freeze(self) -> None:
        """Make the table read-only; called once serving is about to begin."""

        self._frozen = True

    def table_is_frozen(self) -> bool:
        return self._frozen

    def table_routes(self) -> tuple[RegisteredRoute, ...]:
        return tuple(self._routes)

    def table_resolve(self, method: str, path: str) -> RouteMatch:
        """Resolve the most specific route for a request.

        `HEAD` requests fall back to the `GET` route of the same path.

        Args:
            method: Request HTTP method.
            path: Decoded request path.

        Returns:
            RouteMatch: Matching route and captured path parameters.

        Raises:
            RouteNotFoundError: Raised when no pattern matches the path.
            MethodNotAllowedError: Raised when patterns match the path but not the method.
        """

        normalized_method = method.upper()
        path_segments = routing_split_path(path)
        path_matches: list[RouteMatch] = []
        for route in self._routes:
            path_parameters = route.pattern.pattern_match(path_segments)
            if path_parameters is not None:
                path_matches.append(RouteMatch(route=route, path_parameters=path_parameters))

        if not path_matches:
            raise RouteNotFoundError(path)

        method_matches = [match for match in path_matches if match.route.method == normalized_method]
        if not method_matches and normalized_method == "HEAD":
            method_matches = [match for match in path_matches if match.route.method == "GET"]
        if not method_matches:
            allowed_methods = {match.route.method for match in path_matches}
            if "GET" in allowed_methods:
                allowed_methods.add("HEAD")
            raise MethodNotAllowedError(normalized_method, path, tuple(sorted(allowed_methods)))

        return min(method_matches, key=lambda match: match.route.pattern.pattern_specificity())
