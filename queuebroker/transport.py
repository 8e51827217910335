"""Minimal request routing: match a method and a path pattern to an action."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol
from urllib.parse import parse_qs, unquote, urlsplit

Params = dict[str, str]


@dataclass(frozen=True)
class Request:
    """An incoming request as seen by the router and the actions."""

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    cancel: Optional[threading.Event] = None

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        body: bytes = b"",
        cancel: Optional[threading.Event] = None,
    ) -> "Request":
        """Build a request from a method and a request target such as ``/a/b?x=1``."""
        parts = urlsplit(target)
        parsed = parse_qs(parts.query, keep_blank_values=True)
        query = {key: values[0] for key, values in parsed.items()}
        return cls(method, unquote(parts.path), query, body, cancel)


@dataclass
class Response:
    """The status, headers and body sent back for a request."""

    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def text_error(cls, status: int, message: str) -> "Response":
        """A plain-text error response carrying ``message`` and a newline."""
        return cls(
            status,
            (message + "\n").encode("utf-8"),
            {
                "Content-Type": "text/plain; charset=utf-8",
                "X-Content-Type-Options": "nosniff",
            },
        )


class Action(Protocol):
    """A handler bound to one method and one route pattern."""

    def route(self) -> str:
        """The path pattern, where ``{name}`` segments capture parameters."""

    def method(self) -> str:
        """The request method this action answers."""

    def handle(self, request: Request, params: Params) -> Response:
        """Produce the response for a matched request."""


def path_segments(path: str) -> list[str]:
    """Split a path into segments, ignoring leading and trailing slashes."""
    return path.strip("/").split("/")


def is_param(segment: str) -> bool:
    """Whether a route segment is a ``{name}`` parameter."""
    return len(segment) >= 2 and segment.startswith("{") and segment.endswith("}")


def match_path_segments(
    route_segments: list[str], request_segments: list[str]
) -> Optional[Params]:
    """Return the captured parameters if the request matches the route, else None."""
    if len(route_segments) != len(request_segments):
        return None
    params: Params = {}
    for route_segment, request_segment in zip(route_segments, request_segments):
        if is_param(route_segment):
            params[route_segment.strip("{}")] = request_segment
        elif route_segment != request_segment:
            return None
    return params


class Router:
    """Dispatches requests to the first action whose method and route match."""

    def __init__(self, *args: Action) -> None:
        self._actions: tuple[Action, ...] = args

    def handle(self, request: Request) -> Response:
        """Run the matching action, or answer 404 when none matches."""
        segments = path_segments(request.path)
        for action in self._actions:
            if request.method != action.method():
                continue
            params = match_path_segments(path_segments(action.route()), segments)
            if params is not None:
                return action.handle(request, params)
        return Response.text_error(404, "404 page not found")