"""Composable request filters and the per-request route they run against."""

from __future__ import annotations

import abc
import inspect
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Iterator
from urllib.parse import urlsplit

from .errors import Rejection


def _lower_headers(headers: dict | None) -> dict[str, str]:
    return {str(name).lower(): str(value) for name, value in (headers or {}).items()}


@dataclass
class Request:
    """An incoming HTTP request."""

    method: str = "GET"
    path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    extensions: dict[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = _lower_headers(self.headers)
        if isinstance(self.body, str):
            self.body = self.body.encode()


@dataclass
class Response:
    """An outgoing HTTP response."""

    status: int = HTTPStatus.OK
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        self.status = int(self.status)
        self.headers = _lower_headers(self.headers)
        if isinstance(self.body, str):
            self.body = self.body.encode()


def _split_target(target: str) -> tuple[str, str | None]:
    path, sep, query = target.partition("?")
    if not path.startswith("/"):
        path = urlsplit(path).path if "://" in path else ""
    return path, (query if sep else None)


class Route:
    """The state of one request as filters work through it."""

    def __init__(self, request: Request, remote_addr: Any = None) -> None:
        self.request = request
        self.remote_addr = remote_addr
        self._path, self._query = _split_target(request.path)
        self._matched = 0
        self._body: bytes | None = request.body

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def headers(self) -> dict[str, str]:
        return self.request.headers

    @property
    def extensions(self) -> dict[Any, Any]:
        return self.request.extensions

    @property
    def path(self) -> str:
        """The request path, without the query string."""
        return self._path

    @property
    def query(self) -> str | None:
        """The raw query string, or None when the target has none."""
        return self._query

    @property
    def unmatched_path(self) -> str:
        """The part of the path not yet matched by a filter."""
        return self._path[self._matched:]

    def take_body(self) -> bytes | None:
        """Take the request body; None if an earlier filter already took it."""
        body, self._body = self._body, None
        return body

    def matched_path_index(self) -> int:
        return self._matched

    def reset_matched_path_index(self, index: int) -> None:
        self._matched = index


_CURRENT_ROUTE: ContextVar[Route | None] = ContextVar("routeweave_route", default=None)


def current_route() -> Route:
    """Return the route of the request being filtered."""
    route = _CURRENT_ROUTE.get()
    if route is None:
        raise RuntimeError("no route is set; filters run only inside with_route()")
    return route


@contextmanager
def with_route(route: Route) -> Iterator[Route]:
    """Make ``route`` the current route while the block runs."""
    if _CURRENT_ROUTE.get() is not None:
        raise RuntimeError("nested route scopes are not allowed")
    token = _CURRENT_ROUTE.set(route)
    try:
        yield route
    finally:
        _CURRENT_ROUTE.reset(token)


def _rejection_response(rejection: Rejection) -> Response:
    message = rejection.message()
    headers = {"content-type": "text/plain; charset=utf-8"} if message else {}
    return Response(status=rejection.status(), headers=headers, body=message)


def into_response(value: Any) -> Response:
    """Turn a reply value into a Response."""
    if isinstance(value, Response):
        return value
    if isinstance(value, Rejection):
        return _rejection_response(value)
    if value is None or (isinstance(value, tuple) and not value):
        return Response()
    if isinstance(value, HTTPStatus):
        return Response(status=value)
    if isinstance(value, str):
        return Response(headers={"content-type": "text/plain; charset=utf-8"}, body=value)
    if isinstance(value, (bytes, bytearray)):
        return Response(headers={"content-type": "application/octet-stream"}, body=bytes(value))
    converter = getattr(value, "into_response", None)
    if callable(converter):
        return converter()
    raise TypeError(f"cannot turn {type(value).__name__} into a response")


class Filter(abc.ABC):
    """A composable piece of request handling.

    ``filter()`` runs against the current route and returns a tuple of the
    values it extracts, or raises Rejection.
    """

    @abc.abstractmethod
    async def filter(self) -> tuple:
        """Run against the current route and return the extracted values."""

    def and_(self, other: Filter) -> And:
        """Require both filters; the extracted values are joined."""
        return And(self, other)

    def or_(self, other: Filter) -> Filter:
        """Try this filter, then the other if this one rejects."""
        from .combinators import Or

        return Or(self, other)

    def map(self, fun: Callable[..., Any]) -> Map:
        """Call ``fun`` with the extracted values and extract its result."""
        return Map(self, fun)

    def and_then(self, fun: Callable[..., Any]) -> Filter:
        """Await ``fun`` with the extracted values; it may raise Rejection."""
        from .combinators import AndThen

        return AndThen(self, fun)

    def or_else(self, fun: Callable[..., Any]) -> Filter:
        """On rejection, await ``fun`` for values of the same shape."""
        from .combinators import OrElse

        return OrElse(self, fun)

    def recover(self, fun: Callable[..., Any]) -> Filter:
        """On rejection, await ``fun`` for a replacement value."""
        from .combinators import Recover

        return Recover(self, fun)

    def map_err(self, fun: Callable[..., Any]) -> Filter:
        """Turn a rejection into another error with ``fun``."""
        from .combinators import MapErr

        return MapErr(self, fun)

    def unify(self) -> Filter:
        """Unwrap the single Either extracted by ``or_``."""
        from .combinators import Unify

        return Unify(self)

    def untuple_one(self) -> UntupleOne:
        """Unwrap one extracted tuple into separate values."""
        return UntupleOne(self)

    def with_(self, wrapper: Wrap) -> Filter:
        """Wrap this filter with ``wrapper``."""
        return wrapper.wrap(self)

    def boxed(self) -> Filter:
        """Hide this filter behind a BoxedFilter."""
        from .combinators import BoxedFilter

        return BoxedFilter(self)


@dataclass(frozen=True)
class And(Filter):
    """Runs ``first`` then ``second`` and joins their extracts."""

    first: Filter
    second: Filter

    async def filter(self) -> tuple:
        extracted = await self.first.filter()
        return extracted + await self.second.filter()


@dataclass(frozen=True)
class Map(Filter):
    """Applies ``callback`` to what ``filter`` extracts."""

    filter_: Filter
    callback: Callable[..., Any]

    async def filter(self) -> tuple:
        extracted = await self.filter_.filter()
        return (self.callback(*extracted),)


@dataclass(frozen=True)
class UntupleOne(Filter):
    """Unwraps a single extracted tuple into its items."""

    filter_: Filter

    async def filter(self) -> tuple:
        (value,) = await self.filter_.filter()
        if value is None:
            return ()
        if not isinstance(value, tuple):
            raise TypeError(f"untuple_one needs a tuple, got {type(value).__name__}")
        return value


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class FilterFn(Filter):
    """A filter built from a function of the current route."""

    func: Callable[[Route], Any]

    async def filter(self) -> tuple:
        result = await _resolve(self.func(current_route()))
        if result is None:
            return ()
        if not isinstance(result, tuple):
            raise TypeError(f"filter function must return a tuple, got {type(result).__name__}")
        return result


class Wrap(abc.ABC):
    """Something that wraps a filter into a new filter."""

    @abc.abstractmethod
    def wrap(self, filter: Filter) -> Filter:
        """Return a filter that runs ``filter`` inside this wrapper."""


def filter_fn(func: Callable[[Route], Any]) -> FilterFn:
    """Make a filter from ``func(route)``, which returns a tuple or awaitable of one."""
    return FilterFn(func)


def filter_fn_one(func: Callable[[Route], Any]) -> FilterFn:
    """Make a filter extracting the single value ``func(route)`` yields."""

    async def extract_one(route: Route) -> tuple:
        return (await _resolve(func(route)),)

    return FilterFn(extract_one)