"""Filters that extract cookies from a request."""

from __future__ import annotations

from http import HTTPStatus

from ..errors import known, missing_cookie
from ..filter import Filter, Route, filter_fn_one


class _MissingHeader(Exception):
    status = HTTPStatus.BAD_REQUEST

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f'Missing request header "{self.name}"'


def _parse_cookies(header: str) -> dict[str, str]:
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep and name.strip():
            cookies.setdefault(name.strip(), value.strip())
    return cookies


def cookie(name: str) -> Filter:
    """Require the named cookie and extract its value."""

    def extract(route: Route) -> str:
        header = route.headers.get("cookie")
        if header is None:
            raise known(_MissingHeader("cookie"))
        value = _parse_cookies(header).get(name)
        if value is None:
            raise missing_cookie(name)
        return value

    return filter_fn_one(extract)


def optional(name: str) -> Filter:
    """Extract the named cookie's value, or None when it is absent."""

    def extract(route: Route) -> str | None:
        header = route.headers.get("cookie")
        if header is None:
            return None
        return _parse_cookies(header).get(name)

    return filter_fn_one(extract)