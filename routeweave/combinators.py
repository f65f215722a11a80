"""Filter combinators: sequencing, alternatives, recovery and boxing."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable

from .errors import Rejection
from .filter import Filter, Response, current_route, into_response


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, tuple):
        return value
    return (value,)


@dataclass(frozen=True)
class Either:
    """The extract of one of two alternative filters.

    ``first`` tells whether the first alternative produced ``value``.
    """

    value: tuple
    first: bool = True

    @classmethod
    def a(cls, value: tuple) -> Either:
        """Values extracted by the first alternative."""
        return cls(tuple(value), True)

    @classmethod
    def b(cls, value: tuple) -> Either:
        """Values extracted by the second alternative."""
        return cls(tuple(value), False)

    def into_response(self) -> Response:
        if len(self.value) == 1:
            return into_response(self.value[0])
        return into_response(self.value)


@dataclass(frozen=True)
class AndThen(Filter):
    """Feeds the extract of ``filter_`` to ``callback`` and awaits its result."""

    filter_: Filter
    callback: Callable[..., Any]

    async def filter(self) -> tuple:
        extracted = await self.filter_.filter()
        return (await _resolve(self.callback(*extracted)),)


@dataclass(frozen=True)
class MapErr(Filter):
    """Replaces a rejection of ``filter_`` with what ``callback`` returns."""

    filter_: Filter
    callback: Callable[[Rejection], BaseException]

    async def filter(self) -> tuple:
        try:
            return await self.filter_.filter()
        except Rejection as err:
            replacement = self.callback(err)
        raise replacement


@dataclass(frozen=True)
class Or(Filter):
    """Tries ``first``; if it rejects, tries ``second`` from the same path position."""

    first: Filter
    second: Filter

    async def filter(self) -> tuple:
        route = current_route()
        index = route.matched_path_index()
        try:
            return (Either.a(await self.first.filter()),)
        except Rejection as err:
            first_error = err
        route.reset_matched_path_index(index)
        try:
            return (Either.b(await self.second.filter()),)
        except Rejection as err:
            second_error = err
        route.reset_matched_path_index(index)
        raise second_error.combine(first_error)


@dataclass(frozen=True)
class OrElse(Filter):
    """On rejection, awaits ``callback`` for values of the same shape."""

    filter_: Filter
    callback: Callable[[Rejection], Any]

    async def filter(self) -> tuple:
        route = current_route()
        index = route.matched_path_index()
        try:
            return await self.filter_.filter()
        except Rejection as err:
            rejection = err
        route.reset_matched_path_index(index)
        return _as_tuple(await _resolve(self.callback(rejection)))


@dataclass(frozen=True)
class Recover(Filter):
    """On rejection, awaits ``callback`` for a replacement value."""

    filter_: Filter
    callback: Callable[[Rejection], Any]

    async def filter(self) -> tuple:
        route = current_route()
        index = route.matched_path_index()
        try:
            return (Either.a(await self.filter_.filter()),)
        except Rejection as err:
            rejection = err
        route.reset_matched_path_index(index)
        value = await _resolve(self.callback(rejection))
        return (Either.b((value,)),)


@dataclass(frozen=True)
class Unify(Filter):
    """Unwraps the single Either extracted by an ``or_`` filter."""

    filter_: Filter

    async def filter(self) -> tuple:
        (either,) = await self.filter_.filter()
        if not isinstance(either, Either):
            raise TypeError(f"unify needs an Either, got {type(either).__name__}")
        return either.value


@dataclass(frozen=True)
class BoxedFilter(Filter):
    """An opaque filter hiding the composition inside it."""

    filter_: Filter = field(repr=False)

    async def filter(self) -> tuple:
        return await self.filter_.filter()

    def __repr__(self) -> str:
        return "BoxedFilter"