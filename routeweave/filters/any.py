"""A filter that matches every request."""

from __future__ import annotations

from ..filter import Filter


class _Any(Filter):
    """Matches any request and extracts nothing."""

    async def filter(self) -> tuple:
        return ()

    def __repr__(self) -> str:
        return "Any"


_ANY = _Any()


def any_() -> Filter:
    """A filter that matches any request and extracts nothing.

    Useful as the start of a chain, or to turn shared state into a filter
    with ``any_().map(lambda: state)``.
    """
    return _ANY