"""Serve requests by running a filter against each of them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import Rejection
from .filter import Filter, Request, Response, Route, into_response, with_route

log = logging.getLogger(__name__)


def _reply(extracted: tuple) -> Response:
    if len(extracted) == 1:
        return into_response(extracted[0])
    return into_response(extracted)


@dataclass(frozen=True)
class FilteredService:
    """Answers requests with the reply of a filter, or of its rejection."""

    filter: Filter

    async def call(self, request: Request) -> Response:
        """Answer ``request`` with no known remote address."""
        return await self.call_with_addr(request, None)

    async def call_with_addr(self, request: Request, remote_addr: Any) -> Response:
        """Answer ``request`` received from ``remote_addr``."""
        route = Route(request, remote_addr)
        with with_route(route):
            try:
                extracted = await self.filter.filter()
            except Rejection as err:
                log.debug("rejected: %r", err)
                return into_response(err)
            return _reply(extracted)


def service(filter: Filter) -> FilteredService:
    """Turn ``filter`` into a request handler."""
    return FilteredService(filter)