"""Filters on the address of the connection."""

from __future__ import annotations

from ..filter import Filter, filter_fn_one


def remote() -> Filter:
    """Extract the remote address of the connection, or None when unknown."""
    return filter_fn_one(lambda route: route.remote_addr)