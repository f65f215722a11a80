"""Filters that extract the body of a request."""

from __future__ import annotations

import io
import json as _json
import logging
import re
from http import HTTPStatus
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl

from ..errors import BodyConsumedMultipleTimes, Error, known
from ..errors import length_required, payload_too_large, unsupported_media_type
from ..filter import Filter, Route, filter_fn, filter_fn_one

log = logging.getLogger(__name__)

_MIME_PART = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_MEDIA_TYPE = re.compile(rf"({_MIME_PART})/({_MIME_PART})")


class BodyDeserializeError(Exception):
    """Raised as the cause of a rejection when a request body cannot be decoded."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Request body deserialize error: {self.cause}"


class BodyReadError(Exception):
    """Raised as the cause of a rejection when a request body cannot be read."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Request body read error: {self.cause}"


def _take_body(route: Route) -> Any:
    body = route.take_body()
    if body is None:
        log.error("request body already taken in previous filter")
        raise known(BodyConsumedMultipleTimes())
    return body


def _body() -> Filter:
    return filter_fn_one(_take_body)


async def _chunks(body: Any) -> AsyncIterator[bytes]:
    if isinstance(body, (bytes, bytearray, memoryview)):
        if body:
            yield bytes(body)
        return
    if hasattr(body, "__aiter__"):
        async for chunk in body:
            yield bytes(chunk)
    else:
        for chunk in body:
            yield bytes(chunk)


async def _read_all(body: Any) -> bytes:
    try:
        return b"".join([chunk async for chunk in _chunks(body)])
    except Exception as err:
        log.debug("body read error: %s", err)
        raise known(BodyReadError(err)) from err


async def _body_stream(body: Any) -> AsyncIterator[bytes]:
    try:
        async for chunk in _chunks(body):
            yield chunk
    except Exception as err:
        raise Error(err) from err


def content_length_limit(limit: int) -> Filter:
    """Require a content-length header no greater than ``limit``.

    Rejects with 411 when the header is missing or invalid, and with 413
    when it is over the limit.
    """

    def check(route: Route) -> None:
        value = route.headers.get("content-length")
        text = value.strip() if value is not None else ""
        if not (text.isascii() and text.isdigit()):
            log.debug("content-length missing")
            raise length_required()
        length = int(text)
        if length > limit:
            log.debug("content-length: %d is over limit %d", length, limit)
            raise payload_too_large()

    return filter_fn(check)


def stream() -> Filter:
    """Extract the request body as an async iterator of byte chunks.

    Errors while reading are raised as ``Error`` from the iterator.
    """
    return _body().map(_body_stream)


def bytes_() -> Filter:
    """Extract the whole request body as one bytes object."""
    return _body().and_then(_read_all)


async def _aggregate(body: Any) -> io.BytesIO:
    return io.BytesIO(await _read_all(body))


def aggregate() -> Filter:
    """Extract the whole request body as a readable binary buffer."""
    return _body().and_then(_aggregate)


def _media_type(value: str) -> tuple[str, str] | None:
    essence = value.split(";", 1)[0].strip()
    match = _MEDIA_TYPE.fullmatch(essence)
    if match is None:
        return None
    return match.group(1).lower(), match.group(2).lower()


def _is_content_type(type_: str, subtype: str) -> Filter:
    """Require this content-type, or none at all."""

    def check(route: Route) -> None:
        value = route.headers.get("content-type")
        if value is None:
            log.debug("no content-type header, assuming %s/%s", type_, subtype)
            return
        parsed = _media_type(value)
        if parsed is None:
            log.debug("content-type %r couldn't be parsed", value)
            raise unsupported_media_type()
        if parsed != (type_, subtype):
            log.debug("content-type %r doesn't match %s/%s", value, type_, subtype)
            raise unsupported_media_type()

    return filter_fn(check)


async def _decode_json(buf: io.BytesIO) -> Any:
    try:
        return _json.loads(buf.read())
    except ValueError as err:
        log.debug("request json body error: %s", err)
        raise known(BodyDeserializeError(err)) from err


async def _decode_form(buf: io.BytesIO) -> list[tuple[str, str]]:
    try:
        text = buf.read().decode("utf-8")
        if not text:
            return []
        return parse_qsl(text, keep_blank_values=True, strict_parsing=True, errors="strict")
    except ValueError as err:
        log.debug("request form body error: %s", err)
        raise known(BodyDeserializeError(err)) from err


def json() -> Filter:
    """Extract the request body decoded as JSON."""
    return _is_content_type("application", "json").and_(aggregate()).and_then(_decode_json)


def form() -> Filter:
    """Extract a url-encoded form body as a list of (name, value) pairs."""
    return (
        _is_content_type("application", "x-www-form-urlencoded")
        .and_(aggregate())
        .and_then(_decode_form)
    )