"""Wrappers that compress the body of a reply."""

from __future__ import annotations

import enum
import gzip as _gzip
import zlib
from dataclasses import dataclass
from typing import Callable

import brotli as _brotli

from ..filter import Filter, Response, Wrap, into_response


class CompressionAlgo(str, enum.Enum):
    """A content-coding and its header value."""

    BR = "br"
    DEFLATE = "deflate"
    GZIP = "gzip"


def _encoded(response: Response, algo: CompressionAlgo, body: bytes) -> Response:
    headers = dict(response.headers)
    existing = headers.get("content-encoding")
    headers["content-encoding"] = algo.value if existing is None else f"{existing}, {algo.value}"
    headers.pop("content-length", None)
    return Response(status=response.status, headers=headers, body=body)


def _gzip_response(response: Response) -> Response:
    return _encoded(response, CompressionAlgo.GZIP, _gzip.compress(response.body))


def _deflate_response(response: Response) -> Response:
    encoder = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    body = encoder.compress(response.body) + encoder.flush()
    return _encoded(response, CompressionAlgo.DEFLATE, body)


def _brotli_response(response: Response) -> Response:
    return _encoded(response, CompressionAlgo.BR, _brotli.compress(response.body))


@dataclass(frozen=True)
class _WithCompression(Filter):
    filter_: Filter
    compression: Compression

    async def filter(self) -> tuple:
        extracted = await self.filter_.filter()
        reply = extracted[0] if len(extracted) == 1 else extracted
        return (self.compression.func(into_response(reply)),)


@dataclass(frozen=True)
class Compression(Wrap):
    """Wraps a filter so that its reply body is compressed by ``func``."""

    func: Callable[[Response], Response]

    def wrap(self, filter: Filter) -> Filter:
        return _WithCompression(filter, self)


def gzip() -> Compression:
    """Compress reply bodies with gzip and add ``content-encoding: gzip``."""
    return Compression(_gzip_response)


def deflate() -> Compression:
    """Compress reply bodies with deflate and add ``content-encoding: deflate``."""
    return Compression(_deflate_response)


def brotli() -> Compression:
    """Compress reply bodies with brotli and add ``content-encoding: br``."""
    return Compression(_brotli_response)