# routeweave

Composable, asynchronous request filters for HTTP services.

A *filter* looks at a request, may pull values out of it (the body, a
cookie, the remote address), and either passes those values on or rejects
the request by raising a `Rejection`. Small filters combine into larger
ones with the methods of `routeweave.filter.Filter`:

- `and_(other)` runs both filters in turn and joins what they extract.
- `or_(other)` tries one filter and, if it rejects, tries the other from the
  same path position. It extracts an `Either`; `unify()` unwraps it.
- `map(fun)` calls `fun` with the extracted values; `and_then(fun)` does the
  same but awaits the result, and `fun` may raise `Rejection`.
- `or_else(fun)` and `recover(fun)` handle a rejection; `map_err(fun)`
  replaces it with another error.
- `untuple_one()` unpacks a single extracted tuple into separate values.
- `with_(wrapper)` wraps a filter, for example to compress its responses.
- `boxed()` hides a composition behind an opaque `BoxedFilter`.

## Installation

```
pip install routeweave
```

## A first filter

```python
import asyncio

from routeweave.filter import Request
from routeweave.filters.any import any_
from routeweave.service import service

hello = any_().map(lambda: "Hello, World!")

svc = service(hello)
response = asyncio.run(svc.call(Request(path="/")))
assert response.status == 200
assert response.body == b"Hello, World!"
```

`routeweave.service.service(filter)` returns a `FilteredService`. Its
`call(request)` and `call_with_addr(request, remote_addr)` coroutines always
produce a `Response`: the filter's reply, or its rejection rendered as one.

Replies are turned into responses by `routeweave.filter.into_response`:
a `Response` is kept as it is, `str` becomes a `text/plain` body, `bytes`
an `application/octet-stream` body, an `HTTPStatus` an empty response with
that status, and `None` or `()` an empty `200 OK`. Any object with an
`into_response()` method is asked for its own response.

## Ready-made filters

```python
from routeweave.filters.addr import remote
from routeweave.filters.body import content_length_limit, json
from routeweave.filters.cookie import cookie, optional

# Accept a JSON body of at most 16 KiB.
upload = content_length_limit(16 * 1024).and_(json())

# Require a cookie named "session".
session = cookie("session")

# Look for a cookie, extracting None when it is absent.
theme = optional("theme")

# The remote address given to call_with_addr, or None.
peer = remote()
```

In `routeweave.filters.body`:

- `content_length_limit(limit)` rejects with 411 when the `content-length`
  header is missing or not a number, and with 413 when it is over `limit`.
- `bytes_()` extracts the whole body as `bytes`; `aggregate()` as a readable
  `io.BytesIO`; `stream()` as an async iterator of byte chunks, which raises
  `routeweave.errors.Error` if reading fails.
- `json()` decodes a JSON body; `form()` decodes an
  `application/x-www-form-urlencoded` body into a list of `(name, value)`
  pairs. Each accepts its own content-type (parameters such as `charset`
  are allowed) or no content-type at all, and rejects any other with 415.
  A body that cannot be decoded rejects with 400 and a message starting
  with `Request body deserialize error: `.
- A body can be taken only once per request; a second attempt rejects with
  500 and the message `Request body consumed multiple times`.

In `routeweave.filters.cookie`, `cookie(name)` rejects with 400 and
`Missing request cookie "<name>"` when the cookie is absent, or with
`Missing request header "cookie"` when there is no cookie header at all.

`routeweave.filters.any.any_()` matches every request and extracts nothing;
it is the usual start of a chain, or a way to hand shared state to a
handler with `any_().map(lambda: state)`.

## Writing your own filters

`routeweave.filter.filter_fn(func)` builds a filter from `func(route)`,
which returns a tuple of extracted values (or `None` for none), or an
awaitable of one; `filter_fn_one(func)` extracts the single value `func`
returns. The `Route` gives the request's `method`, `headers`, `path`,
`query`, `unmatched_path`, `extensions` and `remote_addr`, and
`take_body()`. Filters run only inside `with_route(route)`, which the
service sets up for each request.

## Rejections

A filter declines a request by raising a `routeweave.errors.Rejection`.
`not_found()` carries no reason; `known(cause)` answers with the cause's
`status` attribute and text; `custom(cause)` answers with 500. When `or_`
sees both alternatives reject, the rejections are combined: "not found"
gives way to anything else, a method mismatch (405) gives way to any other
status, and otherwise the higher status wins.

```python
from routeweave.errors import Rejection

class Forbidden(Exception):
    pass

async def handle(err: Rejection):
    if err.find(Forbidden) is not None:
        return "forbidden"
    raise err

guarded = session.recover(handle)
```

## Compression

```python
from routeweave.filters.compression import brotli, deflate, gzip

compressed = hello.with_(gzip())
```

`gzip()`, `deflate()` and `brotli()` return a `Compression` wrapper. The
wrapped reply's body is compressed, `content-encoding` is set to `gzip`,
`deflate` or `br` (appended to any existing value), and `content-length`
is removed.

## What this package does not do

- It does not listen on a socket or speak HTTP on the wire; it turns
  `Request` objects into `Response` objects, and plugging that into a
  server is up to you.
- It has no filters for matching paths, methods, headers or query strings,
  no static file serving, no CORS, logging or reply-header wrappers, and no
  websocket or server-sent-event support. Such filters can be written with
  `filter_fn` and `filter_fn_one`.