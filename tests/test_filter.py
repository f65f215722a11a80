from http import HTTPStatus

import pytest

from routeweave.errors import BodyConsumedMultipleTimes, Rejection, known, not_found
from routeweave.filter import (
    And,
    Filter,
    Map,
    Request,
    Response,
    Route,
    UntupleOne,
    Wrap,
    current_route,
    filter_fn,
    filter_fn_one,
    into_response,
    with_route,
)


def any_filter():
    return filter_fn(lambda route: ())


async def extract(f, request=None):
    with with_route(Route(request or Request())):
        ext = await f.filter()
    if len(ext) == 1:
        return ext[0]
    return ext


async def reply(f, request=None):
    with with_route(Route(request or Request())):
        try:
            ext = await f.filter()
        except Rejection as rejection:
            return into_response(rejection)
    return into_response(ext[0] if len(ext) == 1 else ext)


@pytest.mark.asyncio
async def test_flattens_tuples():
    str1 = any_filter().map(lambda: "warp")
    true1 = any_filter().map(lambda: True)
    unit1 = any_filter()

    assert await extract(str1) == "warp"
    assert await extract(unit1) == ()
    assert await extract(str1.and_(true1)) == ("warp", True)
    assert await extract(true1.and_(str1)) == (True, "warp")
    assert await extract(str1.and_(unit1)) == "warp"
    assert await extract(unit1.and_(str1)) == "warp"
    assert await extract(str1.and_(str1).and_(true1)) == ("warp", "warp", True)
    assert await extract(str1.and_(unit1).and_(true1)) == ("warp", True)
    assert await extract(unit1.and_(str1).and_(true1)) == ("warp", True)
    assert await extract(str1.and_(true1).and_(unit1)) == ("warp", True)

    str_true_unit = str1.and_(true1).and_(unit1)
    unit_str_true = unit1.and_(str1).and_(true1)
    assert await extract(str_true_unit.and_(unit_str_true)) == ("warp", True, "warp", True)
    combined = unit_str_true.and_(unit1).and_(str1).and_(str_true_unit)
    assert await extract(combined) == ("warp", True, "warp", "warp", True)


@pytest.mark.asyncio
async def test_map_reply_is_ok():
    ok = any_filter().map(lambda: Response())
    resp = await reply(ok)
    assert resp.status == 200


@pytest.mark.asyncio
async def test_map_unit_reply_is_empty_ok():
    resp = await reply(any_filter().map(lambda: None))
    assert resp.status == 200
    assert resp.body == b""


@pytest.mark.asyncio
async def test_and_stops_on_rejection():
    calls = []

    def reject(route):
        raise not_found()

    def record(route):
        calls.append("second")
        return ()

    f = filter_fn(reject).and_(filter_fn(record))
    resp = await reply(f)
    assert resp.status == 404
    assert calls == []


@pytest.mark.asyncio
async def test_map_not_called_on_rejection():
    calls = []

    def reject(route):
        raise known(BodyConsumedMultipleTimes())

    f = filter_fn(reject).map(lambda: calls.append("mapped"))
    resp = await reply(f)
    assert resp.status == 500
    assert resp.body == b"Request body consumed multiple times"
    assert calls == []


@pytest.mark.asyncio
async def test_untuple_one_unit():
    logged = []
    route = (
        filter_fn_one(lambda r: 7)
        .map(lambda num: logged.append(num))
        .untuple_one()
        .map(lambda: "done")
    )
    assert await extract(route) == "done"
    assert logged == [7]


@pytest.mark.asyncio
async def test_untuple_one_tuple():
    route = (
        any_filter()
        .map(lambda: (True, 33))
        .untuple_one()
        .map(lambda is_enabled, count: f"{is_enabled} {count}")
    )
    assert await extract(route) == "True 33"


@pytest.mark.asyncio
async def test_untuple_one_requires_tuple():
    with pytest.raises(TypeError):
        await extract(any_filter().map(lambda: 5).untuple_one())


@pytest.mark.asyncio
async def test_with_applies_wrapper():
    class Upper(Wrap):
        def wrap(self, filter):
            return filter.map(str.upper)

    f = any_filter().map(lambda: "warp").with_(Upper())
    assert await extract(f) == "WARP"


@pytest.mark.asyncio
async def test_filter_fn_one_async():
    async def method(route):
        return route.method

    assert await extract(filter_fn_one(method), Request(method="post")) == "POST"


@pytest.mark.asyncio
async def test_filter_fn_requires_tuple():
    with pytest.raises(TypeError):
        await extract(filter_fn(lambda route: "oops"))


@pytest.mark.asyncio
async def test_nested_route_scope_fails():
    async def nested(route):
        with with_route(Route(Request())):
            return ()

    with pytest.raises(RuntimeError):
        await extract(filter_fn(nested))


def test_current_route_outside_scope():
    with pytest.raises(RuntimeError):
        current_route()


def test_with_route_sets_current():
    route = Route(Request(path="/a"))
    with with_route(route) as active:
        assert current_route() is route
        assert active is route
    with pytest.raises(RuntimeError):
        current_route()


@pytest.mark.asyncio
async def test_composed_types():
    a = any_filter()
    combined = a.map(lambda: 1).and_(a.map(lambda: 2))
    assert isinstance(combined, And)
    assert isinstance(combined, Filter)
    assert await extract(combined) == (1, 2)

    mapped = a.map(lambda: 1)
    assert isinstance(mapped, Map)
    assert await extract(mapped) == 1

    untupled = a.map(lambda: ("x", "y")).untuple_one()
    assert isinstance(untupled, UntupleOne)
    assert await extract(untupled) == ("x", "y")


def test_route_take_body_once():
    route = Route(Request(body="foo=bar"))
    assert route.take_body() == b"foo=bar"
    assert route.take_body() is None


def test_route_path_and_query():
    route = Route(Request(path="/foo/bar?baz=quux"))
    assert route.path == "/foo/bar"
    assert route.query == "baz=quux"
    assert Route(Request(path="/")).query is None


def test_route_matched_index_reset():
    route = Route(Request(path="/foo/bar"))
    assert route.matched_path_index() == 0
    route.reset_matched_path_index(4)
    assert route.matched_path_index() == 4
    assert route.unmatched_path == "/bar"


def test_request_headers_lowercased():
    req = Request(method="get", headers={"Content-Type": "text/xml"})
    assert req.headers == {"content-type": "text/xml"}
    assert req.method == "GET"
    assert Route(req, ("1.2.3.4", 5678)).remote_addr == ("1.2.3.4", 5678)


def test_into_response_values():
    resp = into_response("hi")
    assert resp.status == 200
    assert resp.body == b"hi"
    assert into_response(HTTPStatus.BAD_REQUEST).status == 400
    assert into_response(b"raw").body == b"raw"
    existing = Response(status=201)
    assert into_response(existing) is existing


def test_into_response_rejections():
    assert into_response(not_found()).status == 404
    assert into_response(not_found()).body == b""
    resp = into_response(known(BodyConsumedMultipleTimes()))
    assert resp.status == 500
    assert resp.body == b"Request body consumed multiple times"


def test_into_response_custom_and_unsupported():
    class Reply:
        def into_response(self):
            return Response(status=202)

    assert into_response(Reply()).status == 202
    with pytest.raises(TypeError):
        into_response(object())