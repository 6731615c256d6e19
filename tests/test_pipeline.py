from __future__ import annotations

import pytest

from followredirects.clients.pipeline import (
    HTTPRequest,
    HTTPResponse,
    Pipeline,
    compose,
    compose_async,
    get_header,
    get_header_values,
    remove_headers,
    replace_header,
)


def test_header_lookup_is_case_insensitive() -> None:
    headers = [("Set-Cookie", "a=1"), ("content-type", "text/html"), ("SET-COOKIE", "b=2")]
    assert get_header(headers, "Content-Type") == "text/html"
    assert get_header(headers, "set-cookie") == "a=1"
    assert get_header(headers, "Location") is None
    assert get_header_values(headers, "Set-Cookie") == ["a=1", "b=2"]


def test_replace_and_remove_headers_do_not_mutate_input() -> None:
    headers = [("Cookie", "old=1"), ("Accept", "*/*"), ("cookie", "older=0")]
    replaced = replace_header(headers, "Cookie", "new=2")
    assert replaced == [("Accept", "*/*"), ("Cookie", "new=2")]
    assert remove_headers(headers, "ACCEPT") == [("Cookie", "old=1"), ("cookie", "older=0")]
    assert headers == [("Cookie", "old=1"), ("Accept", "*/*"), ("cookie", "older=0")]


def test_compose_runs_first_middleware_outermost() -> None:
    order: list[str] = []

    def make(name: str):
        def mw(req: HTTPRequest, next: Pipeline) -> HTTPResponse:
            order.append(f"{name}:before")
            resp = next(req)
            order.append(f"{name}:after")
            return resp

        return mw

    def terminal(req: HTTPRequest) -> HTTPResponse:
        order.append("terminal")
        return HTTPResponse(status_code=204, headers=[])

    pipeline = compose([make("outer"), make("inner")], terminal)
    resp = pipeline(HTTPRequest(method="GET", url="https://example.test/"))
    assert resp.status_code == 204
    assert order == ["outer:before", "inner:before", "terminal", "inner:after", "outer:after"]


@pytest.mark.asyncio
async def test_compose_async_chains_middlewares() -> None:
    seen: list[str] = []

    async def tag(req: HTTPRequest, next):  # type: ignore[no-untyped-def]
        seen.append(req.url)
        return await next(req)

    async def terminal(req: HTTPRequest) -> HTTPResponse:
        return HTTPResponse(status_code=200, headers=[], content=b"ok")

    pipeline = compose_async([tag, tag], terminal)
    resp = await pipeline(HTTPRequest(method="GET", url="https://example.test/a"))
    assert resp.content == b"ok"
    assert seen == ["https://example.test/a", "https://example.test/a"]
