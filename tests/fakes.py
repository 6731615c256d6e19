from __future__ import annotations

from collections.abc import Iterable

import httpx

from followredirects.clients.pipeline import HTTPRequest, HTTPResponse


class ScriptedNext:
    """A `Next` pipeline that replays canned responses and records requests."""

    def __init__(self, *responses: HTTPResponse):
        self.responses = list(responses)
        self.requests: list[HTTPRequest] = []

    def __call__(self, req: HTTPRequest) -> HTTPResponse:
        self.requests.append(req)
        return self.responses.pop(0)


def redirect(status: int, location: str | None, set_cookies: Iterable[str] = ()) -> HTTPResponse:
    headers = [] if location is None else [("Location", location)]
    headers.extend(("Set-Cookie", c) for c in set_cookies)
    return HTTPResponse(status_code=status, headers=headers)


def ok(body: bytes = b"done") -> HTTPResponse:
    return HTTPResponse(status_code=200, headers=[("Content-Type", "text/plain")], content=body)


def _echo(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "url": str(request.url),
            "cookie": request.headers.get("cookie"),
            "contentType": request.headers.get("content-type"),
            "body": request.content.decode(),
        },
        request=request,
    )


def app_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/login":
        return httpx.Response(
            302,
            headers=[("Location", "/session"), ("Set-Cookie", "a=1; Path=/; HttpOnly")],
            request=request,
        )
    if path == "/session":
        return httpx.Response(
            302,
            headers=[("Location", "/home"), ("Set-Cookie", "b=2; Path=/")],
            request=request,
        )
    if path == "/upload":
        return httpx.Response(307, headers={"Location": "/store"}, request=request)
    if path == "/loop":
        return httpx.Response(301, headers={"Location": "/loop"}, request=request)
    return _echo(request)
