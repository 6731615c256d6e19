"""
Internal request pipeline primitives.

Requests and responses are modelled independently of the underlying HTTP
transport so redirect handling (and any other cross-cutting behavior) can be
implemented as middleware sitting in front of an opaque "send" callable.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeAlias, TypedDict, cast

Header: TypeAlias = tuple[str, str]


class RequestContext(TypedDict, total=False):
    timeout_seconds: float
    redirect_hop: int
    # Per-hop bookkeeping; never carried into the next hop.
    status_code: int
    response: Any
    response_headers: list[Header]


HOP_SCOPED_CONTEXT_KEYS = frozenset({"status_code", "response", "response_headers"})


class ResponseContext(TypedDict, total=False):
    http_version: str
    elapsed_seconds: float


@dataclass(slots=True)
class HTTPRequest:
    method: str
    url: str
    headers: list[Header] = field(default_factory=list)
    content: bytes | None = None
    context: RequestContext = field(default_factory=lambda: cast(RequestContext, {}))


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    headers: list[Header]
    content: bytes = b""
    url: str | None = None
    context: ResponseContext = field(default_factory=lambda: cast(ResponseContext, {}))

    def header(self, name: str) -> str | None:
        return get_header(self.headers, name)


def get_header(headers: Iterable[Header], name: str) -> str | None:
    """Return the first value for `name` (case-insensitive), or None."""
    lowered = name.lower()
    for key, value in headers:
        if key.lower() == lowered:
            return value
    return None


def get_header_values(headers: Iterable[Header], name: str) -> list[str]:
    lowered = name.lower()
    return [value for key, value in headers if key.lower() == lowered]


def remove_headers(headers: Iterable[Header], *names: str) -> list[Header]:
    lowered = {n.lower() for n in names}
    return [(key, value) for key, value in headers if key.lower() not in lowered]


def replace_header(headers: Iterable[Header], name: str, value: str) -> list[Header]:
    """Drop every `name` entry and append a single `name: value`."""
    out = remove_headers(headers, name)
    out.append((name, value))
    return out


Pipeline: TypeAlias = Callable[[HTTPRequest], HTTPResponse]
AsyncPipeline: TypeAlias = Callable[[HTTPRequest], Awaitable[HTTPResponse]]


class Middleware(Protocol):
    def __call__(self, req: HTTPRequest, next: Pipeline) -> HTTPResponse: ...


class AsyncMiddleware(Protocol):
    async def __call__(self, req: HTTPRequest, next: AsyncPipeline) -> HTTPResponse: ...


def compose(middlewares: Sequence[Middleware], terminal: Pipeline) -> Pipeline:
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        def _wrapped(
            req: HTTPRequest, *, _mw: Middleware = middleware, _n: Pipeline = next_pipeline
        ) -> HTTPResponse:
            return _mw(req, _n)

        pipeline = _wrapped
    return pipeline


def compose_async(middlewares: Sequence[AsyncMiddleware], terminal: AsyncPipeline) -> AsyncPipeline:
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        async def _wrapped(
            req: HTTPRequest,
            *,
            _mw: AsyncMiddleware = middleware,
            _n: AsyncPipeline = next_pipeline,
        ) -> HTTPResponse:
            return await _mw(req, _n)

        pipeline = _wrapped
    return pipeline
