"""
httpx-backed clients.

httpx does the wire work with its own redirect handling switched off; the
`FollowRedirects` middleware sits in front of it and owns every hop.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from contextlib import suppress
from dataclasses import dataclass, field
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any

import httpx

from ..hooks import RequestHook, ResponseHook
from ..policies import RedirectConfig
from ..redirects import AsyncFollowRedirects, FollowRedirects
from .pipeline import (
    AsyncMiddleware,
    AsyncPipeline,
    HTTPRequest,
    HTTPResponse,
    Middleware,
    Pipeline,
    RequestContext,
    ResponseContext,
    compose,
    compose_async,
    get_header,
    replace_header,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _default_user_agent() -> str:
    from .. import __version__

    return f"followredirects/{__version__}"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    redirects: RedirectConfig = field(default_factory=RedirectConfig)
    timeout: float = DEFAULT_TIMEOUT
    headers: Mapping[str, str] | None = None
    user_agent: str | None = None
    log_requests: bool = False
    on_request: RequestHook | None = None
    on_response: ResponseHook | None = None
    transport: httpx.BaseTransport | None = None
    async_transport: httpx.AsyncBaseTransport | None = None


def _discarding_cookie_jar() -> CookieJar:
    # httpx extracts Set-Cookie into the client store on every send; cookies are
    # carried per call by FollowRedirects, so the client keeps none.
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


def _build_httpx_request(req: HTTPRequest, default_timeout: float) -> httpx.Request:
    timeout = httpx.Timeout(req.context.get("timeout_seconds", default_timeout))
    return httpx.Request(
        req.method,
        req.url,
        headers=req.headers,
        content=req.content,
        extensions={"timeout": timeout.as_dict()},
    )


def _to_response(response: httpx.Response) -> HTTPResponse:
    context: ResponseContext = {"http_version": response.http_version}
    # elapsed is only set once the body has been read and the response closed
    with suppress(RuntimeError):
        context["elapsed_seconds"] = response.elapsed.total_seconds()
    return HTTPResponse(
        status_code=response.status_code,
        headers=list(response.headers.multi_items()),
        content=response.content,
        url=str(response.request.url),
        context=context,
    )


def _request_headers(
    config: ClientConfig, headers: Mapping[str, str] | None
) -> list[tuple[str, str]]:
    merged = [("User-Agent", config.user_agent or _default_user_agent())]
    for source in (config.headers, headers):
        for name, value in (source or {}).items():
            merged = replace_header(merged, name, value)
    return merged


def _log_exchange(req: HTTPRequest, resp: HTTPResponse) -> None:
    hop = req.context.get("redirect_hop", 0)
    location = get_header(resp.headers, "Location")
    suffix = f" -> {location}" if location else ""
    logger.info(f"{req.method} {req.url} [hop {hop}] {resp.status_code}{suffix}")


class _Observe:
    """Innermost middleware: hooks and request logging for each hop."""

    def __init__(self, config: ClientConfig):
        self._config = config

    def __call__(self, req: HTTPRequest, next: Pipeline) -> HTTPResponse:
        if self._config.on_request is not None:
            self._config.on_request(req)
        resp = next(req)
        if self._config.log_requests:
            _log_exchange(req, resp)
        if self._config.on_response is not None:
            self._config.on_response(req, resp)
        return resp


class _AsyncObserve:
    def __init__(self, config: ClientConfig):
        self._config = config

    async def __call__(self, req: HTTPRequest, next: AsyncPipeline) -> HTTPResponse:
        if self._config.on_request is not None:
            self._config.on_request(req)
        resp = await next(req)
        if self._config.log_requests:
            _log_exchange(req, resp)
        if self._config.on_response is not None:
            self._config.on_response(req, resp)
        return resp


class HTTPClient:
    """
    Synchronous HTTP client that follows redirects per `ClientConfig.redirects`.

    Extra middlewares run inside the redirect loop, once per hop.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        middlewares: Sequence[Middleware] = (),
    ):
        self._config = config if config is not None else ClientConfig()
        self._client = httpx.Client(
            timeout=self._config.timeout,
            transport=self._config.transport,
            follow_redirects=False,
            cookies=_discarding_cookie_jar(),
        )
        self._pipeline = compose(
            [FollowRedirects(self._config.redirects), *middlewares, _Observe(self._config)],
            self._send,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _send(self, req: HTTPRequest) -> HTTPResponse:
        response = self._client.send(_build_httpx_request(req, self._config.timeout))
        return _to_response(response)

    def send(self, req: HTTPRequest) -> HTTPResponse:
        return self._pipeline(req)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | str | None = None,
        timeout: float | None = None,
    ) -> HTTPResponse:
        context: RequestContext = {}
        if timeout is not None:
            context["timeout_seconds"] = timeout
        if isinstance(content, str):
            content = content.encode("utf-8")
        req = HTTPRequest(
            method=method.upper(),
            url=url,
            headers=_request_headers(self._config, headers),
            content=content,
            context=context,
        )
        return self.send(req)

    def get(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("GET", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("OPTIONS", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> HTTPResponse:
        return self.request("DELETE", url, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AsyncHTTPClient:
    """Asynchronous counterpart of `HTTPClient`."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        middlewares: Sequence[AsyncMiddleware] = (),
    ):
        self._config = config if config is not None else ClientConfig()
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            transport=self._config.async_transport,
            follow_redirects=False,
            cookies=_discarding_cookie_jar(),
        )
        self._pipeline = compose_async(
            [
                AsyncFollowRedirects(self._config.redirects),
                *middlewares,
                _AsyncObserve(self._config),
            ],
            self._send,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def _send(self, req: HTTPRequest) -> HTTPResponse:
        response = await self._client.send(_build_httpx_request(req, self._config.timeout))
        return _to_response(response)

    async def send(self, req: HTTPRequest) -> HTTPResponse:
        return await self._pipeline(req)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | str | None = None,
        timeout: float | None = None,
    ) -> HTTPResponse:
        context: RequestContext = {}
        if timeout is not None:
            context["timeout_seconds"] = timeout
        if isinstance(content, str):
            content = content.encode("utf-8")
        req = HTTPRequest(
            method=method.upper(),
            url=url,
            headers=_request_headers(self._config, headers),
            content=content,
            context=context,
        )
        return await self.send(req)

    async def get(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("GET", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("OPTIONS", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> HTTPResponse:
        return await self.request("DELETE", url, **kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AsyncHTTPClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
