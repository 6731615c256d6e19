"""
Follow HTTP 301, 302, 303 and 307 redirects.

For 301, 302 and 303 the original GET, POST, PUT, PATCH or DELETE request is
re-issued as a GET without a body. With `standards_compliant=True` the method
and body survive a 301/302 instead, which is what HTTP/1.1 asks for and what
browsers do not do. A 307 always keeps the method and body, and HEAD/OPTIONS
requests are never converted.

The redirect chain is strictly sequential and all per-chain state (hop budget,
cookie jar) lives in the call, so one middleware instance can serve concurrent
callers.
"""

from __future__ import annotations

import logging
from typing import NoReturn, cast

import httpx

from .clients.pipeline import (
    HOP_SCOPED_CONTEXT_KEYS,
    AsyncPipeline,
    HTTPRequest,
    HTTPResponse,
    Pipeline,
    RequestContext,
    get_header,
    remove_headers,
    replace_header,
)
from .cookies import CookieJar, compute_cookie_header
from .exceptions import InvalidLocationError, MissingLocationError, RedirectLimitReached
from .policies import RedirectConfig

logger = logging.getLogger(__name__)

# HTTP methods for which redirects can be followed
ALLOWED_METHODS = frozenset({"HEAD", "OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"})
# Redirect status codes handled here
REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307})

_NEVER_CONVERTED_METHODS = frozenset({"HEAD", "OPTIONS"})
_BODY_HEADERS = ("Content-Length", "Content-Type", "Transfer-Encoding")
_FOLLOWED_SCHEMES = frozenset({"http", "https"})
# Characters httpx percent-escapes into a host instead of rejecting it
_BAD_HOST_CHARS = frozenset(" %\t")


def should_follow(method: str, status_code: int) -> bool:
    return method.upper() in ALLOWED_METHODS and status_code in REDIRECT_STATUS_CODES


def converts_to_get(method: str, status_code: int, config: RedirectConfig) -> bool:
    if method.upper() in _NEVER_CONVERTED_METHODS:
        return False
    return status_code in config.convert_to_get_statuses()


def resolve_location(request_url: str, response: HTTPResponse) -> str:
    """Resolve the response's Location header against the URL that was requested."""
    location = response.header("Location")
    if location is None or not location.strip():
        raise MissingLocationError(
            f"redirect response {response.status_code} from {request_url} has no Location header",
            response=response,
        )
    location = location.strip()

    def invalid(reason: str) -> InvalidLocationError:
        return InvalidLocationError(
            f"cannot resolve redirect Location {location!r} against {request_url}: {reason}",
            response=response,
            location=location,
        )

    try:
        target = httpx.URL(location)
        if target.scheme and not target.host:
            raise invalid("absolute URL has no host")
        resolved = httpx.URL(request_url).join(target)
    except httpx.InvalidURL as e:
        raise invalid(str(e)) from e

    if resolved.scheme not in _FOLLOWED_SCHEMES:
        raise invalid(f"unsupported scheme {resolved.scheme!r}")
    if not resolved.host or any(c in resolved.host for c in _BAD_HOST_CHARS):
        raise invalid(f"malformed host {resolved.host!r}")
    if resolved.port is not None and not 0 < resolved.port <= 65535:
        raise invalid(f"port {resolved.port} out of range")
    return str(resolved)


def build_redirect_request(
    request: HTTPRequest,
    response: HTTPResponse,
    config: RedirectConfig,
    *,
    body: bytes | None,
    jar: CookieJar,
    hop: int,
) -> HTTPRequest:
    """
    Derive the request for the next hop.

    `body` is the content the previous hop was sent with, captured before the
    pipeline saw the request; it is what a method-preserving hop re-sends.
    """
    url = resolve_location(request.url, response)
    headers = list(request.headers)

    if config.cookies_enabled:
        cookie_header = compute_cookie_header(
            response.headers, get_header(headers, "Cookie"), config.cookies, jar
        )
        if cookie_header is not None:
            headers = replace_header(headers, "Cookie", cookie_header)

    if converts_to_get(request.method, response.status_code, config):
        method = "GET"
        content = None
        headers = remove_headers(headers, *_BODY_HEADERS)
    else:
        method = request.method
        content = body

    context = {k: v for k, v in request.context.items() if k not in HOP_SCOPED_CONTEXT_KEYS}
    context["redirect_hop"] = hop
    return HTTPRequest(
        method=method,
        url=url,
        headers=headers,
        content=content,
        context=cast(RequestContext, context),
    )


def _limit_reached(
    request: HTTPRequest, response: HTTPResponse, config: RedirectConfig
) -> NoReturn:
    logger.warning(
        f"Redirect limit of {config.limit} reached: {request.method} {request.url} "
        f"-> {response.status_code} {response.header('Location')}"
    )
    raise RedirectLimitReached(response)


def _log_hop(previous: HTTPRequest, response: HTTPResponse, nxt: HTTPRequest, hop: int) -> None:
    logger.debug(
        f"Redirect hop {hop}: {previous.method} {previous.url} -> {response.status_code}, "
        f"following with {nxt.method} {nxt.url}"
    )


def follow(
    request: HTTPRequest,
    config: RedirectConfig,
    next: Pipeline,
    *,
    jar: CookieJar | None = None,
) -> HTTPResponse:
    """
    Send `request` through `next`, following redirects.

    Returns the first response that is not a followable redirect. Raises
    `RedirectLimitReached` carrying the last redirect response when more than
    `config.limit` redirects are indicated.
    """
    if jar is None:
        jar = CookieJar()
    remaining = config.limit
    hop = 0
    while True:
        body = request.content
        response = next(request)
        if not should_follow(request.method, response.status_code):
            return response
        if remaining == 0:
            _limit_reached(request, response, config)
        hop += 1
        nxt = build_redirect_request(request, response, config, body=body, jar=jar, hop=hop)
        _log_hop(request, response, nxt, hop)
        request = nxt
        remaining -= 1


async def follow_async(
    request: HTTPRequest,
    config: RedirectConfig,
    next: AsyncPipeline,
    *,
    jar: CookieJar | None = None,
) -> HTTPResponse:
    """Async counterpart of `follow`."""
    if jar is None:
        jar = CookieJar()
    remaining = config.limit
    hop = 0
    while True:
        body = request.content
        response = await next(request)
        if not should_follow(request.method, response.status_code):
            return response
        if remaining == 0:
            _limit_reached(request, response, config)
        hop += 1
        nxt = build_redirect_request(request, response, config, body=body, jar=jar, hop=hop)
        _log_hop(request, response, nxt, hop)
        request = nxt
        remaining -= 1


class FollowRedirects:
    """
    Middleware that follows redirects for everything behind it.

    Each call gets a fresh cookie jar unless `cookie_jar` is given, in which
    case cookies persist across calls made through this instance.
    """

    def __init__(
        self, config: RedirectConfig | None = None, *, cookie_jar: CookieJar | None = None
    ):
        self.config = config if config is not None else RedirectConfig()
        self.cookie_jar = cookie_jar

    def __call__(self, req: HTTPRequest, next: Pipeline) -> HTTPResponse:
        return follow(req, self.config, next, jar=self.cookie_jar)


class AsyncFollowRedirects:
    def __init__(
        self, config: RedirectConfig | None = None, *, cookie_jar: CookieJar | None = None
    ):
        self.config = config if config is not None else RedirectConfig()
        self.cookie_jar = cookie_jar

    async def __call__(self, req: HTTPRequest, next: AsyncPipeline) -> HTTPResponse:
        return await follow_async(req, self.config, next, jar=self.cookie_jar)
