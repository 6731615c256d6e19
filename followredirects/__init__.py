"""
followredirects: follow HTTP redirects as request-pipeline middleware.

Example:
    ```python
    from followredirects import ClientConfig, HTTPClient, RedirectConfig

    config = ClientConfig(redirects=RedirectConfig(limit=5, cookies="all"))
    with HTTPClient(config) as client:
        response = client.post("https://example.com/login", content=b"user=me")
    ```
"""

from __future__ import annotations

from .clients.http import AsyncHTTPClient, ClientConfig, HTTPClient
from .clients.pipeline import HTTPRequest, HTTPResponse, compose, compose_async
from .cookies import Cookie, CookieJar, compute_cookie_header
from .exceptions import (
    ConfigurationError,
    FollowRedirectsError,
    InvalidLocationError,
    LocationError,
    MissingLocationError,
    RedirectLimitExceeded,
    RedirectLimitReached,
)
from .policies import CookiePolicy, RedirectConfig
from .redirects import (
    ALLOWED_METHODS,
    REDIRECT_STATUS_CODES,
    AsyncFollowRedirects,
    FollowRedirects,
    follow,
    follow_async,
)

__version__ = "0.1.0"

__all__ = [
    "ALLOWED_METHODS",
    "REDIRECT_STATUS_CODES",
    "AsyncFollowRedirects",
    "AsyncHTTPClient",
    "ClientConfig",
    "ConfigurationError",
    "Cookie",
    "CookieJar",
    "CookiePolicy",
    "FollowRedirects",
    "FollowRedirectsError",
    "HTTPClient",
    "HTTPRequest",
    "HTTPResponse",
    "InvalidLocationError",
    "LocationError",
    "MissingLocationError",
    "RedirectConfig",
    "RedirectLimitExceeded",
    "RedirectLimitReached",
    "compose",
    "compose_async",
    "compute_cookie_header",
    "follow",
    "follow_async",
    "__version__",
]
