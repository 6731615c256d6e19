"""
Exceptions raised by followredirects.

Transport failures raised by httpx are never wrapped; they propagate to the
caller exactly as the transport raised them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .clients.pipeline import HTTPResponse


class FollowRedirectsError(Exception):
    """Base class for followredirects exceptions."""


class ConfigurationError(FollowRedirectsError, ValueError):
    """Invalid redirect or client configuration."""


class RedirectLimitReached(FollowRedirectsError):
    """The hop budget ran out while the server still asked for a redirect.

    The last redirect response received is available as `response`.
    """

    def __init__(self, response: HTTPResponse):
        self.response = response
        super().__init__(f"too many redirects; last one to: {self.location}")

    @property
    def location(self) -> str | None:
        return self.response.header("Location")

    @property
    def status_code(self) -> int:
        return self.response.status_code


RedirectLimitExceeded = RedirectLimitReached


class LocationError(FollowRedirectsError):
    """A redirect response could not be turned into a follow-up URL."""

    def __init__(self, message: str, *, response: HTTPResponse):
        super().__init__(message)
        self.response = response


class MissingLocationError(LocationError):
    """A redirect status arrived without a usable Location header."""


class InvalidLocationError(LocationError, ValueError):
    """The Location header could not be resolved to a URL."""

    def __init__(self, message: str, *, response: HTTPResponse, location: str):
        super().__init__(message, response=response)
        self.location = location
