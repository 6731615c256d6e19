"""
Redirect policies.

A `RedirectConfig` is supplied when the redirect middleware is constructed and
is immutable afterwards, so one instance can be shared by every call made
through a client.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

FOLLOW_LIMIT = 3


class CookiePolicy(Enum):
    """Which accumulated cookies are re-attached on each hop."""

    NONE = "none"
    ALL = "all"


class RedirectConfig(BaseModel):
    """Redirect-following behavior.

    - `limit`: how many redirects are followed before giving up.
    - `standards_compliant`: when True, 301/302 keep the original method and
      body (HTTP/1.1 semantics) instead of switching to GET like browsers do.
    - `cookies`: `CookiePolicy.NONE`, `CookiePolicy.ALL`, or a sequence of
      cookie names to keep.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int = Field(FOLLOW_LIMIT, ge=0)
    standards_compliant: bool = False
    cookies: CookiePolicy | tuple[str, ...] = CookiePolicy.NONE

    @field_validator("cookies", mode="before")
    @classmethod
    def _coerce_cookies(cls, value: Any) -> Any:
        if isinstance(value, (list, set, frozenset)):
            return tuple(value)
        return value

    @field_validator("cookies")
    @classmethod
    def _check_cookie_names(cls, value: CookiePolicy | tuple[str, ...]) -> Any:
        if isinstance(value, tuple):
            for name in value:
                if not name.strip():
                    raise ValueError("cookie names must be non-empty")
        return value

    @classmethod
    def build(
        cls,
        *,
        limit: int = FOLLOW_LIMIT,
        standards_compliant: bool = False,
        cookies: CookiePolicy | str | Sequence[str] = CookiePolicy.NONE,
    ) -> RedirectConfig:
        """Construct a config, reporting bad values as `ConfigurationError`."""
        try:
            return cls(limit=limit, standards_compliant=standards_compliant, cookies=cookies)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid redirect configuration: {e}") from e

    @property
    def cookies_enabled(self) -> bool:
        return self.cookies is not CookiePolicy.NONE

    def convert_to_get_statuses(self) -> frozenset[int]:
        if self.standards_compliant:
            return frozenset({303})
        return frozenset({301, 302, 303})
