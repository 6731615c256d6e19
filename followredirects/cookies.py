"""
Cookie handling for redirect chains.

Only the name/value part of a cookie matters here: domain, path and expiry
attributes are parsed past and ignored. Values are carried verbatim, with no
decoding on the way in and no escaping on the way out.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .clients.pipeline import Header, get_header_values
from .policies import CookiePolicy

_WEEKDAYS = frozenset(
    {
        "mon",
        "tue",
        "wed",
        "thu",
        "fri",
        "sat",
        "sun",
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
        "saturday",
        "sunday",
    }
)


@dataclass(frozen=True, slots=True)
class Cookie:
    name: str
    values: tuple[str, ...] = ("",)

    @property
    def value(self) -> str:
        """First component of an `&`-delimited value."""
        return self.values[0] if self.values else ""

    def to_pair(self) -> str:
        return f"{self.name}={self.value}"


def _cookie_from_pair(pair: str) -> Cookie | None:
    name, sep, value = pair.partition("=")
    name = name.strip()
    if not sep or not name:
        return None
    return Cookie(name=name, values=tuple(value.strip().split("&")))


def _ends_inside_expires(fragment: str) -> bool:
    # "...; Expires=Wed" is the first half of "Expires=Wed, 21 Oct 2015 07:28:00 GMT"
    last_attr = fragment.rsplit(";", 1)[-1].strip()
    key, sep, value = last_attr.partition("=")
    return bool(sep) and key.strip().lower() == "expires" and value.strip().lower() in _WEEKDAYS


def split_set_cookie(value: str) -> list[str]:
    """Split a comma-joined Set-Cookie value into individual cookie strings."""
    parts: list[str] = []
    current = ""
    for piece in value.split(","):
        if current and _ends_inside_expires(current):
            current = f"{current},{piece}"
            continue
        if current.strip():
            parts.append(current.strip())
        current = piece
    if current.strip():
        parts.append(current.strip())
    return parts


def parse_set_cookie(value: str) -> Cookie | None:
    """Parse one Set-Cookie string; None when it carries no usable name."""
    return _cookie_from_pair(value.split(";", 1)[0])


def parse_set_cookie_headers(values: Iterable[str]) -> dict[str, Cookie]:
    """Parse every Set-Cookie occurrence; a repeated name keeps its last value."""
    cookies: dict[str, Cookie] = {}
    for header_value in values:
        for cookie_string in split_set_cookie(header_value):
            cookie = parse_set_cookie(cookie_string)
            if cookie is not None:
                cookies[cookie.name] = cookie
    return cookies


def parse_cookie_header(value: str | None) -> dict[str, Cookie]:
    """Parse a request `Cookie:` header (`a=1; b=2`)."""
    cookies: dict[str, Cookie] = {}
    if not value:
        return cookies
    for pair in value.split(";"):
        cookie = _cookie_from_pair(pair)
        if cookie is not None:
            cookies[cookie.name] = cookie
    return cookies


class CookieJar:
    """Latest cookie per name, accumulated across the hops of a chain.

    A jar is normally created per top-level call. Callers that want cookies
    to persist between calls can hand one jar to the middleware; mutation is
    locked so that jar may be shared between threads.
    """

    def __init__(self, cookies: Mapping[str, Cookie] | None = None):
        self._cookies: dict[str, Cookie] = dict(cookies or {})
        self._lock = threading.Lock()

    def update(self, cookies: Mapping[str, Cookie]) -> None:
        with self._lock:
            self._cookies.update(cookies)

    def select(self, policy: CookiePolicy | tuple[str, ...]) -> list[Cookie]:
        with self._lock:
            if policy is CookiePolicy.NONE:
                return []
            if policy is CookiePolicy.ALL:
                return list(self._cookies.values())
            return [self._cookies[name] for name in policy if name in self._cookies]

    def get(self, name: str) -> Cookie | None:
        with self._lock:
            return self._cookies.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._cookies

    def __len__(self) -> int:
        with self._lock:
            return len(self._cookies)

    def __repr__(self) -> str:
        return f"CookieJar({sorted(self._cookies)!r})"


def compute_cookie_header(
    response_headers: Iterable[Header],
    current_cookie_header: str | None,
    policy: CookiePolicy | tuple[str, ...],
    jar: CookieJar,
) -> str | None:
    """
    Work out the Cookie header for the next hop.

    Cookies already on the request are overlaid with the response's
    Set-Cookie values, that working set is merged into `jar`, and the
    cookies `policy` selects from the jar are formatted as `a=1; b=2`.
    Returns None when nothing is selected.
    """
    if policy is CookiePolicy.NONE:
        return None

    working = parse_cookie_header(current_cookie_header)
    working.update(parse_set_cookie_headers(get_header_values(response_headers, "Set-Cookie")))
    jar.update(working)

    header = "; ".join(cookie.to_pair() for cookie in jar.select(policy))
    return header or None
