"""
Per-hop observation hooks.

Hooks run inside the redirect loop, so they see every hop of a chain rather
than only the caller's original request and the final response.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from .clients.pipeline import HTTPRequest, HTTPResponse

RequestHook: TypeAlias = Callable[[HTTPRequest], None]
ResponseHook: TypeAlias = Callable[[HTTPRequest, HTTPResponse], None]
