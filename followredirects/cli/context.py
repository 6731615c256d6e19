from __future__ import annotations

import time
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from followredirects import ClientConfig, HTTPClient, RedirectConfig
from followredirects.exceptions import (
    FollowRedirectsError,
    LocationError,
    RedirectLimitReached,
)
from followredirects.hooks import ResponseHook

from .errors import CLIError
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


def default_transport() -> httpx.BaseTransport | None:
    """Transport for CLI clients; None lets httpx pick its own."""
    return None


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    timeout: float
    _client: HTTPClient | None = field(default=None, repr=False)

    def build_client(
        self,
        *,
        redirects: RedirectConfig,
        on_response: ResponseHook | None = None,
    ) -> HTTPClient:
        self.close()
        self._client = HTTPClient(
            ClientConfig(
                redirects=redirects,
                timeout=self.timeout,
                log_requests=self.verbosity >= 1,
                on_response=on_response,
                transport=default_transport(),
            )
        )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, httpx.HTTPError):
        return 5
    return 1


def _details_for(exc: Exception) -> dict[str, Any] | None:
    if isinstance(exc, RedirectLimitReached):
        return {"status": exc.status_code, "location": exc.location}
    if isinstance(exc, LocationError):
        return {"status": exc.response.status_code, "location": exc.response.header("Location")}
    if isinstance(exc, httpx.RequestError):
        with suppress(RuntimeError):
            return {"url": str(exc.request.url)}
    return None


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(type=exc.error_type, message=exc.message, details=exc.details)
    if isinstance(exc, RedirectLimitReached):
        error_type = "redirect_limit"
    elif isinstance(exc, LocationError):
        error_type = "bad_location"
    elif isinstance(exc, httpx.TimeoutException):
        error_type = "timeout"
    elif isinstance(exc, httpx.HTTPError):
        error_type = "network_error"
    elif isinstance(exc, FollowRedirectsError):
        error_type = exc.__class__.__name__
    else:
        error_type = "internal_error"
    return ErrorInfo(type=error_type, message=str(exc), details=_details_for(exc))


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=CommandMeta(duration_ms=duration_ms),
        error=error,
    )
