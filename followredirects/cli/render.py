from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .results import CommandResult


_HOP_COLUMNS = ("hop", "method", "url", "status", "location")


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "redirect_limit": "Too many redirects",
        "bad_location": "Bad redirect",
        "timeout": "Timeout",
        "network_error": "Network error",
        "internal_error": "Internal error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _kv_table(data: dict[str, Any]) -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("key", style="bold")
    table.add_column("value")
    for key, value in data.items():
        table.add_row(Text(str(key)), Text("" if value is None else str(value)))
    return table


def _hops_table(hops: list[dict[str, Any]]) -> Table:
    table = Table(title="Redirect chain", title_justify="left")
    for column in _HOP_COLUMNS:
        table.add_column(column)
    for hop in hops:
        table.add_row(*(Text("" if hop.get(c) is None else str(hop[c])) for c in _HOP_COLUMNS))
    return table


def _render_fetch(data: dict[str, Any], *, stderr: Console, settings: RenderSettings) -> None:
    hops = data.get("hops")
    if hops and not settings.quiet:
        stderr.print(_hops_table(hops))
    if not settings.quiet:
        stderr.print(
            Text(f"{data.get('status')} {data.get('method')} {data.get('url')}"),
        )
    body = data.get("body")
    if body:
        sys.stdout.write(body)
        if not body.endswith("\n"):
            sys.stdout.write("\n")


def render_result(result: CommandResult, *, settings: RenderSettings) -> None:
    stdout = Console(file=sys.stdout, force_terminal=False, soft_wrap=True)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if not result.ok and result.error is not None:
        error = result.error
        stderr.print(Text(f"{_error_title(error.type)}: {error.message}"))
        if error.details:
            stderr.print(_kv_table(error.details))
        return

    data = result.data
    if isinstance(data, dict) and "status" in data and "url" in data:
        _render_fetch(data, stderr=stderr, settings=settings)
    elif isinstance(data, dict):
        stdout.print(_kv_table(data))
    elif data is not None:
        stdout.print(Text(str(data)))
