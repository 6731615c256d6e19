from __future__ import annotations

import json
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import click
from rich.console import Console
from rich.text import Text

from .context import (
    CLIContext,
    build_result,
    error_info_for_exception,
    exit_code_for_exception,
)
from .render import RenderSettings, render_result
from .results import CommandResult


@dataclass(frozen=True, slots=True)
class CommandOutput:
    data: Any | None = None
    warnings: list[str] | None = None
    exit_code: int = 0


def _emit_json(result: CommandResult) -> None:
    payload = result.model_dump(by_alias=True, mode="json")
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")


def _emit_warnings(*, ctx: CLIContext, warnings: list[str]) -> None:
    if ctx.quiet or not warnings:
        return
    stderr = Console(file=sys.stderr, force_terminal=False)
    for w in warnings:
        stderr.print(Text(f"Warning: {w}"))


def emit_result(ctx: CLIContext, result: CommandResult) -> None:
    if ctx.output == "json":
        _emit_json(result)
        return
    render_result(
        result,
        settings=RenderSettings(output="table", quiet=ctx.quiet, verbosity=ctx.verbosity),
    )
    _emit_warnings(ctx=ctx, warnings=result.warnings)


CommandFn = Callable[[CLIContext, list[str]], CommandOutput]


def run_command(ctx: CLIContext, *, command: str, fn: CommandFn) -> None:
    started = time.time()
    warnings: list[str] = []
    try:
        out = fn(ctx, warnings)
        result = build_result(
            ok=True,
            command=command,
            started_at=started,
            data=out.data,
            warnings=(out.warnings or warnings),
        )
        emit_result(ctx, result)
        raise click.exceptions.Exit(out.exit_code)
    except click.exceptions.Exit:
        raise
    except Exception as exc:
        result = build_result(
            ok=False,
            command=command,
            started_at=started,
            data=None,
            warnings=warnings,
            error=error_info_for_exception(exc),
        )
        emit_result(ctx, result)
        raise click.exceptions.Exit(exit_code_for_exception(exc)) from exc
    finally:
        ctx.close()
