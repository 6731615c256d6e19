from __future__ import annotations

import platform

import click
import httpx
import rich_click

import followredirects

from ..context import CLIContext
from ..runner import CommandOutput, run_command


@click.command(name="version", cls=rich_click.RichCommand)
@click.pass_obj
def version_cmd(ctx: CLIContext) -> None:
    """Show version information."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        data = {
            "version": followredirects.__version__,
            "httpxVersion": httpx.__version__,
            "pythonVersion": platform.python_version(),
            "platform": platform.platform(),
        }
        return CommandOutput(data=data)

    run_command(ctx, command="version", fn=fn)
