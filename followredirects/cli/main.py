from __future__ import annotations

import click
import rich_click

import followredirects
from followredirects.clients.http import DEFAULT_TIMEOUT

from .context import CLIContext
from .logging import configure_logging, restore_logging


@click.group(
    name="followredirects",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=rich_click.RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    envvar="FOLLOWREDIRECTS_TIMEOUT",
    help="Per-request timeout in seconds.",
)
@click.version_option(version=followredirects.__version__, prog_name="followredirects")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    timeout: float,
) -> None:
    if click_ctx.invoked_subcommand is None:
        # No args: show help; no network calls.
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    click_ctx.obj = CLIContext(
        output="json" if json_flag else output,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        timeout=timeout,
    )
    click_ctx.call_on_close(click_ctx.obj.close)

    previous_logging = configure_logging(verbosity=verbose, quiet=quiet)
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


# Register commands
from .commands.fetch_cmd import fetch_cmd as _fetch_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_fetch_cmd)
cli.add_command(_version_cmd)
