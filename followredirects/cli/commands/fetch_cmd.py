from __future__ import annotations

import click
import rich_click

from followredirects.clients.pipeline import HTTPRequest, HTTPResponse
from followredirects.exceptions import ConfigurationError
from followredirects.policies import FOLLOW_LIMIT, CookiePolicy, RedirectConfig
from followredirects.redirects import ALLOWED_METHODS

from ..context import CLIContext
from ..errors import usage_error
from ..runner import CommandOutput, run_command


def _parse_headers(raw: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise usage_error(f"Invalid header {item!r}; expected 'Name: value'.", header=item)
        headers[name.strip()] = value.strip()
    return headers


def _cookie_policy(cookies: tuple[str, ...], all_cookies: bool) -> CookiePolicy | tuple[str, ...]:
    if cookies and all_cookies:
        raise usage_error("--cookie and --all-cookies are mutually exclusive.")
    if all_cookies:
        return CookiePolicy.ALL
    if cookies:
        return cookies
    return CookiePolicy.NONE


@click.command(name="fetch", cls=rich_click.RichCommand)
@click.argument("url")
@click.option("-X", "--request", "method", default="GET", show_default=True, help="HTTP method.")
@click.option("-d", "--data", default=None, help="Request body, sent as-is.")
@click.option("-H", "--header", "headers", multiple=True, help="Extra header ('Name: value').")
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=FOLLOW_LIMIT,
    show_default=True,
    envvar="FOLLOWREDIRECTS_LIMIT",
    help="Maximum number of redirects to follow.",
)
@click.option(
    "--standards-compliant",
    is_flag=True,
    envvar="FOLLOWREDIRECTS_STANDARDS_COMPLIANT",
    help="Keep method and body on 301/302 instead of switching to GET.",
)
@click.option("--cookie", "cookies", multiple=True, help="Cookie name to carry across hops.")
@click.option("--all-cookies", is_flag=True, help="Carry every cookie across hops.")
@click.option("--trace", is_flag=True, help="Show every hop of the redirect chain.")
@click.option("--include-body/--no-include-body", default=True, help="Print the final body.")
@click.pass_obj
def fetch_cmd(
    ctx: CLIContext,
    *,
    url: str,
    method: str,
    data: str | None,
    headers: tuple[str, ...],
    limit: int,
    standards_compliant: bool,
    cookies: tuple[str, ...],
    all_cookies: bool,
    trace: bool,
    include_body: bool,
) -> None:
    """Request URL and follow redirects."""

    def fn(ctx: CLIContext, warnings: list[str]) -> CommandOutput:
        if not url.startswith(("http://", "https://")):
            raise usage_error("URL must start with http:// or https://", url=url)
        request_headers = _parse_headers(headers)
        try:
            redirects = RedirectConfig.build(
                limit=limit,
                standards_compliant=standards_compliant,
                cookies=_cookie_policy(cookies, all_cookies),
            )
        except ConfigurationError as e:
            raise usage_error(str(e)) from e

        verb = method.upper()
        if verb not in ALLOWED_METHODS:
            warnings.append(f"redirects are not followed for {verb} requests")

        hops: list[dict[str, object]] = []

        def record(req: HTTPRequest, resp: HTTPResponse) -> None:
            hops.append(
                {
                    "hop": req.context.get("redirect_hop", 0),
                    "method": req.method,
                    "url": req.url,
                    "status": resp.status_code,
                    "location": resp.header("Location"),
                }
            )

        client = ctx.build_client(redirects=redirects, on_response=record)
        response = client.request(verb, url, headers=request_headers, content=data)

        final = hops[-1] if hops else {"method": verb, "url": url}
        result: dict[str, object] = {
            "status": response.status_code,
            "method": final["method"],
            "url": response.url or final["url"],
            "redirects": max(len(hops) - 1, 0),
            "headers": [[k, v] for k, v in response.headers],
        }
        if trace:
            result["hops"] = hops
        if include_body:
            result["body"] = response.content.decode("utf-8", errors="replace")
        return CommandOutput(data=result, warnings=warnings)

    run_command(ctx, command="fetch", fn=fn)
