from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from followredirects.cli.main import cli
from fakes import app_handler


@pytest.fixture(autouse=True)
def mock_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "followredirects.cli.context.default_transport",
        lambda: httpx.MockTransport(app_handler),
    )


def _invoke_json(*args: str) -> tuple[int, dict]:
    result = CliRunner().invoke(cli, ["--json", "-q", *args])
    return result.exit_code, json.loads(result.output)


def test_no_args_shows_help() -> None:
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 0
    assert "fetch" in result.output


def test_fetch_json_reports_final_response_and_hops() -> None:
    code, payload = _invoke_json("fetch", "https://app.example/login", "--all-cookies", "--trace")
    assert code == 0
    assert payload["ok"] is True
    assert payload["command"] == "fetch"
    data = payload["data"]
    assert data["status"] == 200
    assert data["url"] == "https://app.example/home"
    assert data["redirects"] == 2
    assert [h["status"] for h in data["hops"]] == [302, 302, 200]
    assert json.loads(data["body"])["cookie"] == "a=1; b=2"


def test_fetch_named_cookie_option() -> None:
    code, payload = _invoke_json("fetch", "https://app.example/login", "--cookie", "a")
    assert code == 0
    assert "hops" not in payload["data"]
    assert json.loads(payload["data"]["body"])["cookie"] == "a=1"


def test_fetch_limit_exceeded_exits_1() -> None:
    code, payload = _invoke_json("fetch", "https://app.example/loop", "--limit", "1")
    assert code == 1
    assert payload["ok"] is False
    assert payload["error"]["type"] == "redirect_limit"
    assert payload["error"]["details"] == {"status": 301, "location": "/loop"}


def test_fetch_limit_from_environment() -> None:
    result = CliRunner().invoke(
        cli,
        ["--json", "-q", "fetch", "https://app.example/login"],
        env={"FOLLOWREDIRECTS_LIMIT": "1"},
    )
    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["type"] == "redirect_limit"


def test_fetch_standards_compliant_keeps_post() -> None:
    code, payload = _invoke_json(
        "fetch",
        "https://app.example/login",
        "-X",
        "POST",
        "-d",
        "user=me",
        "--standards-compliant",
    )
    assert code == 0
    echoed = json.loads(payload["data"]["body"])
    assert echoed["method"] == "POST"
    assert echoed["body"] == "user=me"
    assert payload["data"]["method"] == "POST"


def test_fetch_rejects_non_http_url() -> None:
    result = CliRunner().invoke(cli, ["fetch", "not-a-url"])
    assert result.exit_code == 2
    assert "URL must start with http:// or https://" in result.output


def test_fetch_rejects_conflicting_cookie_flags() -> None:
    code, payload = _invoke_json(
        "fetch", "https://app.example/login", "--cookie", "a", "--all-cookies"
    )
    assert code == 2
    assert payload["error"]["type"] == "usage_error"


def test_fetch_rejects_malformed_header() -> None:
    code, payload = _invoke_json("fetch", "https://app.example/", "-H", "no-colon")
    assert code == 2
    assert "Invalid header" in payload["error"]["message"]


def test_fetch_table_output_prints_body_and_trace() -> None:
    result = CliRunner().invoke(cli, ["fetch", "https://app.example/upload", "--trace"])
    assert result.exit_code == 0
    assert "Redirect chain" in result.output
    assert "https://app.example/store" in result.output
    assert "307" in result.output


def test_version_json() -> None:
    code, payload = _invoke_json("version")
    assert code == 0
    assert payload["data"]["version"]
