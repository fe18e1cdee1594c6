from __future__ import annotations

import json
from dataclasses import replace

import httpx
import pytest

import restwrap.cli as cli
from restwrap import RequestOptions, Service


@pytest.fixture
def served(monkeypatch):
    """Route every CLI request to an in-memory handler."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/missing":
            return httpx.Response(404, text="no such thing", request=request)
        return httpx.Response(200, json={"path": request.url.path}, request=request)

    transport = httpx.MockTransport(handler)

    class MockService(Service):
        def new_client(self, options: RequestOptions | None = None) -> httpx.Client:
            return super().new_client(replace(options or RequestOptions(), transport=transport))

    monkeypatch.setattr(cli, "Service", MockService)
    return seen


def test_pairs_parses_key_values() -> None:
    assert cli._pairs(["a=1", "b = x=y"], "=", "--param") == {"a": "1", "b": "x=y"}
    assert cli._pairs(None, "=", "--param") is None


def test_pairs_rejects_missing_separator() -> None:
    with pytest.raises(ValueError, match="--header expects KEY:VALUE"):
        cli._pairs(["no-separator"], ":", "--header")


def test_cli_prints_body_on_success(served, capsys) -> None:
    code = cli._main(
        ["get", "users", "--base-uri", "http://host/api/", "-p", "page=2", "-H", "X-Trace: abc", "--include"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines()[0] == "HTTP 200"
    assert json.loads(out.splitlines()[1]) == {"path": "/api/users"}
    assert str(served[0].url) == "http://host/api/users?page=2"
    assert served[0].headers["x-trace"] == "abc"
    assert served[0].headers["connection"] == "close"


def test_cli_sends_json_body(served) -> None:
    assert cli._main(["post", "http://host/items", "--json", '{"id": 1}', "--user", "u:p"]) == 0

    request = served[0]
    assert json.loads(request.content) == {"id": 1}
    assert request.headers["authorization"] == "Basic dTpw"


def test_cli_reports_error_status(served, capsys) -> None:
    code = cli._main(["get", "http://host/missing"])

    captured = capsys.readouterr()
    assert code == 1
    assert "no such thing" in captured.out
    assert "error: 404: resp error: no such thing" in captured.err


def test_cli_unsupported_method(served, capsys) -> None:
    assert cli._main(["trace", "http://host/"]) == 1
    assert "request method not support" in capsys.readouterr().err
    assert served == []


def test_cli_rejects_invalid_json(served) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli._main(["post", "http://host/", "--json", "{"])
    assert exc_info.value.code == 2
    assert served == []


def test_cli_rejects_user_without_password(served) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli._main(["get", "http://host/", "--user", "alice"])
    assert exc_info.value.code == 2
    assert served == []
