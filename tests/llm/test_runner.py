"""Tests for the assistant runner."""

from __future__ import annotations

import io
import json
import os
import subprocess
from urllib.error import HTTPError

import pytest

from ctosooa.config import AssistantConfig
from ctosooa.llm.runner import AssistantError, AssistantRunner


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        if isinstance(self._payload, bytes):
            return self._payload
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_runner_constructs_request() -> None:
    captured = {}

    def fake_runner(request):
        captured["prompt"] = request.prompt
        captured["model"] = request.model
        captured["max_tokens"] = request.max_tokens
        captured["executable"] = request.executable
        captured["base_url"] = request.base_url
        captured["api_key"] = request.api_key
        captured["request_timeout"] = request.request_timeout
        return "response"

    runner = AssistantRunner(
        "cli",
        model="custom-model",
        max_tokens=256,
        executable="claude",
        base_url="https://example.test/",
        request_timeout=42.0,
        runner=fake_runner,
    )
    result = runner.run("Hello world")

    assert result == "response"
    assert captured == {
        "prompt": "Hello world",
        "model": "custom-model",
        "max_tokens": 256,
        "executable": "claude",
        "base_url": "https://example.test",
        "api_key": None,
        "request_timeout": 42.0,
    }


def test_runner_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError):
        AssistantRunner("terminal")


def test_from_config_copies_settings() -> None:
    config = AssistantConfig(backend="cli", model="m", max_tokens=7, executable="my-claude")

    runner = AssistantRunner.from_config(config)

    assert runner.backend == "cli"
    assert runner.model == "m"
    assert runner.max_tokens == 7
    assert runner.executable == "my-claude"


def test_http_runner_posts_messages_payload(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["method"] = request.get_method()
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"content": [{"type": "text", "text": "Looks tidy."}]})

    monkeypatch.setattr("ctosooa.llm.runner.urlopen", fake_urlopen)

    runner = AssistantRunner(
        "api",
        model="claude-3-5-sonnet-20241022",
        max_tokens=4096,
        api_key="secret",
        request_timeout=25.0,
    )
    result = runner.run("Analyze this codebase:")

    assert result == "Looks tidy."
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["method"] == "POST"
    headers = captured["headers"]
    assert headers["content-type"] == "application/json"
    assert headers["x-api-key"] == "secret"
    assert headers["anthropic-version"] == "2023-06-01"
    assert captured["payload"] == {
        "model": "claude-3-5-sonnet-20241022",
        "max_tokens": 4096,
        "messages": [{"role": "user", "content": "Analyze this codebase:"}],
    }
    assert captured["timeout"] == 25.0


def test_http_runner_requires_api_key(monkeypatch) -> None:
    def fail_urlopen(request, timeout=None):
        raise AssertionError("no request should be sent without an API key")

    monkeypatch.setattr("ctosooa.llm.runner.urlopen", fail_urlopen)

    with pytest.raises(AssistantError, match="ANTHROPIC_API_KEY"):
        AssistantRunner("api", api_key=None).run("prompt")


def test_http_runner_raises_payload_error(monkeypatch) -> None:
    monkeypatch.setattr(
        "ctosooa.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse(
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        ),
    )

    with pytest.raises(AssistantError, match="Overloaded"):
        AssistantRunner("api", api_key="k").run("prompt")


def test_http_runner_raises_on_unexpected_format(monkeypatch) -> None:
    monkeypatch.setattr(
        "ctosooa.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"content": []}),
    )

    with pytest.raises(AssistantError, match="Unexpected API response format"):
        AssistantRunner("api", api_key="k").run("prompt")


def test_http_runner_raises_on_invalid_json(monkeypatch) -> None:
    monkeypatch.setattr(
        "ctosooa.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse(b"<html>oops</html>"),
    )

    with pytest.raises(AssistantError, match="Failed to parse API response"):
        AssistantRunner("api", api_key="k").run("prompt")


def test_http_runner_reports_http_error_message(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        body = json.dumps({"error": {"message": "invalid x-api-key"}}).encode("utf-8")
        raise HTTPError(request.full_url, 401, "Unauthorized", {}, io.BytesIO(body))

    monkeypatch.setattr("ctosooa.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(AssistantError, match="status 401: invalid x-api-key"):
        AssistantRunner("api", api_key="bad").run("prompt")


def test_cli_runner_feeds_prompt_via_temp_file(monkeypatch) -> None:
    recorded = {}

    def fake_run(args, stdin, check, capture_output, text):  # type: ignore[no-untyped-def]
        recorded["args"] = list(args)
        recorded["path"] = stdin.name
        recorded["prompt"] = stdin.read()

        class _Completed:
            stdout = "  analysis text\n"

        return _Completed()

    monkeypatch.setattr("ctosooa.llm.runner.subprocess.run", fake_run)

    result = AssistantRunner("cli", executable="claude-bin").run("the prompt")

    assert result == "analysis text"
    assert recorded["args"] == ["claude-bin", "-p"]
    assert recorded["prompt"] == "the prompt"
    assert not os.path.exists(recorded["path"])


def test_cli_runner_cleans_up_and_raises_on_failure(monkeypatch) -> None:
    recorded = {}

    def fake_run(args, stdin, check, capture_output, text):  # type: ignore[no-untyped-def]
        recorded["path"] = stdin.name
        raise subprocess.CalledProcessError(2, args, output="", stderr="boom\n")

    monkeypatch.setattr("ctosooa.llm.runner.subprocess.run", fake_run)

    with pytest.raises(AssistantError, match="exit code 2: boom"):
        AssistantRunner("cli").run("prompt")
    assert not os.path.exists(recorded["path"])


def test_cli_runner_reports_missing_executable(monkeypatch) -> None:
    def fake_run(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise FileNotFoundError("claude")

    monkeypatch.setattr("ctosooa.llm.runner.subprocess.run", fake_run)

    with pytest.raises(AssistantError, match="Unable to locate 'claude'"):
        AssistantRunner("cli").run("prompt")


def test_cli_runner_rejects_empty_output(monkeypatch) -> None:
    class _Completed:
        stdout = "   \n"

    monkeypatch.setattr(
        "ctosooa.llm.runner.subprocess.run", lambda *args, **kwargs: _Completed()
    )

    with pytest.raises(AssistantError, match="no output"):
        AssistantRunner("cli").run("prompt")
