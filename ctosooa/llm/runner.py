"""Adapters that deliver prompts to the AI assistant (HTTPS API or local CLI)."""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import (
    DEFAULT_BASE_URL,
    DEFAULT_EXECUTABLE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_API_KEY,
    AssistantConfig,
)
from ..logging import get_logger

ANTHROPIC_VERSION = "2023-06-01"

_logger = get_logger("llm")


class AssistantError(RuntimeError):
    """Raised when the assistant cannot be reached or returns an unusable answer."""


@dataclass
class AssistantRequest:
    """Represents a single analysis request for the assistant."""

    prompt: str
    model: str
    max_tokens: int
    executable: str
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]


class AssistantRunner:
    """Executes prompts against the Anthropic API or a local assistant CLI."""

    def __init__(
        self,
        backend: str = "api",
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        executable: str = DEFAULT_EXECUTABLE,
        request_timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT,
        runner: Callable[[AssistantRequest], str] | None = None,
    ) -> None:
        if backend not in ("api", "cli"):
            raise ValueError(f"Unsupported backend for AssistantRunner: {backend}")
        self.backend = backend
        self.model = model
        self.max_tokens = max_tokens
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.executable = executable
        self.request_timeout = request_timeout
        if runner is not None:
            self._runner = runner
        else:
            self._runner = self._http_runner if backend == "api" else self._cli_runner

    @classmethod
    def from_config(cls, config: AssistantConfig) -> "AssistantRunner":
        return cls(
            config.backend,
            model=config.model,
            max_tokens=config.max_tokens,
            api_key=config.api_key,
            base_url=config.base_url,
            executable=config.executable,
            request_timeout=config.request_timeout,
        )

    def run(self, prompt: str) -> str:
        """Send the prompt to the assistant and return the response text."""
        request = AssistantRequest(
            prompt=prompt,
            model=self.model,
            max_tokens=self.max_tokens,
            executable=self.executable,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _http_runner(request: AssistantRequest) -> str:
        if not request.api_key:
            raise AssistantError(
                f"{ENV_API_KEY} environment variable not set. "
                "Get your API key from https://console.anthropic.com/"
            )
        endpoint = f"{request.base_url}/v1/messages"
        payload = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "x-api-key": request.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or DEFAULT_REQUEST_TIMEOUT
        _logger.debug("POST %s (%d prompt bytes)", endpoint, len(data))

        try:
            with urlopen(http_request, timeout=timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            message = AssistantRunner._error_message(detail) or exc.reason
            raise AssistantError(f"API request failed with status {exc.code}: {message}") from exc
        except URLError as exc:
            raise AssistantError(f"API request failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise AssistantError(f"Failed to parse API response: {exc}") from exc

        if not isinstance(response_payload, dict):
            raise AssistantError("Unexpected API response format")
        error = response_payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else None
            raise AssistantError(message or "API error")

        content = AssistantRunner._extract_text(response_payload)
        if not content:
            raise AssistantError("Unexpected API response format")
        return content

    @staticmethod
    def _cli_runner(request: AssistantRequest) -> str:
        prompt_path = write_prompt_file(request.prompt)
        try:
            with open(prompt_path, "r", encoding="utf-8") as handle:
                completed = subprocess.run(
                    [request.executable, "-p"],
                    stdin=handle,
                    check=True,
                    capture_output=True,
                    text=True,
                )
        except FileNotFoundError as exc:
            raise AssistantError(
                f"Unable to locate '{request.executable}'. Install the assistant CLI or use --backend api."
            ) from exc
        except subprocess.CalledProcessError as exc:
            message = (exc.stderr or "").strip() or str(exc.returncode)
            raise AssistantError(f"Assistant CLI failed with exit code {exc.returncode}: {message}") from exc
        finally:
            remove_prompt_file(prompt_path)

        output = completed.stdout.strip()
        if not output:
            raise AssistantError("Assistant CLI returned no output")
        return output

    @staticmethod
    def _extract_text(payload: dict[str, object]) -> str:
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            return ""
        first = content[0]
        if not isinstance(first, dict):
            return ""
        text = first.get("text")
        return text if isinstance(text, str) else ""

    @staticmethod
    def _error_message(detail: str) -> str:
        try:
            payload = json.loads(detail)
        except json.JSONDecodeError:
            return detail.strip()
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return detail.strip()


def write_prompt_file(prompt: str) -> str:
    """Write ``prompt`` to a temporary file and return its path."""
    handle, path = tempfile.mkstemp(prefix="ctosooa-", suffix=".txt")
    with os.fdopen(handle, "w", encoding="utf-8") as stream:
        stream.write(prompt)
    return path


def remove_prompt_file(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


__all__ = [
    "AssistantError",
    "AssistantRequest",
    "AssistantRunner",
    "remove_prompt_file",
    "write_prompt_file",
]
