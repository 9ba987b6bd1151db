"""Adapter that runs the assistant CLI inside a terminal emulator window."""

from __future__ import annotations

import shlex
import subprocess
from typing import Sequence

from ..config import DEFAULT_EXECUTABLE
from .runner import AssistantError, remove_prompt_file, write_prompt_file


class TerminalRunner:
    """Launches the assistant CLI in a separate terminal window.

    The terminal command is taken verbatim from configuration (for example
    ``["gnome-terminal", "--"]`` or ``["xterm", "-e"]``); nothing is detected.
    """

    def __init__(
        self,
        terminal_command: Sequence[str],
        *,
        executable: str | None = None,
        shell: str = "sh",
    ) -> None:
        if not terminal_command:
            raise AssistantError(
                "Terminal backend requires 'assistant.terminal' to be set in .ctosooa.yml"
            )
        self.terminal_command = list(terminal_command)
        self.executable = executable or DEFAULT_EXECUTABLE
        self.shell = shell

    def run(self, prompt: str) -> str:
        prompt_path = write_prompt_file(prompt)
        script = self._compose_script(prompt_path)
        args = [*self.terminal_command, self.shell, "-c", script]

        try:
            subprocess.Popen(args, start_new_session=True)
        except OSError as exc:
            remove_prompt_file(prompt_path)
            raise AssistantError(
                f"Unable to launch terminal '{self.terminal_command[0]}': {exc}"
            ) from exc

        return f"Analysis started in a new terminal ({self.terminal_command[0]})."

    def _compose_script(self, prompt_path: str) -> str:
        quoted = shlex.quote(prompt_path)
        # The terminal owns the prompt file from here on and removes it on exit.
        return f"{shlex.quote(self.executable)} -p < {quoted}; rm -f {quoted}"


__all__ = ["TerminalRunner"]
