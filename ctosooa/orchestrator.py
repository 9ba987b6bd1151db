"""Pipeline orchestration for the analyse command."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from .config import BACKENDS, AssistantConfig, ConfigError, CtosooaConfig, load_config
from .llm import AssistantRunner, TerminalRunner
from .logging import get_logger
from .models import FileCandidate, ScoredCandidate
from .prioritizer import rank
from .prompting import build_prompt
from .scanner import TreeScanner


class PromptRunner(Protocol):
    def run(self, prompt: str) -> str: ...


RunnerFactory = Callable[[AssistantConfig], PromptRunner]


@dataclass
class AnalysisOutcome:
    """Result of an analyse run."""

    root: Path
    selected: List[ScoredCandidate] = field(default_factory=list)
    response: Optional[str] = None
    skipped_entries: int = 0
    dry_run: bool = False

    @property
    def files(self) -> List[FileCandidate]:
        return [entry.candidate for entry in self.selected]


def build_runner(config: AssistantConfig) -> PromptRunner:
    """Return the runner matching the configured backend."""
    if config.backend == "terminal":
        return TerminalRunner(config.terminal, executable=config.executable)
    return AssistantRunner.from_config(config)


class Orchestrator:
    """Coordinates scanning, ranking and the assistant call for ``analyse``."""

    def __init__(
        self,
        scanner: TreeScanner | None = None,
        runner_factory: RunnerFactory | None = None,
        config_loader: Callable[[Path], CtosooaConfig] | None = None,
    ) -> None:
        self.scanner = scanner or TreeScanner()
        self.runner_factory = runner_factory or build_runner
        self.config_loader = config_loader or load_config
        self.logger = get_logger("orchestrator")

    def run_analyse(
        self,
        path: str | Path,
        *,
        limit: Optional[int] = None,
        backend: Optional[str] = None,
        model: Optional[str] = None,
        dry_run: bool = False,
        config_path: Path | None = None,
    ) -> AnalysisOutcome:
        """Analyse the directory at ``path`` and return the assistant's answer."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Directory '{path}' does not exist.")
        if not root.is_dir():
            raise NotADirectoryError(f"'{path}' is not a directory.")

        config = self.config_loader(config_path or Path.cwd())
        assistant = self._assistant_settings(config, backend=backend, model=model)
        effective_limit = limit if limit is not None else config.analyse.limit

        self.logger.info("Scanning files in %s", root)
        candidates = self.scanner.scan(root)
        skipped = self.scanner.skipped
        if skipped:
            self.logger.warning("Skipped %d unreadable entries", skipped)

        selected = rank(candidates)[: max(effective_limit, 0)]
        self.logger.debug(
            "Selected %d of %d candidates (limit %d)",
            len(selected),
            len(candidates),
            effective_limit,
        )

        outcome = AnalysisOutcome(
            root=root,
            selected=selected,
            skipped_entries=skipped,
            dry_run=dry_run,
        )
        if not selected or dry_run:
            return outcome

        prompt = build_prompt(outcome.files)
        runner = self.runner_factory(assistant)
        self.logger.info(
            "Sending %d files to the assistant (%s backend)", len(selected), assistant.backend
        )
        outcome.response = runner.run(prompt)
        return outcome

    @staticmethod
    def _assistant_settings(
        config: CtosooaConfig, *, backend: Optional[str], model: Optional[str]
    ) -> AssistantConfig:
        settings = config.assistant
        if backend is not None:
            if backend not in BACKENDS:
                raise ConfigError(f"Unknown assistant backend '{backend}'")
            settings = replace(settings, backend=backend)
        if model is not None:
            settings = replace(settings, model=model)
        return settings


__all__ = ["AnalysisOutcome", "Orchestrator", "build_runner"]
