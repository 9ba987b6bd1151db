"""Prompt assembly for codebase analysis."""

from __future__ import annotations

from typing import Sequence

from .logging import get_logger
from .models import FileCandidate

CONTEXT_PREAMBLE = "Analyze this codebase:\n\n"

ANALYSIS_INSTRUCTIONS = (
    "Provide a comprehensive analysis including:\n"
    "1. Project structure and organization\n"
    "2. Technologies and frameworks used\n"
    "3. Code quality observations\n"
    "4. Potential improvements\n"
    "5. Security considerations"
)

_logger = get_logger("prompting")


def build_context(candidates: Sequence[FileCandidate]) -> str:
    """Concatenate candidate contents under ``--- <path> ---`` headers."""
    parts = [CONTEXT_PREAMBLE]
    for candidate in candidates:
        try:
            content = candidate.location.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _logger.warning("Could not read %s: %s", candidate.path, exc)
            continue
        parts.append(f"\n--- {candidate.path} ---\n{content}\n")
    return "".join(parts)


def build_prompt(candidates: Sequence[FileCandidate]) -> str:
    """Return the full prompt sent to the assistant."""
    return f"{build_context(candidates)}\n\n{ANALYSIS_INSTRUCTIONS}"


__all__ = ["ANALYSIS_INSTRUCTIONS", "CONTEXT_PREAMBLE", "build_context", "build_prompt"]
