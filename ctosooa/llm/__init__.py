"""Assistant runner adapters."""

from .runner import AssistantError, AssistantRunner
from .terminal import TerminalRunner

__all__ = ["AssistantError", "AssistantRunner", "TerminalRunner"]
