"""Static importance ranking for scanned files."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from .models import FileCandidate, ScoredCandidate

DEFAULT_SCORE = 400

_MANIFEST_NAMES = frozenset({"package.json", "composer.json"})
_ENTRYPOINT_NAMES = frozenset(
    {"index.js", "index.ts", "app.js", "app.ts", "main.js", "main.ts"}
)


def _in_directory(*segments: str) -> Callable[[FileCandidate], bool]:
    def predicate(candidate: FileCandidate) -> bool:
        directory = f"{candidate.directory}/"
        return any(f"{segment}/" in directory for segment in segments)

    return predicate


def _named(names: frozenset[str]) -> Callable[[FileCandidate], bool]:
    return lambda candidate: candidate.name in names


def _name_ends_with(suffix: str) -> Callable[[FileCandidate], bool]:
    return lambda candidate: candidate.name.endswith(suffix)


# Evaluated top to bottom; the first matching rule decides the score.
PRIORITY_RULES: Tuple[Tuple[Callable[[FileCandidate], bool], int], ...] = (
    (_named(_MANIFEST_NAMES), 1000),
    (_named(frozenset({"README.md"})), 900),
    (_named(_ENTRYPOINT_NAMES), 850),
    (_in_directory("/src/Controller"), 800),
    (_in_directory("/src/Service", "/src/Model", "/src/Entity"), 750),
    (_in_directory("/config", "/routes"), 700),
    (_name_ends_with("Controller.php"), 600),
    (_name_ends_with("Service.php"), 550),
    (_name_ends_with("Model.js"), 550),
    (_in_directory("/src"), 500),
    (_in_directory("/tests"), 100),
    (_in_directory("/vendor"), 50),
)


def score(candidate: FileCandidate) -> int:
    """Return the priority score of a candidate."""
    for predicate, value in PRIORITY_RULES:
        if predicate(candidate):
            return value
    return DEFAULT_SCORE


def rank(candidates: Sequence[FileCandidate]) -> List[ScoredCandidate]:
    """Score every candidate and order them by descending score.

    ``sorted`` is stable, so candidates with equal scores keep their input order.
    """
    scored = [ScoredCandidate(candidate=item, score=score(item)) for item in candidates]
    return sorted(scored, key=lambda entry: entry.score, reverse=True)


def prioritize(
    candidates: Sequence[FileCandidate], limit: Optional[int] = None
) -> List[FileCandidate]:
    """Return candidates ordered by importance, truncated to ``limit`` when given."""
    ordered = [entry.candidate for entry in rank(candidates)]
    if limit is not None:
        return ordered[: max(limit, 0)]
    return ordered


__all__ = ["DEFAULT_SCORE", "PRIORITY_RULES", "prioritize", "rank", "score"]
