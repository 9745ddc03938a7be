"""Development pattern detection for a session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from diff_sense.config import PatternsConfig
from diff_sense.diff_parser import Change
from diff_sense.heuristics import has_bugfix_keyword, has_structural_token

PatternType = Literal["rapid-iteration", "feature-branch", "refactoring", "bug-fixing"]

RAPID_ITERATION_CONFIDENCE = 0.8
FEATURE_BRANCH_CONFIDENCE = 0.9
BUGFIX_BRANCH_CONFIDENCE = 0.8
BUGFIX_CODE_CONFIDENCE = 0.6


@dataclass(slots=True)
class SessionPattern:
    """A detected development pattern."""

    type: PatternType
    confidence: float
    evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }


def detect_patterns(
    changes: list[Change],
    *,
    branch: str,
    duration_minutes: int,
    complexity: str,
    config: PatternsConfig | None = None,
) -> list[SessionPattern]:
    """Return every pattern whose trigger holds for the current session."""
    effective_config = config or PatternsConfig()
    detectors = (
        _rapid_iteration,
        _feature_branch,
        _refactoring,
        _bug_fixing,
    )
    patterns: list[SessionPattern] = []
    for detector in detectors:
        pattern = detector(changes, branch, duration_minutes, complexity, effective_config)
        if pattern is not None:
            patterns.append(pattern)
    return patterns


def _rapid_iteration(
    changes: list[Change],
    branch: str,
    duration_minutes: int,
    complexity: str,
    config: PatternsConfig,
) -> SessionPattern | None:
    if duration_minutes <= 0:
        return None
    rate = len(changes) / (duration_minutes / 60)
    if rate <= config.rapid_iteration_rate:
        return None
    return SessionPattern(
        type="rapid-iteration",
        confidence=RAPID_ITERATION_CONFIDENCE,
        evidence=[f"High change frequency: {rate:.1f} changes/hour"],
    )


def _feature_branch(
    changes: list[Change],
    branch: str,
    duration_minutes: int,
    complexity: str,
    config: PatternsConfig,
) -> SessionPattern | None:
    if branch in config.protected_branches or len(changes) <= config.feature_min_changes:
        return None
    if not _branch_matches(branch, config.feature_keywords):
        return None
    return SessionPattern(
        type="feature-branch",
        confidence=FEATURE_BRANCH_CONFIDENCE,
        evidence=[f"Branch name suggests feature work: {branch}"],
    )


def _refactoring(
    changes: list[Change],
    branch: str,
    duration_minutes: int,
    complexity: str,
    config: PatternsConfig,
) -> SessionPattern | None:
    if len(changes) <= config.refactoring_min_changes:
        return None
    refactored = sum(1 for change in changes if _looks_refactored(change))
    ratio = refactored / len(changes)
    if ratio <= config.refactoring_ratio:
        return None
    return SessionPattern(
        type="refactoring",
        confidence=round(ratio, 3),
        evidence=[f"{refactored} of {len(changes)} files show refactoring patterns"],
    )


def _bug_fixing(
    changes: list[Change],
    branch: str,
    duration_minutes: int,
    complexity: str,
    config: PatternsConfig,
) -> SessionPattern | None:
    if complexity != "low":
        return None
    if _branch_matches(branch, config.bugfix_keywords):
        return SessionPattern(
            type="bug-fixing",
            confidence=BUGFIX_BRANCH_CONFIDENCE,
            evidence=[f"Branch name suggests bug fix: {branch}"],
        )
    for change in changes:
        for line in change.added_lines():
            if has_bugfix_keyword(line.content):
                return SessionPattern(
                    type="bug-fixing",
                    confidence=BUGFIX_CODE_CONFIDENCE,
                    evidence=[f"Error handling added in {change.path}"],
                )
    return None


def _looks_refactored(change: Change) -> bool:
    added = any(has_structural_token(line.content) for line in change.added_lines())
    removed = any(has_structural_token(line.content) for line in change.removed_lines())
    return added and removed


def _branch_matches(branch: str, keywords: list[str]) -> bool:
    lowered = branch.lower()
    return any(keyword.lower() in lowered for keyword in keywords)
