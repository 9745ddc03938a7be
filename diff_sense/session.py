"""Rolling development-session state over working and staged changes."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal, Protocol

from diff_sense.config import AppConfig, SessionConfig
from diff_sense.diff_parser import Change, RawChangeSet, parse_change_set
from diff_sense.heuristics import is_breaking_removal, is_critical_path
from diff_sense.patterns import SessionPattern, detect_patterns
from diff_sense.risk import SessionRisk, assess_risk

logger = logging.getLogger(__name__)

ChangeComplexity = Literal["low", "medium", "high", "critical"]


class SessionError(RuntimeError):
    """Raised when the session lifecycle is used out of order."""


class NoActiveSessionError(SessionError):
    """Raised when a session operation runs before ``initialize()``."""


class RefreshInProgressError(SessionError):
    """Raised when ``refresh()`` is called while another refresh is running."""


class ChangeSource(Protocol):
    """Provider of raw change text and repository position."""

    def working_changes(self) -> RawChangeSet:
        """Return numstat and diff text for unstaged changes."""

    def staged_changes(self) -> RawChangeSet:
        """Return numstat and diff text for staged changes."""

    def current_branch(self) -> str:
        """Return the checked-out branch name."""

    def current_commit(self) -> str:
        """Return the HEAD commit id."""

    def has_unpushed_commits(self) -> bool:
        """Return True when local commits are not on any remote."""


@dataclass(slots=True)
class SessionStats:
    """Aggregate counts for the current session."""

    total_files: int
    insertions: int
    deletions: int
    changed_lines: int
    complexity: ChangeComplexity
    duration_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_files": self.total_files,
            "insertions": self.insertions,
            "deletions": self.deletions,
            "changed_lines": self.changed_lines,
            "complexity": self.complexity,
            "duration_minutes": self.duration_minutes,
        }


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class DevelopmentSession:
    """Working and staged changes since the session was anchored.

    ``stats``, ``risk`` and ``patterns`` are recomputed on every access.
    """

    id: str
    started_at: datetime
    base_commit: str
    base_branch: str
    branch: str
    working_changes: list[Change] = field(default_factory=list)
    staged_changes: list[Change] = field(default_factory=list)
    config: AppConfig = field(default_factory=AppConfig, repr=False, compare=False)
    clock: Callable[[], datetime] = field(default=_utc_now, repr=False, compare=False)

    @property
    def all_changes(self) -> list[Change]:
        return [*self.working_changes, *self.staged_changes]

    @property
    def duration_minutes(self) -> int:
        elapsed = (self.clock() - self.started_at).total_seconds()
        return max(0, int(elapsed // 60))

    @property
    def stats(self) -> SessionStats:
        changes = self.all_changes
        insertions = sum(change.insertions for change in changes)
        deletions = sum(change.deletions for change in changes)
        return SessionStats(
            total_files=len({change.path for change in changes}),
            insertions=insertions,
            deletions=deletions,
            changed_lines=insertions + deletions,
            complexity=classify_complexity(changes, self.config.session),
            duration_minutes=self.duration_minutes,
        )

    @property
    def risk(self) -> SessionRisk:
        changes = self.all_changes
        complexity = classify_complexity(changes, self.config.session)
        return assess_risk(changes, complexity, self.config.risk)

    @property
    def patterns(self) -> list[SessionPattern]:
        changes = self.all_changes
        return detect_patterns(
            changes,
            branch=self.base_branch,
            duration_minutes=self.duration_minutes,
            complexity=classify_complexity(changes, self.config.session),
            config=self.config.patterns,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "started_at": self.started_at.isoformat(),
            "base_commit": self.base_commit,
            "base_branch": self.base_branch,
            "branch": self.branch,
            "working_changes": [
                change.to_dict(include_hunks=False) for change in self.working_changes
            ],
            "staged_changes": [
                change.to_dict(include_hunks=False) for change in self.staged_changes
            ],
            "stats": self.stats.to_dict(),
            "risk": self.risk.to_dict(),
            "patterns": [pattern.to_dict() for pattern in self.patterns],
        }


def classify_complexity(
    changes: list[Change], config: SessionConfig | None = None
) -> ChangeComplexity:
    """Tier a set of changes by critical files, breaking removals and size."""
    effective_config = config or SessionConfig()
    total_files = len({change.path for change in changes})
    changed_lines = sum(change.changed_lines for change in changes)

    has_critical_file = any(
        is_critical_path(change.path, effective_config.critical_patterns) for change in changes
    )
    has_breaking_removal = any(
        is_breaking_removal(line.content) for change in changes for line in change.removed_lines()
    )
    if (
        has_critical_file
        or has_breaking_removal
        or changed_lines > effective_config.critical_lines
        or total_files > effective_config.critical_files
    ):
        return "critical"
    if changed_lines > effective_config.high_lines or total_files > effective_config.high_files:
        return "high"
    if changed_lines > effective_config.medium_lines or total_files > effective_config.medium_files:
        return "medium"
    return "low"


class SessionTracker:
    """Owns at most one open session and refreshes it from a change source."""

    def __init__(
        self,
        source: ChangeSource,
        config: AppConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.config = config or AppConfig()
        self.clock = clock or _utc_now
        self._session: DevelopmentSession | None = None
        self._refresh_lock = threading.Lock()

    @property
    def session(self) -> DevelopmentSession:
        if self._session is None:
            raise NoActiveSessionError("No active session; call initialize() first.")
        return self._session

    def initialize(self) -> DevelopmentSession:
        """Anchor a new empty session at the current commit and branch."""
        branch = self.source.current_branch()
        self._session = DevelopmentSession(
            id=uuid.uuid4().hex,
            started_at=self.clock(),
            base_commit=self.source.current_commit(),
            base_branch=branch,
            branch=branch,
            config=self.config,
            clock=self.clock,
        )
        logger.debug(f"Started session {self._session.id} on {branch}")
        return self._session

    def refresh(self) -> DevelopmentSession:
        """Replace the session's working and staged changes with fresh ones."""
        session = self.session
        if not self._refresh_lock.acquire(blocking=False):
            raise RefreshInProgressError("A refresh is already in progress for this session.")
        try:
            working = self.source.working_changes()
            staged = self.source.staged_changes()
            session.working_changes = parse_change_set(working.numstat, working.diff)
            session.staged_changes = parse_change_set(staged.numstat, staged.diff)
            session.branch = self.source.current_branch()
        finally:
            self._refresh_lock.release()
        logger.debug(
            f"Refreshed session {session.id}: {len(session.working_changes)} working, "
            f"{len(session.staged_changes)} staged"
        )
        return session

    def current_session(
        self, is_valid: Callable[[DevelopmentSession], bool] | None = None
    ) -> DevelopmentSession:
        """Reuse the open session when still valid, else start one; always refresh."""
        if self._session is None or (is_valid is not None and not is_valid(self._session)):
            self.initialize()
        return self.refresh()

    def has_changes(self) -> bool:
        session = self.session
        return bool(
            session.working_changes
            or session.staged_changes
            or self.source.has_unpushed_commits()
        )

    def reset(self) -> None:
        self._session = None
