"""Tests for session tracking and complexity tiers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from diff_sense.config import AppConfig, SessionConfig
from diff_sense.diff_parser import RawChangeSet
from diff_sense.session import (
    NoActiveSessionError,
    RefreshInProgressError,
    SessionTracker,
    classify_complexity,
)
from tests.helpers_changes import make_change, make_sized_change

STARTED_AT = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = STARTED_AT) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeSource:
    def __init__(
        self,
        working: RawChangeSet | None = None,
        staged: RawChangeSet | None = None,
        branch: str = "main",
        commit: str = "abc1234",
        unpushed: bool = False,
    ) -> None:
        self.working = working or RawChangeSet()
        self.staged = staged or RawChangeSet()
        self.branch = branch
        self.commit = commit
        self.unpushed = unpushed

    def working_changes(self) -> RawChangeSet:
        return self.working

    def staged_changes(self) -> RawChangeSet:
        return self.staged

    def current_branch(self) -> str:
        return self.branch

    def current_commit(self) -> str:
        return self.commit

    def has_unpushed_commits(self) -> bool:
        return self.unpushed


class ReentrantSource(FakeSource):
    """Calls back into the tracker while a refresh is still running."""

    def __init__(self) -> None:
        super().__init__()
        self.tracker: SessionTracker | None = None
        self.reenter = True

    def working_changes(self) -> RawChangeSet:
        if self.reenter and self.tracker is not None:
            self.tracker.refresh()
        return super().working_changes()


def _source_with_overlap() -> FakeSource:
    return FakeSource(
        working=RawChangeSet(numstat="3\t1\tsrc/app.py\n2\t0\tREADME.md\n"),
        staged=RawChangeSet(numstat="4\t2\tsrc/app.py\n"),
    )


def test_session_before_initialize_raises() -> None:
    tracker = SessionTracker(FakeSource())
    with pytest.raises(NoActiveSessionError):
        _ = tracker.session
    with pytest.raises(NoActiveSessionError):
        tracker.refresh()
    with pytest.raises(NoActiveSessionError):
        tracker.has_changes()


def test_initialize_anchors_commit_and_branch() -> None:
    tracker = SessionTracker(FakeSource(branch="feature/login", commit="deadbeef"))
    session = tracker.initialize()

    assert session.base_commit == "deadbeef"
    assert session.base_branch == "feature/login"
    assert session.branch == "feature/login"
    assert session.working_changes == []
    assert session.staged_changes == []
    assert session.stats.total_files == 0
    assert session.risk.level == "low"


def test_refresh_counts_files_once_across_working_and_staged() -> None:
    tracker = SessionTracker(_source_with_overlap())
    tracker.initialize()
    session = tracker.refresh()

    stats = session.stats
    assert len(session.all_changes) == 3
    assert stats.total_files == 2
    assert stats.insertions == 9
    assert stats.deletions == 3
    assert stats.changed_lines == 12
    assert stats.complexity == "low"


def test_refresh_is_idempotent_for_unchanged_source() -> None:
    tracker = SessionTracker(_source_with_overlap())
    tracker.initialize()
    first = tracker.refresh().to_dict()
    second = tracker.refresh().to_dict()

    assert first["stats"] == second["stats"]
    assert first["risk"] == second["risk"]
    assert first["working_changes"] == second["working_changes"]


def test_refresh_tracks_branch_switch_but_keeps_base() -> None:
    source = FakeSource(branch="main")
    tracker = SessionTracker(source)
    tracker.initialize()

    source.branch = "fix/crash"
    session = tracker.refresh()
    assert session.base_branch == "main"
    assert session.branch == "fix/crash"


def test_patterns_follow_base_branch_after_switch() -> None:
    numstat = "".join(f"1\t0\tsrc/jwt_{idx}.ts\n" for idx in range(5))
    source = FakeSource(working=RawChangeSet(numstat=numstat), branch="feature/jwt-auth")
    tracker = SessionTracker(source)
    tracker.initialize()

    source.branch = "main"
    session = tracker.refresh()

    assert session.branch == "main"
    types = [pattern.type for pattern in session.patterns]
    assert "feature-branch" in types
    feature = next(pattern for pattern in session.patterns if pattern.type == "feature-branch")
    assert feature.confidence == 0.9


def test_duration_uses_injected_clock() -> None:
    clock = FakeClock()
    tracker = SessionTracker(FakeSource(), clock=clock)
    session = tracker.initialize()

    assert session.duration_minutes == 0
    clock.now = STARTED_AT + timedelta(minutes=2, seconds=59)
    assert session.duration_minutes == 2
    assert session.stats.duration_minutes == 2


def test_overlapping_refresh_is_rejected() -> None:
    source = ReentrantSource()
    tracker = SessionTracker(source)
    source.tracker = tracker
    tracker.initialize()

    with pytest.raises(RefreshInProgressError):
        tracker.refresh()

    source.reenter = False
    assert tracker.refresh().working_changes == []


def test_current_session_reuses_valid_session() -> None:
    tracker = SessionTracker(FakeSource())
    first = tracker.current_session()
    again = tracker.current_session(is_valid=lambda session: True)
    replaced = tracker.current_session(is_valid=lambda session: False)

    assert again.id == first.id
    assert replaced.id != first.id


def test_has_changes_includes_unpushed_commits() -> None:
    source = FakeSource(unpushed=True)
    tracker = SessionTracker(source)
    tracker.current_session()
    assert tracker.has_changes() is True

    source.unpushed = False
    assert tracker.has_changes() is False


def test_reset_discards_session() -> None:
    tracker = SessionTracker(FakeSource())
    tracker.initialize()
    tracker.reset()
    with pytest.raises(NoActiveSessionError):
        _ = tracker.session


def test_session_to_dict_shape() -> None:
    tracker = SessionTracker(_source_with_overlap(), clock=FakeClock())
    payload = tracker.current_session().to_dict()

    assert payload["started_at"] == "2026-10-19T09:00:00+00:00"
    assert payload["stats"]["total_files"] == 2
    assert payload["risk"]["level"] == "low"
    assert payload["patterns"] == []
    assert "hunks" not in payload["working_changes"][0]


def test_complexity_critical_when_lines_exceed_threshold() -> None:
    changes = [make_sized_change(f"src/mod_{index}.py", 70) for index in range(17)]
    changes.append(make_sized_change("src/mod_17.py", 10))

    assert sum(change.changed_lines for change in changes) == 1200
    assert classify_complexity(changes) == "critical"


def test_complexity_critical_for_critical_path_or_breaking_removal() -> None:
    assert classify_complexity([make_sized_change("package.json", 1)]) == "critical"
    assert classify_complexity([make_sized_change("db/migrations/0002.sql", 1)]) == "critical"

    removal = make_change("src/api.ts", [], ["export function login() {}"])
    assert classify_complexity([removal]) == "critical"


def test_complexity_tiers_by_size() -> None:
    assert classify_complexity([make_sized_change("src/a.py", 10)]) == "low"
    assert classify_complexity([make_sized_change("src/a.py", 101)]) == "medium"
    assert classify_complexity([make_sized_change("src/a.py", 501)]) == "high"
    six_files = [make_sized_change(f"src/f{index}.py", 1) for index in range(6)]
    assert classify_complexity(six_files) == "medium"
    eleven_files = [make_sized_change(f"src/f{index}.py", 1) for index in range(11)]
    assert classify_complexity(eleven_files) == "high"


def test_complexity_never_drops_when_lines_grow() -> None:
    order = ["low", "medium", "high", "critical"]
    previous = 0
    for lines in (1, 50, 101, 400, 501, 999, 1001, 5000):
        tier = order.index(classify_complexity([make_sized_change("src/a.py", lines)]))
        assert tier >= previous
        previous = tier


def test_session_config_thresholds_apply() -> None:
    config = AppConfig(session=SessionConfig(medium_lines=5, high_lines=10, critical_lines=20))
    source = FakeSource(working=RawChangeSet(numstat="12\t0\tsrc/app.py\n"))
    session = SessionTracker(source, config=config).current_session()
    assert session.stats.complexity == "high"
