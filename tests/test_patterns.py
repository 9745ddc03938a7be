"""Tests for development pattern detection."""

from __future__ import annotations

from diff_sense.config import PatternsConfig
from diff_sense.patterns import detect_patterns
from tests.helpers_changes import make_change, make_sized_change


def _changes(count: int):
    return [make_sized_change(f"src/file_{index}.py", 2) for index in range(count)]


def _types(patterns) -> list[str]:
    return [pattern.type for pattern in patterns]


def test_feature_branch_pattern() -> None:
    patterns = detect_patterns(
        _changes(5), branch="feature/jwt-auth", duration_minutes=0, complexity="low"
    )

    assert _types(patterns) == ["feature-branch"]
    assert patterns[0].confidence == 0.9
    assert patterns[0].evidence == ["Branch name suggests feature work: feature/jwt-auth"]


def test_feature_branch_needs_more_than_minimum_changes() -> None:
    patterns = detect_patterns(
        _changes(3), branch="feature/jwt-auth", duration_minutes=0, complexity="low"
    )
    assert patterns == []


def test_protected_branch_is_never_a_feature_branch() -> None:
    config = PatternsConfig(feature_keywords=["main"])
    patterns = detect_patterns(
        _changes(5), branch="main", duration_minutes=0, complexity="low", config=config
    )
    assert patterns == []


def test_rapid_iteration_above_rate() -> None:
    patterns = detect_patterns(
        _changes(12), branch="main", duration_minutes=60, complexity="high"
    )
    assert _types(patterns) == ["rapid-iteration"]
    assert patterns[0].confidence == 0.8
    assert patterns[0].evidence == ["High change frequency: 12.0 changes/hour"]


def test_rapid_iteration_at_rate_does_not_fire() -> None:
    patterns = detect_patterns(
        _changes(10), branch="main", duration_minutes=60, complexity="high"
    )
    assert patterns == []


def test_refactoring_ratio() -> None:
    refactored = [
        make_change(f"src/mod_{index}.py", ["import json"], ["import simplejson"])
        for index in range(4)
    ]
    plain = [make_sized_change("src/other_a.py", 1), make_sized_change("src/other_b.py", 1)]

    patterns = detect_patterns(
        refactored + plain, branch="main", duration_minutes=0, complexity="high"
    )
    assert _types(patterns) == ["refactoring"]
    assert patterns[0].confidence == 0.667
    assert patterns[0].evidence == ["4 of 6 files show refactoring patterns"]


def test_refactoring_needs_more_than_minimum_changes() -> None:
    refactored = [
        make_change(f"src/mod_{index}.py", ["import json"], ["import simplejson"])
        for index in range(5)
    ]
    patterns = detect_patterns(refactored, branch="main", duration_minutes=0, complexity="high")
    assert patterns == []


def test_bug_fixing_from_branch_name() -> None:
    patterns = detect_patterns(
        _changes(1), branch="fix/login-crash", duration_minutes=0, complexity="low"
    )
    assert _types(patterns) == ["bug-fixing"]
    assert patterns[0].confidence == 0.8
    assert patterns[0].evidence == ["Branch name suggests bug fix: fix/login-crash"]


def test_bug_fixing_from_added_error_handling() -> None:
    change = make_change("src/app.py", ["try:", "    run()", "except OSError:", "    pass"])
    patterns = detect_patterns([change], branch="main", duration_minutes=0, complexity="low")

    assert _types(patterns) == ["bug-fixing"]
    assert patterns[0].confidence == 0.6
    assert patterns[0].evidence == ["Error handling added in src/app.py"]


def test_bug_fixing_requires_low_complexity() -> None:
    patterns = detect_patterns(
        _changes(1), branch="fix/login-crash", duration_minutes=0, complexity="medium"
    )
    assert patterns == []
