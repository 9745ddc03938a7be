"""Tests for numstat and unified diff parsing."""

from __future__ import annotations

import logging

from diff_sense.diff_parser import (
    parse_change,
    parse_change_set,
    parse_diff_output,
    parse_hunks,
    parse_numstat_line,
    split_diff_sections,
)
from tests.helpers_changes import load_fixture


def test_parse_change_pairs_numstat_with_diff_body() -> None:
    change = parse_change("3\t1\tsrc/auth.ts", load_fixture("auth_login.diff"))
    assert change is not None

    assert change.path == "src/auth.ts"
    assert change.kind == "modified"
    assert (change.insertions, change.deletions) == (3, 1)
    assert change.language == "typescript"
    assert len(change.hunks) == 1

    hunk = change.hunks[0]
    assert hunk.start_line == 1
    assert [line.kind for line in hunk.lines] == [
        "context",
        "removed",
        "added",
        "added",
        "added",
        "context",
    ]


def test_line_numbers_advance_only_on_added_lines() -> None:
    hunks = parse_hunks(
        "\n".join(
            [
                "@@ -10,3 +20,4 @@",
                " context",
                "-gone",
                "+first",
                " more context",
                "+second",
            ]
        )
    )
    assert len(hunks) == 1
    hunk = hunks[0]
    added = [line for line in hunk.lines if line.kind == "added"]
    assert [line.line_number for line in added] == [20, 21]
    assert all(line.line_number is None for line in hunk.lines if line.kind != "added")
    assert hunk.start_line == 20
    assert hunk.end_line == 22


def test_binary_numstat_counts_are_zero() -> None:
    entry = parse_numstat_line("-\t-\tassets/logo.png")
    assert entry is not None
    assert (entry.insertions, entry.deletions, entry.path) == (0, 0, "assets/logo.png")


def test_malformed_numstat_line_is_ignored() -> None:
    assert parse_numstat_line("not numstat at all") is None
    assert parse_numstat_line("x\t2\tsrc/app.py") is None
    assert parse_change("garbage", "") is None


def test_missing_diff_body_yields_no_hunks() -> None:
    change = parse_change("4\t2\tsrc/app.py", None)
    assert change is not None
    assert change.hunks == ()
    assert (change.insertions, change.deletions) == (4, 2)


def test_unparseable_hunk_header_does_not_raise() -> None:
    hunks = parse_hunks("@@ broken header @@\n+added")
    assert len(hunks) == 1
    assert hunks[0].start_line == 0
    assert hunks[0].lines[0].line_number == 0


def test_parse_diff_output_infers_kind_from_markers() -> None:
    changes = parse_diff_output(load_fixture("multi_file.diff"))
    assert [change.path for change in changes] == [
        "docs/guide.md",
        "src/legacy.py",
        "src/new_name.py",
    ]

    added, deleted, renamed = changes
    assert added.kind == "added"
    assert (added.insertions, added.deletions) == (2, 0)
    assert deleted.kind == "deleted"
    assert (deleted.insertions, deleted.deletions) == (0, 2)
    assert renamed.kind == "renamed"
    assert renamed.previous_path == "src/old_name.py"
    assert (renamed.insertions, renamed.deletions) == (1, 1)


def test_parse_diff_output_skips_bad_sections(caplog) -> None:
    text = "\n".join(
        [
            "diff --git nonsense",
            "+++ ",
            load_fixture("auth_login.diff"),
        ]
    )
    with caplog.at_level(logging.WARNING, logger="diff_sense.diff_parser"):
        changes = parse_diff_output(text)

    assert [change.path for change in changes] == ["src/auth.ts"]
    assert "Skipping unparseable diff section" in caplog.text


def test_parse_diff_output_ignores_non_diff_text() -> None:
    assert parse_diff_output("") == []
    assert parse_diff_output("hello\nworld\n") == []


def test_parse_change_set_matches_sections_and_brace_renames() -> None:
    numstat = "\n".join(
        [
            "2\t0\tdocs/guide.md",
            "0\t2\tsrc/legacy.py",
            "1\t1\tsrc/{old_name.py => new_name.py}",
            "7\t0\tsrc/untouched.py",
        ]
    )
    changes = parse_change_set(numstat, load_fixture("multi_file.diff"))
    by_path = {change.path: change for change in changes}

    assert list(by_path) == [
        "docs/guide.md",
        "src/legacy.py",
        "src/new_name.py",
        "src/untouched.py",
    ]
    assert by_path["src/legacy.py"].kind == "deleted"
    assert by_path["src/new_name.py"].previous_path == "src/old_name.py"
    assert by_path["src/untouched.py"].hunks == ()
    assert by_path["src/untouched.py"].insertions == 7


def test_parsing_same_text_twice_gives_equal_changes() -> None:
    diff_text = load_fixture("auth_login.diff")
    first = parse_change("3\t1\tsrc/auth.ts", diff_text)
    second = parse_change("3\t1\tsrc/auth.ts", diff_text)
    assert first is not None
    assert first == second
    assert first.hunks == second.hunks

    blob = load_fixture("multi_file.diff")
    assert parse_diff_output(blob) == parse_diff_output(blob)
    assert [change.to_dict() for change in parse_diff_output(blob)] == [
        change.to_dict() for change in parse_diff_output(blob)
    ]


def test_split_diff_sections_splits_on_file_headers() -> None:
    sections = split_diff_sections(load_fixture("multi_file.diff"))
    assert len(sections) == 3
    assert all(section.startswith("diff --git ") for section in sections)


def test_change_to_dict_can_omit_hunks() -> None:
    change = parse_change("3\t1\tsrc/auth.ts", load_fixture("auth_login.diff"))
    assert change is not None

    payload = change.to_dict(include_hunks=False)
    assert payload == {
        "path": "src/auth.ts",
        "kind": "modified",
        "insertions": 3,
        "deletions": 1,
        "previous_path": None,
    }
    assert change.to_dict()["hunks"][0]["lines"][2]["line_number"] == 1
