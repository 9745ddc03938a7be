"""Unified diff and numstat parser primitives.

Parsing is best-effort: malformed input degrades to empty hunk lists or
skipped file sections and never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from re import Match, compile
from typing import Any, Literal

from diff_sense.heuristics import detect_language

logger = logging.getLogger(__name__)

HUNK_HEADER_RE = compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@(?P<section>.*)$"
)
DIFF_HEADER_RE = compile(r"^diff --git a/(?P<old_path>.+?) b/(?P<new_path>.+)$")
BRACE_RENAME_RE = compile(r"^(?P<prefix>.*)\{(?P<old>.*) => (?P<new>.*)\}(?P<suffix>.*)$")

ChangeKind = Literal["added", "modified", "deleted", "renamed"]
LineKind = Literal["added", "removed", "context"]


@dataclass(frozen=True, slots=True)
class Line:
    """A single line within a diff hunk, marker stripped."""

    kind: LineKind
    content: str
    line_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "content": self.content, "line_number": self.line_number}


@dataclass(frozen=True, slots=True)
class Hunk:
    """A contiguous diff region anchored at a new-file line."""

    header: str
    start_line: int
    end_line: int
    lines: tuple[Line, ...] = ()

    @property
    def added_count(self) -> int:
        return sum(1 for line in self.lines if line.kind == "added")

    @property
    def removed_count(self) -> int:
        return sum(1 for line in self.lines if line.kind == "removed")

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True, slots=True)
class Change:
    """One modified file."""

    path: str
    kind: ChangeKind
    insertions: int
    deletions: int
    previous_path: str | None = None
    hunks: tuple[Hunk, ...] = ()

    @property
    def changed_lines(self) -> int:
        return self.insertions + self.deletions

    @property
    def language(self) -> str:
        return detect_language(self.path)

    def added_lines(self) -> list[Line]:
        return [line for hunk in self.hunks for line in hunk.lines if line.kind == "added"]

    def removed_lines(self) -> list[Line]:
        return [line for hunk in self.hunks for line in hunk.lines if line.kind == "removed"]

    def to_dict(self, *, include_hunks: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": self.path,
            "kind": self.kind,
            "insertions": self.insertions,
            "deletions": self.deletions,
            "previous_path": self.previous_path,
        }
        if include_hunks:
            payload["hunks"] = [hunk.to_dict() for hunk in self.hunks]
        return payload


@dataclass(frozen=True, slots=True)
class NumstatEntry:
    """Parsed ``git diff --numstat`` line."""

    insertions: int
    deletions: int
    path: str
    previous_path: str | None = None


@dataclass(frozen=True, slots=True)
class RawChangeSet:
    """Numstat and unified diff text for one side of the working tree."""

    numstat: str = ""
    diff: str = ""


def parse_numstat_line(line: str) -> NumstatEntry | None:
    """Parse ``<insertions>\\t<deletions>\\t<path>``; binary ``-`` counts become 0."""
    parts = line.rstrip("\r\n").split("\t")
    if len(parts) < 3:
        logger.debug(f"Ignoring malformed numstat line: {line!r}")
        return None

    insertions = _parse_count(parts[0])
    deletions = _parse_count(parts[1])
    raw_path = "\t".join(parts[2:]).strip()
    if insertions is None or deletions is None or not raw_path:
        logger.debug(f"Ignoring malformed numstat line: {line!r}")
        return None

    path, previous_path = _split_rename(raw_path)
    return NumstatEntry(
        insertions=insertions,
        deletions=deletions,
        path=path,
        previous_path=previous_path,
    )


def parse_change(
    numstat_line: str,
    diff_text: str | None,
    kind: ChangeKind | None = None,
) -> Change | None:
    """Build one Change from a numstat line and the diff body for that path."""
    entry = parse_numstat_line(numstat_line)
    if entry is None:
        return None
    return _build_change(entry, diff_text or "", kind)


def parse_hunks(diff_text: str) -> tuple[Hunk, ...]:
    """Parse hunks from a single-file diff body."""
    hunks: list[Hunk] = []
    header: str | None = None
    start_line = 0
    next_line = 0
    lines: list[Line] = []

    def flush_hunk() -> None:
        nonlocal header, lines
        if header is not None:
            hunks.append(
                Hunk(header=header, start_line=start_line, end_line=next_line, lines=tuple(lines))
            )
        header = None
        lines = []

    for raw_line in diff_text.splitlines():
        if raw_line.startswith("@@"):
            flush_hunk()
            header = raw_line
            start_line = _new_start_line(raw_line)
            next_line = start_line
            continue

        if raw_line.startswith("diff --git "):
            flush_hunk()
            continue

        if header is None:
            continue

        if raw_line.startswith("+"):
            lines.append(Line(kind="added", content=raw_line[1:], line_number=next_line))
            next_line += 1
        elif raw_line.startswith("-"):
            lines.append(Line(kind="removed", content=raw_line[1:]))
        elif raw_line.startswith(" "):
            lines.append(Line(kind="context", content=raw_line[1:]))
        elif raw_line == "":
            lines.append(Line(kind="context", content=""))

    flush_hunk()
    return tuple(hunks)


def parse_diff_output(diff_text: str) -> list[Change]:
    """Split a multi-file diff blob on ``diff --git`` and parse each file section.

    A section that cannot be parsed is skipped with a warning.
    """
    changes: list[Change] = []
    for section in split_diff_sections(diff_text):
        try:
            changes.append(_parse_section(section))
        except ValueError as exc:
            logger.warning(f"Skipping unparseable diff section: {exc}")
    return changes


def parse_change_set(numstat_text: str, diff_text: str) -> list[Change]:
    """Pair each numstat line with its section of a multi-file diff blob."""
    sections_by_path: dict[str, str] = {}
    for section in split_diff_sections(diff_text):
        try:
            path, _previous = _section_paths(section)
        except ValueError as exc:
            logger.warning(f"Skipping unparseable diff section: {exc}")
            continue
        sections_by_path[path] = section

    changes: list[Change] = []
    for raw_line in numstat_text.splitlines():
        if not raw_line.strip():
            continue
        entry = parse_numstat_line(raw_line)
        if entry is None:
            logger.warning(f"Skipping malformed numstat line: {raw_line!r}")
            continue
        changes.append(_build_change(entry, sections_by_path.get(entry.path, ""), None))
    return changes


def split_diff_sections(diff_text: str) -> list[str]:
    """Return one text block per file in a multi-file diff."""
    sections: list[list[str]] = []
    current: list[str] = []
    for raw_line in diff_text.splitlines():
        if raw_line.startswith("diff --git "):
            if current:
                sections.append(current)
            current = [raw_line]
            continue
        current.append(raw_line)
    if current:
        sections.append(current)

    return [
        "\n".join(section)
        for section in sections
        if section[0].startswith("diff --git ") or any(line.startswith("+++ ") for line in section)
    ]


def _build_change(entry: NumstatEntry, diff_text: str, kind: ChangeKind | None) -> Change:
    hunks = parse_hunks(diff_text)
    previous_path = entry.previous_path or _rename_source(diff_text)
    resolved_kind = kind or _kind_from_markers(diff_text)
    if resolved_kind is None:
        resolved_kind = "renamed" if previous_path else "modified"

    insertions = entry.insertions
    deletions = entry.deletions
    if hunks:
        insertions = sum(hunk.added_count for hunk in hunks)
        deletions = sum(hunk.removed_count for hunk in hunks)

    return Change(
        path=entry.path,
        kind=resolved_kind,
        insertions=insertions,
        deletions=deletions,
        previous_path=previous_path if resolved_kind == "renamed" else None,
        hunks=hunks,
    )


def _parse_section(section: str) -> Change:
    path, previous_path = _section_paths(section)
    hunks = parse_hunks(section)
    kind = _kind_from_markers(section) or "modified"
    return Change(
        path=path,
        kind=kind,
        insertions=sum(hunk.added_count for hunk in hunks),
        deletions=sum(hunk.removed_count for hunk in hunks),
        previous_path=previous_path if kind == "renamed" else None,
        hunks=hunks,
    )


def _section_paths(section: str) -> tuple[str, str | None]:
    lines = section.splitlines()
    first = lines[0] if lines else ""
    old_path: str | None = None
    new_path: str | None = None

    match: Match[str] | None = DIFF_HEADER_RE.match(first)
    if match is not None:
        old_path = match.group("old_path")
        new_path = match.group("new_path")

    for raw_line in lines:
        if raw_line.startswith("@@"):
            break
        if raw_line.startswith("--- "):
            parsed = _parse_path(raw_line[4:])
            if parsed != "/dev/null":
                old_path = parsed
        elif raw_line.startswith("+++ "):
            parsed = _parse_path(raw_line[4:])
            if parsed != "/dev/null":
                new_path = parsed
        elif raw_line.startswith("rename from "):
            old_path = raw_line[len("rename from ") :].strip()
        elif raw_line.startswith("rename to "):
            new_path = raw_line[len("rename to ") :].strip()

    path = new_path or old_path
    if not path:
        raise ValueError(f"Invalid diff header: {first!r}")
    return path, old_path if old_path != path else None


def _kind_from_markers(diff_text: str) -> ChangeKind | None:
    for raw_line in diff_text.splitlines():
        if raw_line.startswith("@@"):
            break
        if raw_line.startswith("new file mode"):
            return "added"
        if raw_line.startswith("deleted file mode"):
            return "deleted"
        if raw_line.startswith("rename from ") or raw_line.startswith("rename to "):
            return "renamed"
    return None


def _rename_source(diff_text: str) -> str | None:
    for raw_line in diff_text.splitlines():
        if raw_line.startswith("@@"):
            break
        if raw_line.startswith("rename from "):
            return raw_line[len("rename from ") :].strip()
    return None


def _new_start_line(header: str) -> int:
    match: Match[str] | None = HUNK_HEADER_RE.match(header)
    if match is None:
        logger.debug(f"Unparseable hunk header, anchoring at line 0: {header!r}")
        return 0
    return int(match.group("new_start"))


def _parse_count(value: str) -> int | None:
    token = value.strip()
    if token == "-":
        return 0
    if token.isdigit():
        return int(token)
    return None


def _split_rename(raw_path: str) -> tuple[str, str | None]:
    if " => " not in raw_path:
        return raw_path, None

    match: Match[str] | None = BRACE_RENAME_RE.match(raw_path)
    if match is not None:
        prefix = match.group("prefix")
        suffix = match.group("suffix")
        old_path = _collapse_slashes(f"{prefix}{match.group('old')}{suffix}")
        new_path = _collapse_slashes(f"{prefix}{match.group('new')}{suffix}")
        return new_path, old_path

    old_path, new_path = raw_path.split(" => ", 1)
    return new_path.strip(), old_path.strip()


def _collapse_slashes(path: str) -> str:
    while "//" in path:
        path = path.replace("//", "/")
    return path.lstrip("/")


def _parse_path(value: str) -> str:
    token = value.strip().split("\t", 1)[0]
    return _strip_ab_prefix(token)


def _strip_ab_prefix(path: str) -> str:
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path
