"""Configuration loading for diff-sense."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from diff_sense.heuristics import (
    DEFAULT_CRITICAL_PATTERNS,
    DEFAULT_SECURITY_PATH_MARKERS,
    DEFAULT_SYSTEM_CONFIG_PATTERNS,
)

CONFIG_FILENAMES = (".diff-sense.toml", "diff-sense.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("diff_sense", "diff-sense")

DEFAULT_FEATURE_KEYWORDS = ("feature", "feat", "add", "implement", "create")
DEFAULT_BUGFIX_KEYWORDS = ("fix", "bug", "error", "issue", "patch")
DEFAULT_PROTECTED_BRANCHES = ("main", "master")


@dataclass(slots=True)
class SessionConfig:
    """Complexity tier thresholds for a development session."""

    critical_lines: int = 1000
    critical_files: int = 20
    high_lines: int = 500
    high_files: int = 10
    medium_lines: int = 100
    medium_files: int = 5
    critical_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_CRITICAL_PATTERNS))

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical_lines": self.critical_lines,
            "critical_files": self.critical_files,
            "high_lines": self.high_lines,
            "high_files": self.high_files,
            "medium_lines": self.medium_lines,
            "medium_files": self.medium_files,
            "critical_patterns": list(self.critical_patterns),
        }


@dataclass(slots=True)
class RiskConfig:
    """Risk rule thresholds and level aggregation counts."""

    files_medium: int = 15
    files_high: int = 25
    lines_medium: int = 500
    lines_high: int = 1000
    critical_high_count: int = 3
    high_high_count: int = 2
    high_medium_count: int = 4
    medium_high_count: int = 1
    medium_medium_count: int = 2
    system_config_patterns: list[str] = field(
        default_factory=lambda: list(DEFAULT_SYSTEM_CONFIG_PATTERNS)
    )
    security_markers: list[str] = field(
        default_factory=lambda: list(DEFAULT_SECURITY_PATH_MARKERS)
    )
    disabled_rules: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_medium": self.files_medium,
            "files_high": self.files_high,
            "lines_medium": self.lines_medium,
            "lines_high": self.lines_high,
            "levels": {
                "critical_high_count": self.critical_high_count,
                "high_high_count": self.high_high_count,
                "high_medium_count": self.high_medium_count,
                "medium_high_count": self.medium_high_count,
                "medium_medium_count": self.medium_medium_count,
            },
            "system_config_patterns": list(self.system_config_patterns),
            "security_markers": list(self.security_markers),
            "disable": list(self.disabled_rules),
        }


@dataclass(slots=True)
class PatternsConfig:
    """Development pattern detection thresholds."""

    rapid_iteration_rate: float = 10.0
    refactoring_ratio: float = 0.6
    refactoring_min_changes: int = 5
    feature_min_changes: int = 3
    feature_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_FEATURE_KEYWORDS))
    bugfix_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_BUGFIX_KEYWORDS))
    protected_branches: list[str] = field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES)
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rapid_iteration_rate": self.rapid_iteration_rate,
            "refactoring_ratio": self.refactoring_ratio,
            "refactoring_min_changes": self.refactoring_min_changes,
            "feature_min_changes": self.feature_min_changes,
            "feature_keywords": list(self.feature_keywords),
            "bugfix_keywords": list(self.bugfix_keywords),
            "protected_branches": list(self.protected_branches),
        }


@dataclass(slots=True)
class QualityConfig:
    """Quality scoring thresholds."""

    max_line_length: int = 120
    long_function_lines: int = 25
    complexity_threshold: int = 10
    coverage_threshold: int = 80
    history_size: int = 10

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_line_length": self.max_line_length,
            "long_function_lines": self.long_function_lines,
            "complexity_threshold": self.complexity_threshold,
            "coverage_threshold": self.coverage_threshold,
            "history_size": self.history_size,
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    session: SessionConfig = field(default_factory=SessionConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    patterns: PatternsConfig = field(default_factory=PatternsConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "session": self.session.to_dict(),
            "risk": self.risk.to_dict(),
            "patterns": self.patterns.to_dict(),
            "quality": self.quality.to_dict(),
            "source": self.source,
        }


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template with every threshold at its default."""
    return "\n".join(
        [
            'format = "human"',
            "",
            "[session]",
            "critical_lines = 1000",
            "critical_files = 20",
            "high_lines = 500",
            "high_files = 10",
            "medium_lines = 100",
            "medium_files = 5",
            "critical_patterns = [",
            *[f'  "{pattern}",' for pattern in DEFAULT_CRITICAL_PATTERNS],
            "]",
            "",
            "[risk]",
            "files_medium = 15",
            "files_high = 25",
            "lines_medium = 500",
            "lines_high = 1000",
            '# system_config_patterns = ["package.json", "tsconfig.json"]',
            '# security_markers = ["auth", "secret"]',
            '# disable = ["scope"]',
            "",
            "[risk.levels]",
            "critical_high_count = 3",
            "high_high_count = 2",
            "high_medium_count = 4",
            "medium_high_count = 1",
            "medium_medium_count = 2",
            "",
            "[patterns]",
            "rapid_iteration_rate = 10.0",
            "refactoring_ratio = 0.6",
            "refactoring_min_changes = 5",
            "feature_min_changes = 3",
            'feature_keywords = ["feature", "feat", "add", "implement", "create"]',
            'bugfix_keywords = ["fix", "bug", "error", "issue", "patch"]',
            'protected_branches = ["main", "master"]',
            "",
            "[quality]",
            "max_line_length = 120",
            "long_function_lines = 25",
            "complexity_threshold = 10",
            "coverage_threshold = 80",
            "history_size = 10",
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    return AppConfig(
        format=_as_choice(mapping.get("format", "human"), {"human", "json"}, "format"),
        session=_parse_session_config(_as_table(mapping.get("session"), "session")),
        risk=_parse_risk_config(_as_table(mapping.get("risk"), "risk")),
        patterns=_parse_patterns_config(_as_table(mapping.get("patterns"), "patterns")),
        quality=_parse_quality_config(_as_table(mapping.get("quality"), "quality")),
        source=source,
    )


def _parse_session_config(value: dict[str, Any]) -> SessionConfig:
    defaults = SessionConfig()
    config = SessionConfig(
        critical_lines=_as_positive_int(
            value.get("critical_lines", defaults.critical_lines), "session.critical_lines"
        ),
        critical_files=_as_positive_int(
            value.get("critical_files", defaults.critical_files), "session.critical_files"
        ),
        high_lines=_as_positive_int(
            value.get("high_lines", defaults.high_lines), "session.high_lines"
        ),
        high_files=_as_positive_int(
            value.get("high_files", defaults.high_files), "session.high_files"
        ),
        medium_lines=_as_positive_int(
            value.get("medium_lines", defaults.medium_lines), "session.medium_lines"
        ),
        medium_files=_as_positive_int(
            value.get("medium_files", defaults.medium_files), "session.medium_files"
        ),
        critical_patterns=_as_str_list(value.get("critical_patterns"), "session.critical_patterns")
        or list(defaults.critical_patterns),
    )
    _require_ordered(
        (config.medium_lines, config.high_lines, config.critical_lines),
        "session.medium_lines <= session.high_lines <= session.critical_lines",
    )
    _require_ordered(
        (config.medium_files, config.high_files, config.critical_files),
        "session.medium_files <= session.high_files <= session.critical_files",
    )
    return config


def _parse_risk_config(value: dict[str, Any]) -> RiskConfig:
    defaults = RiskConfig()
    levels = _as_table(value.get("levels"), "risk.levels")
    config = RiskConfig(
        files_medium=_as_positive_int(
            value.get("files_medium", defaults.files_medium), "risk.files_medium"
        ),
        files_high=_as_positive_int(
            value.get("files_high", defaults.files_high), "risk.files_high"
        ),
        lines_medium=_as_positive_int(
            value.get("lines_medium", defaults.lines_medium), "risk.lines_medium"
        ),
        lines_high=_as_positive_int(
            value.get("lines_high", defaults.lines_high), "risk.lines_high"
        ),
        critical_high_count=_as_positive_int(
            levels.get("critical_high_count", defaults.critical_high_count),
            "risk.levels.critical_high_count",
        ),
        high_high_count=_as_positive_int(
            levels.get("high_high_count", defaults.high_high_count),
            "risk.levels.high_high_count",
        ),
        high_medium_count=_as_positive_int(
            levels.get("high_medium_count", defaults.high_medium_count),
            "risk.levels.high_medium_count",
        ),
        medium_high_count=_as_positive_int(
            levels.get("medium_high_count", defaults.medium_high_count),
            "risk.levels.medium_high_count",
        ),
        medium_medium_count=_as_positive_int(
            levels.get("medium_medium_count", defaults.medium_medium_count),
            "risk.levels.medium_medium_count",
        ),
        system_config_patterns=_as_str_list(
            value.get("system_config_patterns"), "risk.system_config_patterns"
        )
        or list(defaults.system_config_patterns),
        security_markers=_as_str_list(value.get("security_markers"), "risk.security_markers")
        or list(defaults.security_markers),
        disabled_rules=_as_str_list(value.get("disable"), "risk.disable"),
    )
    _require_ordered(
        (config.files_medium, config.files_high), "risk.files_medium <= risk.files_high"
    )
    _require_ordered(
        (config.lines_medium, config.lines_high), "risk.lines_medium <= risk.lines_high"
    )
    _require_ordered(
        (config.medium_high_count, config.high_high_count, config.critical_high_count),
        "risk.levels high counts must be non-decreasing from medium to critical",
    )
    return config


def _parse_patterns_config(value: dict[str, Any]) -> PatternsConfig:
    defaults = PatternsConfig()
    ratio = _as_float(
        value.get("refactoring_ratio", defaults.refactoring_ratio), "patterns.refactoring_ratio"
    )
    if not 0.0 <= ratio <= 1.0:
        raise ValueError("patterns.refactoring_ratio must be between 0 and 1")
    rate = _as_float(
        value.get("rapid_iteration_rate", defaults.rapid_iteration_rate),
        "patterns.rapid_iteration_rate",
    )
    if rate <= 0:
        raise ValueError("patterns.rapid_iteration_rate must be > 0")
    return PatternsConfig(
        rapid_iteration_rate=rate,
        refactoring_ratio=ratio,
        refactoring_min_changes=_as_int(
            value.get("refactoring_min_changes", defaults.refactoring_min_changes),
            "patterns.refactoring_min_changes",
        ),
        feature_min_changes=_as_int(
            value.get("feature_min_changes", defaults.feature_min_changes),
            "patterns.feature_min_changes",
        ),
        feature_keywords=_as_str_list(value.get("feature_keywords"), "patterns.feature_keywords")
        or list(defaults.feature_keywords),
        bugfix_keywords=_as_str_list(value.get("bugfix_keywords"), "patterns.bugfix_keywords")
        or list(defaults.bugfix_keywords),
        protected_branches=_as_str_list(
            value.get("protected_branches"), "patterns.protected_branches"
        )
        or list(defaults.protected_branches),
    )


def _parse_quality_config(value: dict[str, Any]) -> QualityConfig:
    defaults = QualityConfig()
    coverage = _as_int(
        value.get("coverage_threshold", defaults.coverage_threshold),
        "quality.coverage_threshold",
    )
    if not 0 <= coverage <= 100:
        raise ValueError("quality.coverage_threshold must be between 0 and 100")
    return QualityConfig(
        max_line_length=_as_positive_int(
            value.get("max_line_length", defaults.max_line_length), "quality.max_line_length"
        ),
        long_function_lines=_as_positive_int(
            value.get("long_function_lines", defaults.long_function_lines),
            "quality.long_function_lines",
        ),
        complexity_threshold=_as_positive_int(
            value.get("complexity_threshold", defaults.complexity_threshold),
            "quality.complexity_threshold",
        ),
        coverage_threshold=coverage,
        history_size=_as_positive_int(
            value.get("history_size", defaults.history_size), "quality.history_size"
        ),
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_positive_int(raw: Any, field_name: str) -> int:
    value = _as_int(raw, field_name)
    if value <= 0:
        raise ValueError(f"{field_name} must be > 0")
    return value


def _as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    return float(raw)


def _require_ordered(values: tuple[int, ...], message: str) -> None:
    if list(values) != sorted(values):
        raise ValueError(f"Thresholds out of order: {message}")
