"""Six-dimension quality scoring for file text.

Each dimension function is pure: it takes file text and returns a
``QualityMetric``. ``QualityScorer`` ties them together for a file on disk,
discovers sibling tests and keeps a bounded score history for trends.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from re import compile
from statistics import mean
from typing import Any, Literal

from diff_sense.config import QualityConfig
from diff_sense.heuristics import detect_language, is_source_path
from diff_sense.structure import (
    FunctionInfo,
    RegexStructureExtractor,
    StructureExtractor,
    count_decision_points,
    find_nested_loops,
    strip_line_comment,
)

logger = logging.getLogger(__name__)

Dimension = Literal[
    "complexity",
    "maintainability",
    "performance",
    "security",
    "test_coverage",
    "documentation",
]
Grade = Literal["A", "B", "C", "D", "F"]
Trend = Literal["improving", "stable", "degrading"]
IssueSeverity = Literal["error", "warning", "info"]

DIMENSIONS: tuple[Dimension, ...] = (
    "complexity",
    "maintainability",
    "performance",
    "security",
    "test_coverage",
    "documentation",
)

BASE_COMPLEXITY = 1
COMPLEXITY_POINT_PENALTY = 5
LONG_FUNCTION_PENALTY = 10
LONG_LINE_PENALTY = 2
TODO_PENALTY = 1
MAGIC_NUMBER_PENALTY = 3
DUPLICATE_BLOCK_PENALTY = 5
DUPLICATE_BLOCK_LINES = 3
DUPLICATE_MIN_LINE_LENGTH = 10
DUPLICATE_REPORT_LIMIT = 5
NESTED_LOOP_PENALTY = 10
NESTED_LOOP_WINDOW = 20
ARRAY_CHAIN_PENALTY = 5
LARGE_OBJECT_PENALTY = 3
SECRET_LOGGING_PENALTY = 20
DYNAMIC_EXECUTION_PENALTY = 25
HTML_INJECTION_PENALTY = 15
HARDCODED_CREDENTIAL_PENALTY = 30
TEST_COVERAGE_CAP = 90
TEST_COVERAGE_FACTOR = 70
TREND_DELTA = 5
HOTSPOT_SCORE = 60
HOTSPOT_LIMIT = 5
TOP_ISSUE_LIMIT = 10
PROJECT_TARGET_SCORE = 70
MAX_HIGH_COMPLEXITY_FUNCTIONS = 3

TODO_RE = compile(r"\b(?:TODO|FIXME|XXX|HACK)\b")
MAGIC_NUMBER_RE = compile(r"[^a-zA-Z_\d.]\d{2,}[^a-zA-Z_\d]")
CONSTANT_ASSIGNMENT_RE = compile(r"^\s*(?:const\b|[A-Z][A-Z0-9_]*\s*(?::[^=]+)?=)")
ARRAY_CHAIN_RE = compile(r"\.filter\(.*(?:\.find\(|\)\s*\[0\])")
LARGE_OBJECT_RE = compile(r"\{[^}]{100,}\}")
SECRET_LOGGING_RE = compile(
    r"(?i)(?:console\.\w+|\bprint|\blog(?:ger|ging)?\.\w+)\s*\(.*(?:password|token|secret|key)"
)
DYNAMIC_EXECUTION_RE = compile(r"(?:\beval\s*\(|\bexec\s*\(|\bnew\s+Function\s*\()")
HTML_INJECTION_RE = compile(
    r"(?:\.innerHTML\s*=|\.outerHTML\s*=|document\.write\s*\(|dangerouslySetInnerHTML)"
)
HARDCODED_CREDENTIAL_RE = compile(r"(?i)(?:password|secret|token|key)\s*[:=]\s*['\"][^'\"]+['\"]")

SCRIPT_TEST_SUFFIXES = (".test", ".spec")


@dataclass(slots=True)
class QualityIssue:
    """One actionable finding behind a dimension score."""

    severity: IssueSeverity
    message: str
    line: int
    rule: str
    category: str
    auto_fixable: bool = False
    file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "message": self.message,
            "line": self.line,
            "rule": self.rule,
            "category": self.category,
            "auto_fixable": self.auto_fixable,
            "file": self.file,
        }


@dataclass(slots=True)
class QualitySuggestion:
    """An improvement suggestion with its expected payoff."""

    title: str
    description: str
    benefit: str
    effort: Literal["low", "medium", "high"]
    impact: Literal["low", "medium", "high"]
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "benefit": self.benefit,
            "effort": self.effort,
            "impact": self.impact,
            "category": self.category,
        }


@dataclass(slots=True)
class QualityMetric:
    """Score, grade and findings for one dimension of one file."""

    dimension: Dimension
    file: str
    score: int
    grade: Grade
    trend: Trend = "stable"
    issues: list[QualityIssue] = field(default_factory=list)
    suggestions: list[QualitySuggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension,
            "file": self.file,
            "score": self.score,
            "grade": self.grade,
            "trend": self.trend,
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
        }


@dataclass(slots=True)
class FileQualityReport:
    """All six dimension metrics for one file."""

    file: str
    metrics: list[QualityMetric] = field(default_factory=list)

    @property
    def overall_score(self) -> int:
        if not self.metrics:
            return 0
        return round(mean(metric.score for metric in self.metrics))

    @property
    def overall_grade(self) -> Grade:
        return score_to_grade(self.overall_score)

    def metric(self, dimension: Dimension) -> QualityMetric | None:
        for metric in self.metrics:
            if metric.dimension == dimension:
                return metric
        return None

    def issues(self) -> list[QualityIssue]:
        return [issue for metric in self.metrics for issue in metric.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "overall_score": self.overall_score,
            "overall_grade": self.overall_grade,
            "metrics": [metric.to_dict() for metric in self.metrics],
        }


@dataclass(slots=True)
class ProjectQualityOverview:
    """Aggregate view across scored files."""

    overall_score: int
    files_analyzed: int
    top_issues: list[QualityIssue] = field(default_factory=list)
    hotspots: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "overall_grade": score_to_grade(self.overall_score),
            "files_analyzed": self.files_analyzed,
            "top_issues": [issue.to_dict() for issue in self.top_issues],
            "hotspots": list(self.hotspots),
            "recommendations": list(self.recommendations),
        }


@dataclass(slots=True)
class _Penalty:
    points: int
    line: int
    message: str
    rule: str
    category: str
    auto_fixable: bool = False


def score_to_grade(score: float) -> Grade:
    """Map a 0-100 score to a letter grade."""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def severity_for_grade(grade: Grade) -> IssueSeverity:
    if grade == "F":
        return "error"
    if grade == "D":
        return "warning"
    return "info"


def score_complexity(
    content: str,
    path: str = "",
    *,
    config: QualityConfig | None = None,
    extractor: StructureExtractor | None = None,
) -> QualityMetric:
    effective_config = config or QualityConfig()
    language = detect_language(path)
    functions = _functions(content, language, extractor)
    penalties: list[_Penalty] = []
    suggestions: list[QualitySuggestion] = []

    if functions:
        total = BASE_COMPLEXITY + sum(_cyclomatic(item) for item in functions)
    elif is_source_path(path):
        total = BASE_COMPLEXITY + count_decision_points(content, language)
    else:
        total = BASE_COMPLEXITY
    average = total / max(1, len(functions))
    base = 100 - average * COMPLEXITY_POINT_PENALTY

    for function in functions:
        complexity = _cyclomatic(function)
        if complexity > effective_config.complexity_threshold:
            penalties.append(
                _Penalty(
                    points=0,
                    line=function.line,
                    message=(
                        f"Function '{function.name}' has high complexity "
                        f"({complexity}). Consider refactoring."
                    ),
                    rule="complexity-threshold",
                    category="complexity",
                )
            )
            suggestions.append(
                QualitySuggestion(
                    title=f"Reduce {function.name} complexity",
                    description=(
                        f"Function has complexity {complexity}, "
                        "consider breaking it into smaller functions"
                    ),
                    benefit="Improved readability and maintainability",
                    effort="high" if complexity > 20 else "medium",
                    impact="high",
                    category="refactoring",
                )
            )
        if function.length > effective_config.long_function_lines:
            penalties.append(
                _Penalty(
                    points=LONG_FUNCTION_PENALTY,
                    line=function.line,
                    message=(
                        f"Function '{function.name}' is {function.length} lines long "
                        f"(limit {effective_config.long_function_lines})."
                    ),
                    rule="function-length",
                    category="complexity",
                )
            )

    return _build_metric("complexity", path, base, penalties, suggestions)


def score_maintainability(
    content: str, path: str = "", *, config: QualityConfig | None = None
) -> QualityMetric:
    effective_config = config or QualityConfig()
    language = detect_language(path)
    penalties: list[_Penalty] = []
    suggestions: list[QualitySuggestion] = []

    for number, line in enumerate(content.splitlines(), start=1):
        if len(line) > effective_config.max_line_length:
            penalties.append(
                _Penalty(
                    points=LONG_LINE_PENALTY,
                    line=number,
                    message=(
                        f"Line too long (>{effective_config.max_line_length} characters). "
                        "Consider breaking it up."
                    ),
                    rule="max-line-length",
                    category="style",
                    auto_fixable=True,
                )
            )
        if TODO_RE.search(line):
            penalties.append(
                _Penalty(
                    points=TODO_PENALTY,
                    line=number,
                    message="TODO comment found. Consider creating a ticket or addressing it.",
                    rule="no-todo",
                    category="maintainability",
                )
            )
        if _has_magic_number(line, language):
            penalties.append(
                _Penalty(
                    points=MAGIC_NUMBER_PENALTY,
                    line=number,
                    message="Magic number detected. Consider using a named constant.",
                    rule="no-magic-numbers",
                    category="maintainability",
                )
            )

    duplicates = find_duplicate_blocks(content)
    for number in duplicates:
        penalties.append(
            _Penalty(
                points=DUPLICATE_BLOCK_PENALTY,
                line=number,
                message=f"Duplicate block of {DUPLICATE_BLOCK_LINES} lines detected.",
                rule="duplicate-code",
                category="maintainability",
            )
        )
    if duplicates:
        suggestions.append(
            QualitySuggestion(
                title="Extract duplicate code",
                description=f"Found {len(duplicates)} duplicate code blocks",
                benefit="Reduced maintenance burden and improved consistency",
                effort="medium",
                impact="medium",
                category="refactoring",
            )
        )

    return _build_metric("maintainability", path, 100, penalties, suggestions)


def score_performance(content: str, path: str = "") -> QualityMetric:
    language = detect_language(path)
    lines = content.splitlines()
    penalties: list[_Penalty] = []
    suggestions: list[QualitySuggestion] = []

    for index in find_nested_loops(lines, language, NESTED_LOOP_WINDOW):
        penalties.append(
            _Penalty(
                points=NESTED_LOOP_PENALTY,
                line=index + 1,
                message="Nested loops detected. Consider optimizing algorithm complexity.",
                rule="no-nested-loops",
                category="performance",
            )
        )

    for number, line in enumerate(lines, start=1):
        if ARRAY_CHAIN_RE.search(line):
            penalties.append(
                _Penalty(
                    points=ARRAY_CHAIN_PENALTY,
                    line=number,
                    message=(
                        "Chain of array methods may be inefficient. "
                        "Consider using find() or a single pass."
                    ),
                    rule="efficient-array-methods",
                    category="performance",
                )
            )
        if LARGE_OBJECT_RE.search(line):
            penalties.append(
                _Penalty(
                    points=LARGE_OBJECT_PENALTY,
                    line=number,
                    message="Large object literal detected.",
                    rule="large-object-literal",
                    category="performance",
                )
            )
            suggestions.append(
                QualitySuggestion(
                    title="Consider breaking up large object",
                    description=f"Large object literal on line {number}",
                    benefit="Better memory usage and code organization",
                    effort="low",
                    impact="low",
                    category="performance",
                )
            )

    return _build_metric("performance", path, 100, penalties, suggestions)


def score_security(content: str, path: str = "") -> QualityMetric:
    penalties: list[_Penalty] = []
    for number, line in enumerate(content.splitlines(), start=1):
        if SECRET_LOGGING_RE.search(line):
            penalties.append(
                _Penalty(
                    points=SECRET_LOGGING_PENALTY,
                    line=number,
                    message=(
                        "Potential sensitive data logging detected. "
                        "Avoid logging passwords, tokens, or secrets."
                    ),
                    rule="no-secrets-logging",
                    category="security",
                )
            )
        if DYNAMIC_EXECUTION_RE.search(line):
            penalties.append(
                _Penalty(
                    points=DYNAMIC_EXECUTION_PENALTY,
                    line=number,
                    message="Dynamic code execution is dangerous and should be avoided.",
                    rule="no-eval",
                    category="security",
                )
            )
        if HTML_INJECTION_RE.search(line):
            penalties.append(
                _Penalty(
                    points=HTML_INJECTION_PENALTY,
                    line=number,
                    message=(
                        "Raw HTML injection may create XSS vulnerabilities. "
                        "Consider using textContent or proper sanitization."
                    ),
                    rule="no-inner-html",
                    category="security",
                )
            )
        if HARDCODED_CREDENTIAL_RE.search(line):
            penalties.append(
                _Penalty(
                    points=HARDCODED_CREDENTIAL_PENALTY,
                    line=number,
                    message=(
                        "Hardcoded credentials detected. "
                        "Use environment variables or secure configuration."
                    ),
                    rule="no-hardcoded-credentials",
                    category="security",
                )
            )
    return _build_metric("security", path, 100, penalties, [])


def score_test_coverage(
    content: str,
    test_content: str | None,
    path: str = "",
    *,
    config: QualityConfig | None = None,
) -> QualityMetric:
    """Estimate coverage from the sibling test to source line ratio."""
    effective_config = config or QualityConfig()
    if test_content is None:
        penalty = _Penalty(
            points=0,
            line=1,
            message="No corresponding test file found.",
            rule="missing-tests",
            category="testing",
        )
        suggestion = QualitySuggestion(
            title="Create test file",
            description="No corresponding test file found",
            benefit="Ensure code reliability and prevent regressions",
            effort="high",
            impact="high",
            category="testing",
        )
        return _build_metric("test_coverage", path, 0, [penalty], [suggestion])

    test_lines = _non_blank_count(test_content)
    source_lines = _non_blank_count(content)
    score = 0
    if source_lines:
        score = min(TEST_COVERAGE_CAP, round(test_lines / source_lines * TEST_COVERAGE_FACTOR))

    suggestions: list[QualitySuggestion] = []
    if score < effective_config.coverage_threshold:
        suggestions.append(
            QualitySuggestion(
                title="Improve test coverage",
                description=f"Estimated coverage is {score}%, consider adding more tests",
                benefit="Better code reliability and easier refactoring",
                effort="medium",
                impact="high",
                category="testing",
            )
        )
    return _build_metric("test_coverage", path, score, [], suggestions)


def score_documentation(
    content: str,
    path: str = "",
    *,
    extractor: StructureExtractor | None = None,
) -> QualityMetric:
    functions = _functions(content, detect_language(path), extractor)
    if not functions:
        return _build_metric("documentation", path, 100, [], [])

    penalties: list[_Penalty] = []
    suggestions: list[QualitySuggestion] = []
    for function in functions:
        if function.documented:
            continue
        penalties.append(
            _Penalty(
                points=0,
                line=function.line,
                message=f"Function '{function.name}' lacks documentation.",
                rule="missing-docs",
                category="style",
            )
        )
        suggestions.append(
            QualitySuggestion(
                title=f"Document {function.name} function",
                description="Add documentation explaining purpose, parameters, and return value",
                benefit="Better code maintainability and team collaboration",
                effort="low",
                impact="medium",
                category="documentation",
            )
        )

    documented = sum(1 for function in functions if function.documented)
    score = documented / len(functions) * 100
    return _build_metric("documentation", path, score, penalties, suggestions)


def find_duplicate_blocks(content: str) -> list[int]:
    """Return 1-based start lines of repeated three-line blocks, first five only."""
    lines = [line.strip() for line in content.splitlines()]
    seen: dict[tuple[str, ...], int] = {}
    found: list[int] = []
    index = 0
    while index <= len(lines) - DUPLICATE_BLOCK_LINES and len(found) < DUPLICATE_REPORT_LIMIT:
        block = tuple(lines[index : index + DUPLICATE_BLOCK_LINES])
        if not all(len(line) > DUPLICATE_MIN_LINE_LENGTH for line in block):
            index += 1
            continue
        first = seen.get(block)
        if first is not None and first + DUPLICATE_BLOCK_LINES <= index:
            found.append(index + 1)
            index += DUPLICATE_BLOCK_LINES
            continue
        seen.setdefault(block, index)
        index += 1
    return found


def candidate_test_paths(path: str) -> list[str]:
    """Return conventional sibling test locations for a source path."""
    pure_path = PurePosixPath(path)
    parent = pure_path.parent
    stem = pure_path.stem
    suffix = pure_path.suffix
    candidates: list[PurePosixPath] = []

    if suffix == ".py":
        candidates.extend(
            [
                parent / f"test_{stem}.py",
                parent / f"{stem}_test.py",
                parent / "tests" / f"test_{stem}.py",
                parent.parent / "tests" / f"test_{stem}.py",
                PurePosixPath("tests") / f"test_{stem}.py",
            ]
        )
    else:
        names = [f"{stem}{marker}{suffix}" for marker in SCRIPT_TEST_SUFFIXES]
        candidates.extend(parent / name for name in names)
        candidates.extend(parent / "__tests__" / name for name in names)

    parts = pure_path.parts
    for source_dir, test_dirs in (("src", ("test", "__tests__")), ("lib", ("test",))):
        if source_dir not in parts:
            continue
        position = parts.index(source_dir)
        for test_dir in test_dirs:
            mirrored_parent = PurePosixPath(*parts[:position], test_dir, *parts[position + 1 : -1])
            if suffix == ".py":
                candidates.append(mirrored_parent / f"test_{stem}.py")
            else:
                candidates.extend(
                    mirrored_parent / f"{stem}{marker}{suffix}" for marker in SCRIPT_TEST_SUFFIXES
                )
                candidates.append(mirrored_parent / pure_path.name)

    output: list[str] = []
    for candidate in candidates:
        text = str(candidate)
        if text != path and text not in output:
            output.append(text)
    return output


def find_sibling_test(path: Path, root: Path | None = None) -> Path | None:
    """Return the first existing conventional test file for ``path``."""
    base = root or Path.cwd()
    relative = path.relative_to(base) if path.is_absolute() and path.is_relative_to(base) else path
    for candidate in candidate_test_paths(relative.as_posix()):
        resolved = base / candidate
        if resolved.is_file():
            return resolved
    return None


def compute_trend(history: list[int], score: int) -> Trend:
    if not history:
        return "stable"
    average = mean(history)
    if score > average + TREND_DELTA:
        return "improving"
    if score < average - TREND_DELTA:
        return "degrading"
    return "stable"


def build_project_overview(reports: list[FileQualityReport]) -> ProjectQualityOverview:
    """Average file scores and collect top issues, hotspots and recommendations."""
    if not reports:
        return ProjectQualityOverview(overall_score=0, files_analyzed=0)

    overall = round(mean(report.overall_score for report in reports))
    issues = [issue for report in reports for issue in report.issues()]
    top_issues = sorted(
        (issue for issue in issues if issue.severity in {"error", "warning"}),
        key=lambda issue: 0 if issue.severity == "error" else 1,
    )[:TOP_ISSUE_LIMIT]
    hotspots = [report.file for report in reports if report.overall_score < HOTSPOT_SCORE][
        :HOTSPOT_LIMIT
    ]

    recommendations: list[str] = []
    if overall < PROJECT_TARGET_SCORE:
        recommendations.append(
            "Overall project quality is below target. Focus on addressing critical issues first."
        )
    if any(issue.category == "security" for issue in issues):
        recommendations.append(
            "Security issues detected. Address these immediately to reduce vulnerabilities."
        )
    high_complexity = sum(1 for issue in issues if issue.rule == "complexity-threshold")
    if high_complexity > MAX_HIGH_COMPLEXITY_FUNCTIONS:
        recommendations.append(
            "Multiple high-complexity functions found. "
            "Consider refactoring for better maintainability."
        )
    if hotspots:
        recommendations.append(
            f"Focus refactoring efforts on {len(hotspots)} identified hotspot files."
        )

    return ProjectQualityOverview(
        overall_score=overall,
        files_analyzed=len(reports),
        top_issues=top_issues,
        hotspots=hotspots,
        recommendations=recommendations,
    )


class QualityScorer:
    """Scores files across all six dimensions and tracks per-file trends."""

    def __init__(
        self,
        config: QualityConfig | None = None,
        *,
        root: Path | None = None,
        extractor: StructureExtractor | None = None,
        read_text: Callable[[Path], str] | None = None,
    ) -> None:
        self.config = config or QualityConfig()
        self.root = root or Path.cwd()
        self.extractor = extractor or RegexStructureExtractor()
        self._read_text = read_text or _read_text
        self._history: dict[tuple[str, Dimension], deque[int]] = {}
        self._lock = threading.Lock()

    def score_file(
        self,
        path: str,
        content: str | None = None,
        *,
        test_content: str | None = None,
    ) -> FileQualityReport:
        """Score one file; reads content and the sibling test from disk when not given."""
        text = content if content is not None else self._read_text(self.root / path)
        if test_content is None:
            test_path = find_sibling_test(Path(path), self.root)
            if test_path is not None:
                logger.debug(f"Using {test_path} as the test file for {path}")
                test_content = self._read_text(test_path)

        metrics = [
            score_complexity(text, path, config=self.config, extractor=self.extractor),
            score_maintainability(text, path, config=self.config),
            score_performance(text, path),
            score_security(text, path),
            score_test_coverage(text, test_content, path, config=self.config),
            score_documentation(text, path, extractor=self.extractor),
        ]
        with self._lock:
            for metric in metrics:
                history = self._history.setdefault(
                    (path, metric.dimension), deque(maxlen=self.config.history_size)
                )
                metric.trend = compute_trend(list(history), metric.score)
                history.append(metric.score)
        return FileQualityReport(file=path, metrics=metrics)

    def history(self, path: str, dimension: Dimension) -> list[int]:
        with self._lock:
            return list(self._history.get((path, dimension), ()))

    def project_overview(self, reports: list[FileQualityReport]) -> ProjectQualityOverview:
        return build_project_overview(reports)


def _build_metric(
    dimension: Dimension,
    path: str,
    base: float,
    penalties: list[_Penalty],
    suggestions: list[QualitySuggestion],
) -> QualityMetric:
    score = max(0, min(100, round(base - sum(penalty.points for penalty in penalties))))
    grade = score_to_grade(score)
    severity = severity_for_grade(grade)
    issues = [
        QualityIssue(
            severity=severity,
            message=penalty.message,
            line=penalty.line,
            rule=penalty.rule,
            category=penalty.category,
            auto_fixable=penalty.auto_fixable,
            file=path,
        )
        for penalty in penalties
    ]
    return QualityMetric(
        dimension=dimension,
        file=path,
        score=score,
        grade=grade,
        issues=issues,
        suggestions=suggestions,
    )


def _cyclomatic(function: FunctionInfo) -> int:
    return BASE_COMPLEXITY + function.decision_points


def _functions(
    content: str, language: str, extractor: StructureExtractor | None
) -> list[FunctionInfo]:
    structure = (extractor or RegexStructureExtractor()).extract(content, language)
    return structure.all_functions()


def _has_magic_number(line: str, language: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped.startswith(("#", "//", "*", "/*")):
        return False
    if CONSTANT_ASSIGNMENT_RE.match(line):
        return False
    code = strip_line_comment(line, language)
    return MAGIC_NUMBER_RE.search(f" {code} ") is not None


def _non_blank_count(content: str) -> int:
    return sum(1 for line in content.splitlines() if line.strip())


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")
