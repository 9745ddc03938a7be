"""Semantic classification of parsed changes.

The classifier scores every candidate change type from keyword and
structural evidence found in the hunks, picks the strongest type and
reports sub-patterns, structure deltas, complexity metrics and code-level
risk factors.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from re import compile
from typing import Any, Literal

from diff_sense.diff_parser import Change, Hunk, Line
from diff_sense.heuristics import (
    clip_line,
    has_credential_keyword,
    has_error_handling,
    is_config_path,
    is_doc_path,
    is_lock_path,
    is_manifest_path,
    is_source_path,
    is_test_path,
)
from diff_sense.impact import ImpactAnalysis, analyze_impact
from diff_sense.structure import (
    BRANCH_KEYWORD_RE,
    PY_BRANCH_KEYWORD_RE,
    FileStructure,
    RegexStructureExtractor,
    StructureExtractor,
    detect_framework,
    find_nested_loops,
    strip_line_comment,
)

ChangeType = Literal["feature", "bugfix", "refactor", "test", "docs", "chore"]
RiskType = Literal["performance", "security", "breaking", "data", "concurrency"]
Severity = Literal["low", "medium", "high"]

TIE_BREAK_ORDER: tuple[ChangeType, ...] = ("bugfix", "feature", "refactor", "test", "docs", "chore")

FEATURE_ADDED_FUNCTION = 2.0
FEATURE_ADDED_CLASS = 3.0
FEATURE_ADDED_EXPORT = 1.0
FEATURE_ADDED_ROUTE = 3.0
FEATURE_NEW_SOURCE_FILE = 2.0
BUGFIX_ERROR_HANDLING_LINE = 2.0
BUGFIX_NULL_GUARD_LINE = 1.5
BUGFIX_FIX_COMMENT = 2.0
REFACTOR_MODIFIED_SYMBOL = 2.0
REFACTOR_RENAMED_FILE = 2.0
REFACTOR_BALANCED_CHURN = 1.0
REFACTOR_CHURN_RATIO = 0.5
TEST_CHANGED_FILE = 3.0
TEST_NEW_FILE = 4.0
TEST_ASSERTION_LINE = 0.5
TEST_ASSERTION_CAP = 3.0
DOCS_FILE = 3.0
DOCS_COMMENT_ONLY = 2.0
CHORE_MANIFEST = 3.0
CHORE_LOCK_FILE = 2.0
CHORE_CONFIG_FILE = 2.0
CHORE_IMPORT_ONLY = 1.0

NESTED_LOOP_WINDOW = 20

PATTERN_CONFIDENCE = {
    "function_addition": 0.9,
    "function_removal": 0.9,
    "function_modification": 0.7,
    "class_addition": 0.9,
    "class_removal": 0.9,
    "dependency_change": 0.8,
    "api_change": 0.8,
    "route_addition": 0.85,
    "error_handling_addition": 0.7,
    "test_addition": 0.9,
    "documentation_change": 0.8,
    "config_change": 0.8,
}

NULL_GUARD_RE = compile(
    r"(?:\bis\s+(?:not\s+)?None\b|[!=]==?\s*(?:null|undefined)\b|\?\.|\?\?|\bif\s+not\s+\w+)"
)
FIX_COMMENT_RE = compile(
    r"(?i)(?:#|//|/\*|^\s*\*).*\b(?:fix|fixes|fixed|bug|workaround|regression|hotfix)\b"
)
ASSERTION_RE = compile(r"(?:\bassert\b|\bexpect\s*\(|\.assert\w*\(|\bshould\.)")
COMMENT_LINE_RE = compile(r"^\s*(?:#|//|/\*|\*|\*/|\"\"\"|''')")
IMPORT_LINE_RE = compile(r"^\s*(?:import\b|from\s+\S+\s+import\b|.*\brequire\s*\()")
EXACT_CREDENTIAL_RE = compile(
    r"(?i)\b(?:password|passwd|secret|api_?key|secret_?key|access_?token|auth_?token|"
    r"private_?key|client_?secret)\b\s*[:=]\s*['\"][^'\"]+['\"]"
)
DYNAMIC_EXECUTION_RE = compile(r"(?:\beval\s*\(|\bexec\s*\(|\.innerHTML\s*=|document\.write\s*\()")
SQL_DDL_RE = compile(
    r"(?i)\b(?P<verb>DROP|TRUNCATE|ALTER|CREATE|RENAME)\s+"
    r"(?:TABLE|DATABASE|SCHEMA|COLUMN|INDEX|VIEW)\b"
)
DESTRUCTIVE_DDL_VERBS = {"DROP", "TRUNCATE"}
SHARED_STATE_RE = compile(
    r"(?:^\s*global\s+\w+|\bnonlocal\s+\w+|\b(?:window|globalThis|global)\.\w+\s*=(?!=)|"
    r"\bthreading\.Thread\s*\(|\bnew\s+Worker\s*\(|\bSharedArrayBuffer\b|\bAtomics\.)"
)


@dataclass(slots=True)
class SemanticPattern:
    """A detected sub-pattern with supporting evidence."""

    type: str
    description: str
    confidence: float
    evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }


@dataclass(slots=True)
class SymbolRef:
    """A named symbol located in a changed file."""

    path: str
    name: str
    signature: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "name": self.name, "signature": self.signature}


@dataclass(slots=True)
class CodeStructure:
    """Aggregate structure deltas across all changes."""

    language: str = "unknown"
    framework: str | None = None
    added_functions: list[SymbolRef] = field(default_factory=list)
    modified_functions: list[SymbolRef] = field(default_factory=list)
    removed_functions: list[SymbolRef] = field(default_factory=list)
    added_classes: list[SymbolRef] = field(default_factory=list)
    modified_classes: list[SymbolRef] = field(default_factory=list)
    removed_classes: list[SymbolRef] = field(default_factory=list)
    added_imports: list[SymbolRef] = field(default_factory=list)
    removed_imports: list[SymbolRef] = field(default_factory=list)
    added_exports: list[SymbolRef] = field(default_factory=list)
    removed_exports: list[SymbolRef] = field(default_factory=list)
    added_routes: list[SymbolRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "framework": self.framework,
            "functions": {
                "added": [item.to_dict() for item in self.added_functions],
                "modified": [item.to_dict() for item in self.modified_functions],
                "removed": [item.to_dict() for item in self.removed_functions],
            },
            "classes": {
                "added": [item.to_dict() for item in self.added_classes],
                "modified": [item.to_dict() for item in self.modified_classes],
                "removed": [item.to_dict() for item in self.removed_classes],
            },
            "imports": {
                "added": [item.to_dict() for item in self.added_imports],
                "removed": [item.to_dict() for item in self.removed_imports],
            },
            "exports": {
                "added": [item.to_dict() for item in self.added_exports],
                "removed": [item.to_dict() for item in self.removed_exports],
            },
            "routes": {"added": [item.to_dict() for item in self.added_routes]},
        }


@dataclass(slots=True)
class ComplexityMetrics:
    """Complexity approximations over added code."""

    cyclomatic: int = 0
    cognitive: int = 0
    lines_of_code: int = 0
    nesting_depth: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cyclomatic": self.cyclomatic,
            "cognitive": self.cognitive,
            "lines_of_code": self.lines_of_code,
            "nesting_depth": self.nesting_depth,
        }


@dataclass(slots=True)
class CodeRiskFactor:
    """A code-level risk marker found in changed lines."""

    type: RiskType
    severity: Severity
    description: str
    file: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "file": self.file,
            "line": self.line,
        }


@dataclass(slots=True)
class SemanticAnalysis:
    """Classification result for a set of changes."""

    change_type: ChangeType
    confidence: float
    patterns: list[SemanticPattern] = field(default_factory=list)
    structure: CodeStructure = field(default_factory=CodeStructure)
    complexity: ComplexityMetrics = field(default_factory=ComplexityMetrics)
    risk_factors: list[CodeRiskFactor] = field(default_factory=list)
    evidence_scores: dict[str, float] = field(default_factory=dict)
    impact: ImpactAnalysis = field(default_factory=ImpactAnalysis)

    def to_dict(self) -> dict[str, Any]:
        return {
            "change_type": self.change_type,
            "confidence": self.confidence,
            "patterns": [item.to_dict() for item in self.patterns],
            "structure": self.structure.to_dict(),
            "complexity": self.complexity.to_dict(),
            "risk_factors": [item.to_dict() for item in self.risk_factors],
            "evidence_scores": dict(self.evidence_scores),
            "impact": self.impact.to_dict(),
        }


@dataclass(slots=True)
class _ChangeDelta:
    added: FileStructure
    removed: FileStructure


class SemanticAnalyzer:
    """Classifies change sets using structural and keyword evidence."""

    def __init__(self, extractor: StructureExtractor | None = None) -> None:
        self.extractor = extractor or RegexStructureExtractor()

    def analyze(self, changes: list[Change]) -> SemanticAnalysis:
        scores: dict[ChangeType, float] = {name: 0.0 for name in TIE_BREAK_ORDER}
        structure = CodeStructure(language=_dominant_language(changes))
        patterns = _PatternCollector()
        risk_factors: list[CodeRiskFactor] = []
        complexity = ComplexityMetrics(lines_of_code=sum(item.changed_lines for item in changes))
        imports_seen = []

        for change in changes:
            delta = self._delta(change)
            imports_seen.extend(delta.added.imports)
            imports_seen.extend(delta.removed.imports)
            _collect_structure(change, delta, structure, patterns)
            _score_change(change, delta, scores, patterns)
            risk_factors.extend(_code_risk_factors(change, delta))
            _accumulate_complexity(change, complexity)

        structure.framework = detect_framework(imports_seen)
        change_type, confidence = _pick_change_type(scores)
        analysis = SemanticAnalysis(
            change_type=change_type,
            confidence=confidence,
            patterns=patterns.build(),
            structure=structure,
            complexity=complexity,
            risk_factors=risk_factors,
            evidence_scores={name: round(value, 2) for name, value in scores.items()},
        )
        analysis.impact = analyze_impact(changes, analysis)
        return analysis

    def _delta(self, change: Change) -> _ChangeDelta:
        language = change.language
        added_text = "\n".join(_side_text(hunk, "added") for hunk in change.hunks)
        removed_text = "\n".join(_side_text(hunk, "removed") for hunk in change.hunks)
        return _ChangeDelta(
            added=self.extractor.extract(added_text, language),
            removed=self.extractor.extract(removed_text, language),
        )


class _PatternCollector:
    def __init__(self) -> None:
        self._evidence: dict[str, list[str]] = {}
        self._descriptions: dict[str, str] = {}

    def add(self, pattern_type: str, description: str, evidence: str) -> None:
        self._descriptions.setdefault(pattern_type, description)
        bucket = self._evidence.setdefault(pattern_type, [])
        if evidence not in bucket:
            bucket.append(evidence)

    def build(self) -> list[SemanticPattern]:
        return [
            SemanticPattern(
                type=pattern_type,
                description=self._descriptions[pattern_type],
                confidence=PATTERN_CONFIDENCE.get(pattern_type, 0.5),
                evidence=evidence,
            )
            for pattern_type, evidence in self._evidence.items()
        ]


def classify_change_type(changes: list[Change]) -> tuple[ChangeType, float]:
    """Return only the dominant change type and its confidence."""
    analysis = SemanticAnalyzer().analyze(changes)
    return analysis.change_type, analysis.confidence


def _pick_change_type(scores: dict[ChangeType, float]) -> tuple[ChangeType, float]:
    total = sum(scores.values())
    if total <= 0:
        return "chore", 0.0
    best = max(scores.values())
    winner = next(name for name in TIE_BREAK_ORDER if scores[name] == best)
    confidence = max(0.0, min(1.0, best / total))
    return winner, round(confidence, 3)


def _score_change(
    change: Change,
    delta: _ChangeDelta,
    scores: dict[ChangeType, float],
    patterns: _PatternCollector,
) -> None:
    path = change.path
    added_lines = change.added_lines()
    removed_lines = change.removed_lines()

    if is_test_path(path):
        scores["test"] += TEST_NEW_FILE if change.kind == "added" else TEST_CHANGED_FILE
        assertions = sum(1 for line in added_lines if ASSERTION_RE.search(line.content))
        scores["test"] += min(TEST_ASSERTION_CAP, assertions * TEST_ASSERTION_LINE)
        if change.kind == "added" or assertions:
            patterns.add("test_addition", "Tests added or extended", path)
        return

    if is_doc_path(path):
        scores["docs"] += DOCS_FILE
        patterns.add("documentation_change", "Documentation updated", path)
        return

    if is_manifest_path(path) or is_lock_path(path):
        scores["chore"] += CHORE_MANIFEST if is_manifest_path(path) else CHORE_LOCK_FILE
        patterns.add("dependency_change", "Dependency manifest or lock file changed", path)
        return

    if is_config_path(path) and not is_source_path(path):
        scores["chore"] += CHORE_CONFIG_FILE
        patterns.add("config_change", "Configuration changed", path)
        return

    added_functions = _names(delta.added.all_functions()) - _names(delta.removed.all_functions())
    added_classes = _names(delta.added.classes) - _names(delta.removed.classes)
    added_exports = _names(delta.added.exports) - _names(delta.removed.exports)
    modified = (_names(delta.added.all_functions()) & _names(delta.removed.all_functions())) | (
        _names(delta.added.classes) & _names(delta.removed.classes)
    )

    scores["feature"] += len(added_functions) * FEATURE_ADDED_FUNCTION
    scores["feature"] += len(added_classes) * FEATURE_ADDED_CLASS
    scores["feature"] += len(added_exports) * FEATURE_ADDED_EXPORT
    scores["feature"] += len(delta.added.routes) * FEATURE_ADDED_ROUTE
    if change.kind == "added" and is_source_path(path):
        scores["feature"] += FEATURE_NEW_SOURCE_FILE

    error_lines = [line for line in added_lines if has_error_handling(line.content)]
    scores["bugfix"] += len(error_lines) * BUGFIX_ERROR_HANDLING_LINE
    scores["bugfix"] += (
        sum(1 for line in added_lines if NULL_GUARD_RE.search(line.content))
        * BUGFIX_NULL_GUARD_LINE
    )
    if any(FIX_COMMENT_RE.search(line.content) for line in added_lines):
        scores["bugfix"] += BUGFIX_FIX_COMMENT
    for line in error_lines:
        patterns.add(
            "error_handling_addition",
            "Error handling added",
            f"{path}:{line.line_number}: {clip_line(line.content)}",
        )

    scores["refactor"] += len(modified) * REFACTOR_MODIFIED_SYMBOL
    if change.kind == "renamed":
        scores["refactor"] += REFACTOR_RENAMED_FILE
    if _balanced_churn(change):
        scores["refactor"] += REFACTOR_BALANCED_CHURN

    changed = [line for line in (*added_lines, *removed_lines) if line.content.strip()]
    if changed and all(COMMENT_LINE_RE.match(line.content) for line in changed):
        scores["docs"] += DOCS_COMMENT_ONLY
        patterns.add("documentation_change", "Documentation updated", path)
    elif changed and all(IMPORT_LINE_RE.match(line.content) for line in changed):
        scores["chore"] += CHORE_IMPORT_ONLY


def _collect_structure(
    change: Change,
    delta: _ChangeDelta,
    structure: CodeStructure,
    patterns: _PatternCollector,
) -> None:
    path = change.path
    added_functions = {item.name: item for item in delta.added.all_functions()}
    removed_functions = {item.name: item for item in delta.removed.all_functions()}
    for name, info in added_functions.items():
        ref = SymbolRef(path=path, name=name, signature=info.signature)
        if name in removed_functions:
            structure.modified_functions.append(ref)
            patterns.add("function_modification", "Function signatures changed", f"{path}:{name}")
        else:
            structure.added_functions.append(ref)
            patterns.add("function_addition", "New functions added", f"{path}:{name}")
    for name, info in removed_functions.items():
        if name not in added_functions:
            structure.removed_functions.append(
                SymbolRef(path=path, name=name, signature=info.signature)
            )
            patterns.add("function_removal", "Functions removed", f"{path}:{name}")

    added_classes = {item.name for item in delta.added.classes}
    removed_classes = {item.name for item in delta.removed.classes}
    for name in sorted(added_classes):
        if name in removed_classes:
            structure.modified_classes.append(SymbolRef(path=path, name=name))
        else:
            structure.added_classes.append(SymbolRef(path=path, name=name))
            patterns.add("class_addition", "New classes added", f"{path}:{name}")
    for name in sorted(removed_classes - added_classes):
        structure.removed_classes.append(SymbolRef(path=path, name=name))
        patterns.add("class_removal", "Classes removed", f"{path}:{name}")

    added_modules = {item.module for item in delta.added.imports}
    removed_modules = {item.module for item in delta.removed.imports}
    for module in sorted(added_modules - removed_modules):
        structure.added_imports.append(SymbolRef(path=path, name=module))
        patterns.add("dependency_change", "Imports changed", f"{path}: +{module}")
    for module in sorted(removed_modules - added_modules):
        structure.removed_imports.append(SymbolRef(path=path, name=module))
        patterns.add("dependency_change", "Imports changed", f"{path}: -{module}")

    added_exports = {item.name: item for item in delta.added.exports}
    removed_exports = {item.name: item for item in delta.removed.exports}
    for name in sorted(set(added_exports) - set(removed_exports)):
        structure.added_exports.append(
            SymbolRef(path=path, name=name, signature=added_exports[name].signature)
        )
        patterns.add("api_change", "Public API surface changed", f"{path}: +{name}")
    for name in sorted(set(removed_exports) - set(added_exports)):
        structure.removed_exports.append(
            SymbolRef(path=path, name=name, signature=removed_exports[name].signature)
        )
        patterns.add("api_change", "Public API surface changed", f"{path}: -{name}")

    for route in delta.added.routes:
        label = f"{route.method} {route.path}"
        structure.added_routes.append(SymbolRef(path=path, name=label, signature=route.handler))
        patterns.add("route_addition", "HTTP routes added", f"{path}: {label}")


def _code_risk_factors(change: Change, delta: _ChangeDelta) -> list[CodeRiskFactor]:
    path = change.path
    factors: list[CodeRiskFactor] = []

    for hunk in change.hunks:
        added = [line for line in hunk.lines if line.kind == "added"]
        factors.extend(_nested_loop_factors(path, added, change.language))
        for line in added:
            factors.extend(_line_risk_factors(path, line))

    removed_exports = _names(delta.removed.exports) - _names(delta.added.exports)
    removed_functions = (
        _names(delta.removed.all_functions()) - _names(delta.added.all_functions())
    ) - removed_exports
    anchor = change.hunks[0].start_line if change.hunks else None
    for name in sorted(removed_exports):
        factors.append(
            CodeRiskFactor(
                type="breaking",
                severity="high",
                description=f"Exported symbol '{name}' removed",
                file=path,
                line=anchor,
            )
        )
    for name in sorted(removed_functions):
        factors.append(
            CodeRiskFactor(
                type="breaking",
                severity="high",
                description=f"Function '{name}' removed",
                file=path,
                line=anchor,
            )
        )
    return factors


def _line_risk_factors(path: str, line: Line) -> list[CodeRiskFactor]:
    content = line.content
    found: list[tuple[RiskType, Severity, str]] = []
    exact_credential = EXACT_CREDENTIAL_RE.search(content) is not None
    if exact_credential:
        found.append(("security", "high", "Hardcoded credential assigned a literal value"))
    if DYNAMIC_EXECUTION_RE.search(content):
        found.append(("security", "high", "Dynamic code execution or HTML injection sink"))
    if not exact_credential and has_credential_keyword(content):
        found.append(("security", "medium", "Credential-related keyword in changed code"))
    ddl = SQL_DDL_RE.search(content)
    if ddl is not None:
        verb = ddl.group("verb").upper()
        ddl_severity: Severity = "high" if verb in DESTRUCTIVE_DDL_VERBS else "medium"
        found.append(("data", ddl_severity, f"Raw SQL {verb} statement"))
    if SHARED_STATE_RE.search(content):
        found.append(("concurrency", "medium", "Shared mutable state introduced"))
    return [
        CodeRiskFactor(
            type=risk_type,
            severity=severity,
            description=description,
            file=path,
            line=line.line_number,
        )
        for risk_type, severity, description in found
    ]


def _nested_loop_factors(path: str, lines: list[Line], language: str) -> list[CodeRiskFactor]:
    contents = [line.content for line in lines]
    return [
        CodeRiskFactor(
            type="performance",
            severity="medium",
            description="Nested loop added",
            file=path,
            line=lines[index].line_number,
        )
        for index in find_nested_loops(contents, language, NESTED_LOOP_WINDOW)
    ]


def _accumulate_complexity(change: Change, metrics: ComplexityMetrics) -> None:
    language = change.language
    pattern = PY_BRANCH_KEYWORD_RE if language == "python" else BRANCH_KEYWORD_RE
    for hunk in change.hunks:
        added = [line.content for line in hunk.lines if line.kind == "added"]
        if not added:
            continue
        if language == "python":
            base = min((_indent(content) for content in added if content.strip()), default=0)
        depth = 0
        for content in added:
            code = strip_line_comment(content, language)
            if not code.strip():
                continue
            if language == "python":
                level = max(0, (_indent(content) - base) // 4)
                metrics.nesting_depth = max(
                    metrics.nesting_depth, level + (1 if code.rstrip().endswith(":") else 0)
                )
            else:
                level = depth
            decisions = len(pattern.findall(code))
            metrics.cyclomatic += decisions
            metrics.cognitive += decisions * (1 + level) if decisions else 0
            if language != "python":
                depth = max(0, depth + code.count("{") - code.count("}"))
                metrics.nesting_depth = max(metrics.nesting_depth, depth)


def _balanced_churn(change: Change) -> bool:
    if not is_source_path(change.path) or change.insertions == 0 or change.deletions == 0:
        return False
    smaller = min(change.insertions, change.deletions)
    larger = max(change.insertions, change.deletions)
    return smaller / larger >= REFACTOR_CHURN_RATIO


def _dominant_language(changes: list[Change]) -> str:
    weights: Counter[str] = Counter()
    for change in changes:
        if change.language != "unknown":
            weights[change.language] += max(1, change.changed_lines)
    if not weights:
        return "unknown"
    return weights.most_common(1)[0][0]


def _side_text(hunk: Hunk, kind: str) -> str:
    return "\n".join(line.content for line in hunk.lines if line.kind == kind)


def _names(items: list[Any]) -> set[str]:
    return {item.name for item in items}


def _indent(content: str) -> int:
    expanded = content.expandtabs(4)
    return len(expanded) - len(expanded.lstrip())
