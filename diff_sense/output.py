"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from diff_sense import __version__
from diff_sense.diff_parser import Change
from diff_sense.quality import FileQualityReport, ProjectQualityOverview
from diff_sense.semantic import SemanticAnalysis
from diff_sense.session import DevelopmentSession
from diff_sense.structure import FileStructure

LEVEL_COLORS = {"low": "green", "medium": "yellow", "high": "red", "critical": "red"}
GRADE_COLORS = {"A": "green", "B": "green", "C": "yellow", "D": "yellow", "F": "red"}
SEVERITY_COLORS = {"high": "red", "medium": "yellow", "low": "green"}


def render_session_human(session: DevelopmentSession) -> str:
    """Render a compact colorized session summary."""
    stats = session.stats
    risk = session.risk
    lines: list[str] = [
        click.style(
            f"Session {session.id[:8]} on {session.branch} "
            f"(base {session.base_commit[:8] or 'none'})",
            bold=True,
        ),
        (
            f"{stats.total_files} files, +{stats.insertions}/-{stats.deletions} "
            f"({stats.changed_lines} lines), {stats.duration_minutes} min"
        ),
        click.style(f"Complexity: {stats.complexity}", fg=LEVEL_COLORS[stats.complexity]),
        click.style(
            f"Risk level: {risk.level.upper()}",
            fg=LEVEL_COLORS[risk.level],
            bold=True,
        ),
    ]

    if risk.factors:
        lines.append(click.style("Risk factors:", bold=True))
        for index, factor in enumerate(risk.factors, start=1):
            lines.append(f"{index}. [{factor.type}] {factor.impact} {factor.description}")
            for evidence in factor.evidence[:3]:
                lines.append(f"   evidence: {evidence}")

    if risk.recommendations:
        lines.append(click.style("Recommendations:", bold=True))
        lines.extend(f"- {item}" for item in risk.recommendations)

    if risk.split_suggestions:
        lines.append(click.style("Split suggestions:", bold=True))
        lines.extend(f"- {item}" for item in risk.split_suggestions)

    patterns = session.patterns
    if patterns:
        lines.append(click.style("Patterns:", bold=True))
        for pattern in patterns:
            lines.append(f"- {pattern.type} ({pattern.confidence:.2f})")
            for evidence in pattern.evidence:
                lines.append(f"   evidence: {evidence}")
    return "\n".join(lines)


def render_analysis_human(analysis: SemanticAnalysis, changes: list[Change]) -> str:
    lines: list[str] = [
        click.style(
            f"Change type: {analysis.change_type} ({analysis.confidence:.0%} confidence)",
            bold=True,
        ),
        f"{len(changes)} files, {analysis.complexity.lines_of_code} changed lines, "
        f"cyclomatic {analysis.complexity.cyclomatic}, "
        f"cognitive {analysis.complexity.cognitive}, "
        f"nesting {analysis.complexity.nesting_depth}",
    ]
    structure = analysis.structure
    if structure.framework:
        lines.append(f"Language: {structure.language} ({structure.framework})")
    else:
        lines.append(f"Language: {structure.language}")

    if analysis.patterns:
        lines.append(click.style("Patterns:", bold=True))
        for pattern in analysis.patterns:
            lines.append(f"- {pattern.type}: {pattern.description} ({len(pattern.evidence)})")

    if analysis.risk_factors:
        lines.append(click.style("Risk factors:", bold=True))
        for factor in analysis.risk_factors:
            location = f"{factor.file}:{factor.line}" if factor.line is not None else factor.file
            label = click.style(
                f"- [{factor.type}] {factor.severity}", fg=SEVERITY_COLORS[factor.severity]
            )
            lines.append(f"{label} {factor.description} ({location})")

    impact = analysis.impact
    lines.append(f"Impact: {impact.risk} risk, {impact.scope} scope")
    if impact.affected_components:
        lines.append(f"- components: {', '.join(impact.affected_components)}")
    for recommendation in impact.testing_recommendations:
        lines.append(f"- test: {recommendation}")
    return "\n".join(lines)


def render_quality_human(
    reports: list[FileQualityReport], overview: ProjectQualityOverview
) -> str:
    lines: list[str] = []
    for report in reports:
        lines.append(
            click.style(
                f"{report.file}: {report.overall_score}/100 ({report.overall_grade})",
                fg=GRADE_COLORS[report.overall_grade],
                bold=True,
            )
        )
        for metric in report.metrics:
            lines.append(
                f"  {metric.dimension:<16} {metric.score:>3} {metric.grade} {metric.trend}"
            )
            for issue in metric.issues[:5]:
                lines.append(f"    L{issue.line} [{issue.severity}] {issue.rule}: {issue.message}")

    if len(reports) > 1:
        lines.append(click.style(f"Project score: {overview.overall_score}/100", bold=True))
        if overview.hotspots:
            lines.append("Hotspots: " + ", ".join(overview.hotspots))
    for recommendation in overview.recommendations:
        lines.append(f"- {recommendation}")
    return "\n".join(lines)


def render_structure_human(path: str, structure: FileStructure) -> str:
    lines = [click.style(f"{path} ({structure.language})", bold=True)]
    if structure.framework:
        lines.append(f"framework: {structure.framework}")
    for item in structure.imports:
        marker = "local" if item.is_local else "external"
        lines.append(f"import {item.module} [{marker}]")
    for item in structure.exports:
        default = " default" if item.is_default else ""
        lines.append(f"export{default} {item.kind} {item.name}")
    for item in structure.functions:
        lines.append(f"function {item.name} L{item.line} complexity={item.complexity}")
    for cls in structure.classes:
        lines.append(f"class {cls.name} L{cls.line} methods={', '.join(cls.methods) or '-'}")
    for route in structure.routes:
        lines.append(f"route {route.method} {route.path} -> {route.handler}")
    return "\n".join(lines)


def render_json(payload: dict[str, Any], *, input_source: str) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(payload, input_source=input_source), sort_keys=True)


def build_json_payload(payload: dict[str, Any], *, input_source: str) -> dict[str, Any]:
    """Attach generation metadata to a result payload."""
    meta: dict[str, Any] = {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "input_source": input_source,
        "version": __version__,
    }
    return {**payload, "meta": meta}
