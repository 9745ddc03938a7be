"""Impact summary derived from a change set and its semantic analysis.

The summary is structured data for prompt builders: which components are
touched, what could go wrong, what to test, and coarse business, technical
and security effects. Every value comes from path and line heuristics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Literal

from diff_sense.diff_parser import Change

if TYPE_CHECKING:
    from diff_sense.semantic import SemanticAnalysis

ImpactRisk = Literal["low", "medium", "high"]
ImpactScope = Literal["local", "module", "system"]

LARGE_CHANGE_LINES = 200
RISK_MEDIUM_LINES = 100
RISK_HIGH_LINES = 500
RISK_ISSUE_CAP = 3
RISK_HIGH_SCORE = 5
RISK_MEDIUM_SCORE = 2
INTEGRATION_TEST_MIN_CHANGES = 3
HIGH_CYCLOMATIC = 20
ELEVATED_CYCLOMATIC = 15

COMPONENT_DIRS = ("components",)
SERVICE_DIRS = ("services", "modules")
CONFIG_MARKERS = ("config", ".env", "package.json")
SYSTEM_SCOPE_MARKERS = ("package.json", "global", "app.", "main.")
UI_MARKERS = ("component", "page", "view", ".css", ".scss")
SECURITY_FIX_MARKERS = ("security", "vulnerability", "sanitize", "validate")
ACCESS_CONTROL_MARKERS = ("auth", "permission", "role", "access")
EXPOSURE_MARKERS = ("console.log", "print(", "password", "token")
AUTHENTICATION_MARKERS = ("login", "authenticate", "jwt", "session")
ENCRYPTION_MARKERS = ("encrypt", "decrypt", "crypto", "hash")


@dataclass(slots=True)
class BusinessImpact:
    customer_facing: bool = False
    revenue_impact: str = "none"
    user_experience: str = "unchanged"
    time_to_market: str = "neutral"

    def to_dict(self) -> dict[str, Any]:
        return {
            "customer_facing": self.customer_facing,
            "revenue_impact": self.revenue_impact,
            "user_experience": self.user_experience,
            "time_to_market": self.time_to_market,
        }


@dataclass(slots=True)
class TechnicalImpact:
    architecture_change: str = "none"
    code_quality: str = "unchanged"
    test_coverage: str = "unchanged"
    technical_debt: str = "unchanged"
    scalability: str = "unchanged"

    def to_dict(self) -> dict[str, Any]:
        return {
            "architecture_change": self.architecture_change,
            "code_quality": self.code_quality,
            "test_coverage": self.test_coverage,
            "technical_debt": self.technical_debt,
            "scalability": self.scalability,
        }


@dataclass(slots=True)
class SecurityImpact:
    vulnerability_introduction: bool = False
    vulnerability_resolution: bool = False
    access_control_change: bool = False
    data_exposure_risk: str = "none"
    authentication_change: bool = False
    encryption_change: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "vulnerability_introduction": self.vulnerability_introduction,
            "vulnerability_resolution": self.vulnerability_resolution,
            "access_control_change": self.access_control_change,
            "data_exposure_risk": self.data_exposure_risk,
            "authentication_change": self.authentication_change,
            "encryption_change": self.encryption_change,
        }


@dataclass(slots=True)
class ImpactAnalysis:
    """Who and what a change set is likely to affect."""

    risk: ImpactRisk = "low"
    scope: ImpactScope = "local"
    affected_components: list[str] = field(default_factory=list)
    potential_issues: list[str] = field(default_factory=list)
    testing_recommendations: list[str] = field(default_factory=list)
    business: BusinessImpact = field(default_factory=BusinessImpact)
    technical: TechnicalImpact = field(default_factory=TechnicalImpact)
    security: SecurityImpact = field(default_factory=SecurityImpact)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk": self.risk,
            "scope": self.scope,
            "affected_components": list(self.affected_components),
            "potential_issues": list(self.potential_issues),
            "testing_recommendations": list(self.testing_recommendations),
            "business": self.business.to_dict(),
            "technical": self.technical.to_dict(),
            "security": self.security.to_dict(),
        }


def analyze_impact(changes: list[Change], analysis: SemanticAnalysis) -> ImpactAnalysis:
    components = affected_components(changes)
    issues = potential_issues(changes)
    return ImpactAnalysis(
        risk=assess_impact_risk(changes, components, issues),
        scope=assess_scope(changes, components),
        affected_components=components,
        potential_issues=issues,
        testing_recommendations=testing_recommendations(changes),
        business=_business_impact(changes, analysis),
        technical=_technical_impact(changes, analysis),
        security=_security_impact(changes, analysis),
    )


def affected_components(changes: list[Change]) -> list[str]:
    """Top-level directories plus named component and service folders, in first-seen order."""
    components: dict[str, None] = {}
    for change in changes:
        parts = PurePosixPath(change.path).parts
        for markers in (COMPONENT_DIRS, SERVICE_DIRS):
            for index, part in enumerate(parts[:-1]):
                if part in markers:
                    components.setdefault(parts[index + 1], None)
                    break
        if len(parts) > 1:
            components.setdefault(parts[0], None)
    return list(components)


def potential_issues(changes: list[Change]) -> list[str]:
    issues: list[str] = []
    for change in changes:
        if change.changed_lines > LARGE_CHANGE_LINES:
            issues.append(f"Large change in {change.path} might indicate complexity issues")
        if change.kind == "deleted":
            issues.append(f"Deletion of {change.path} might break dependent components")
        if _path_has(change.path, CONFIG_MARKERS):
            issues.append(f"Configuration change in {change.path} might affect runtime behavior")
    return issues


def testing_recommendations(changes: list[Change]) -> list[str]:
    recommendations: list[str] = []
    for change in changes:
        if _path_has(change.path, ("component", "page")):
            recommendations.append(f"Test UI interactions for {change.path}")
        if _path_has(change.path, ("api", "service")):
            recommendations.append(f"Test API endpoints affected by {change.path}")
        if _path_has(change.path, ("model", "schema")):
            recommendations.append(f"Verify data integrity after changes to {change.path}")
    if len(changes) > INTEGRATION_TEST_MIN_CHANGES:
        recommendations.append("Run integration tests to verify component interactions")
    return recommendations


def assess_impact_risk(
    changes: list[Change], components: list[str], issues: list[str]
) -> ImpactRisk:
    score = 0
    total_lines = sum(change.changed_lines for change in changes)
    if total_lines > RISK_HIGH_LINES:
        score += 2
    elif total_lines > RISK_MEDIUM_LINES:
        score += 1
    if len(components) > 5:
        score += 2
    elif len(components) > 2:
        score += 1
    score += min(len(issues), RISK_ISSUE_CAP)
    score += sum(
        1
        for change in changes
        if change.kind == "deleted" or _path_has(change.path, ("config", "package.json"))
    )
    if score >= RISK_HIGH_SCORE:
        return "high"
    if score >= RISK_MEDIUM_SCORE:
        return "medium"
    return "low"


def assess_scope(changes: list[Change], components: list[str]) -> ImpactScope:
    if any(_path_has(change.path, SYSTEM_SCOPE_MARKERS) for change in changes):
        return "system"
    if len(components) > 1 or len(changes) > INTEGRATION_TEST_MIN_CHANGES:
        return "module"
    return "local"


def _business_impact(changes: list[Change], analysis: SemanticAnalysis) -> BusinessImpact:
    customer_facing = _is_customer_facing(changes, analysis)
    change_type = analysis.change_type

    revenue = "none"
    if change_type == "feature":
        revenue = "medium" if customer_facing else "low"
    elif change_type == "bugfix":
        revenue = "high" if _risk_types(analysis) & {"breaking"} else "low"

    if change_type in {"feature", "bugfix"}:
        experience = "improved"
    elif "performance" in _risk_types(analysis):
        experience = "degraded"
    else:
        experience = "unchanged"

    if change_type in {"chore", "refactor"}:
        time_to_market = "accelerated"
    elif analysis.complexity.cyclomatic > HIGH_CYCLOMATIC:
        time_to_market = "delayed"
    else:
        time_to_market = "neutral"

    return BusinessImpact(
        customer_facing=customer_facing,
        revenue_impact=revenue,
        user_experience=experience,
        time_to_market=time_to_market,
    )


def _technical_impact(changes: list[Change], analysis: SemanticAnalysis) -> TechnicalImpact:
    structure = analysis.structure
    risk_types = _risk_types(analysis)
    cyclomatic = analysis.complexity.cyclomatic

    if "breaking" in risk_types:
        architecture = "breaking"
    elif len(structure.added_classes) > 2 or structure.removed_functions:
        architecture = "major"
    elif structure.added_classes or len(structure.added_functions) > 5:
        architecture = "minor"
    else:
        architecture = "none"

    if analysis.change_type in {"refactor", "test"}:
        quality = "improved"
    else:
        quality = "degraded" if cyclomatic > ELEVATED_CYCLOMATIC else "unchanged"

    test_lines = sum(change.insertions for change in changes if _is_test_like(change.path))
    code_lines = sum(change.insertions for change in changes) - test_lines
    if test_lines > code_lines * 0.5:
        coverage = "increased"
    elif not any(_is_test_like(change.path) for change in changes) and code_lines > 100:
        coverage = "decreased"
    else:
        coverage = "unchanged"

    has_docs = any(_path_has(change.path, (".md", "doc")) for change in changes)
    if analysis.change_type == "refactor" or (has_docs and cyclomatic <= HIGH_CYCLOMATIC):
        debt = "reduced"
    elif cyclomatic > HIGH_CYCLOMATIC:
        debt = "increased"
    else:
        debt = "unchanged"

    if "performance" in risk_types:
        scalability = "reduced"
    elif analysis.change_type == "refactor":
        scalability = "improved"
    else:
        scalability = "unchanged"

    return TechnicalImpact(
        architecture_change=architecture,
        code_quality=quality,
        test_coverage=coverage,
        technical_debt=debt,
        scalability=scalability,
    )


def _security_impact(changes: list[Change], analysis: SemanticAnalysis) -> SecurityImpact:
    introduces = "security" in _risk_types(analysis)
    if introduces:
        exposure = "high"
    elif _lines_have(changes, EXPOSURE_MARKERS):
        exposure = "medium"
    else:
        exposure = "none"
    return SecurityImpact(
        vulnerability_introduction=introduces,
        vulnerability_resolution=_lines_have(changes, SECURITY_FIX_MARKERS, lowered=True),
        access_control_change=_lines_have(changes, ACCESS_CONTROL_MARKERS),
        data_exposure_risk=exposure,
        authentication_change=any("auth" in change.path for change in changes)
        or _lines_have(changes, AUTHENTICATION_MARKERS),
        encryption_change=_lines_have(changes, ENCRYPTION_MARKERS),
    )


def _is_customer_facing(changes: list[Change], analysis: SemanticAnalysis) -> bool:
    structure = analysis.structure
    if structure.added_exports or structure.removed_exports:
        return True
    return any(
        _path_has(change.path, UI_MARKERS) or change.path.endswith(".html") for change in changes
    )


def _risk_types(analysis: SemanticAnalysis) -> set[str]:
    return {factor.type for factor in analysis.risk_factors}


def _is_test_like(path: str) -> bool:
    return _path_has(path, ("test", "spec"))


def _path_has(path: str, markers: tuple[str, ...]) -> bool:
    lowered = path.lower()
    return any(marker in lowered for marker in markers)


def _lines_have(changes: list[Change], markers: tuple[str, ...], *, lowered: bool = False) -> bool:
    for change in changes:
        for hunk in change.hunks:
            for line in hunk.lines:
                if line.kind == "context":
                    continue
                content = line.content.lower() if lowered else line.content
                if any(marker in content for marker in markers):
                    return True
    return False
