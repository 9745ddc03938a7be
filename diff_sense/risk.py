"""Session risk assessment built from rule findings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from diff_sense.config import RiskConfig
from diff_sense.diff_parser import Change
from diff_sense.rules import build_rules
from diff_sense.rules.base import Finding, RiskContext, RiskFactor, Rule

RiskLevel = Literal["low", "medium", "high", "critical"]


@dataclass(slots=True)
class SessionRisk:
    """Overall risk level with the factors and advice behind it."""

    level: RiskLevel
    factors: list[RiskFactor] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    split_suggestions: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "factors": [factor.to_dict() for factor in self.factors],
            "recommendations": list(self.recommendations),
            "split_suggestions": (
                list(self.split_suggestions) if self.split_suggestions is not None else None
            ),
        }


def assess_risk(
    changes: list[Change],
    complexity: str,
    config: RiskConfig | None = None,
    rules: list[Rule] | None = None,
) -> SessionRisk:
    """Run every rule over the changes and fold the findings into one assessment."""
    effective_config = config or RiskConfig()
    active_rules = (
        rules
        if rules is not None
        else build_rules(disabled_rule_ids=effective_config.disabled_rules)
    )
    context = RiskContext(changes=changes, complexity=complexity, config=effective_config)

    findings: list[Finding] = []
    for rule in active_rules:
        findings.extend(rule.evaluate(context))

    factors = [finding.factor for finding in findings]
    recommendations = _dedupe([item for finding in findings for item in finding.recommendations])
    splits = _dedupe([item for finding in findings for item in finding.split_suggestions])
    return SessionRisk(
        level=risk_level(factors, effective_config),
        factors=factors,
        recommendations=recommendations,
        split_suggestions=splits or None,
    )


def risk_level(factors: list[RiskFactor], config: RiskConfig | None = None) -> RiskLevel:
    """Map factor impacts to an overall level; more high factors never lower it."""
    effective_config = config or RiskConfig()
    high = sum(1 for factor in factors if factor.impact == "high")
    medium = sum(1 for factor in factors if factor.impact == "medium")

    if high >= effective_config.critical_high_count:
        return "critical"
    if high >= effective_config.high_high_count or medium >= effective_config.high_medium_count:
        return "high"
    if (
        high >= effective_config.medium_high_count
        or medium >= effective_config.medium_medium_count
    ):
        return "medium"
    return "low"


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
