"""Base rule protocol and risk factor model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from diff_sense.config import RiskConfig
from diff_sense.diff_parser import Change

RiskFactorType = Literal["size", "complexity", "scope", "security", "breaking"]
Impact = Literal["low", "medium", "high"]


@dataclass(slots=True)
class RiskFactor:
    """A single session-level risk factor."""

    type: RiskFactorType
    description: str
    impact: Impact
    evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "impact": self.impact,
            "evidence": list(self.evidence),
        }


@dataclass(slots=True)
class Finding:
    """A risk factor plus the fixed advice its rule attaches to it."""

    rule_id: str
    factor: RiskFactor
    recommendations: list[str] = field(default_factory=list)
    split_suggestions: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RiskContext:
    """Everything a risk rule may look at."""

    changes: list[Change]
    complexity: str
    config: RiskConfig = field(default_factory=RiskConfig)

    @property
    def total_files(self) -> int:
        return len({change.path for change in self.changes})

    @property
    def changed_lines(self) -> int:
        return sum(change.changed_lines for change in self.changes)


class Rule(Protocol):
    """Protocol for deterministic risk rules."""

    rule_id: str

    def evaluate(self, context: RiskContext) -> list[Finding]:
        """Evaluate session changes and return findings."""
