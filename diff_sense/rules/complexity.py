"""Session complexity risk rule."""

from __future__ import annotations

from diff_sense.rules.base import Finding, RiskContext, RiskFactor

IMPACT_BY_COMPLEXITY = {"high": "medium", "critical": "high"}


class ComplexityRule:
    """Maps a high or critical session complexity tier to a risk factor."""

    rule_id = "complexity"

    def evaluate(self, context: RiskContext) -> list[Finding]:
        impact = IMPACT_BY_COMPLEXITY.get(context.complexity)
        if impact is None:
            return []
        return [
            Finding(
                rule_id=self.rule_id,
                factor=RiskFactor(
                    type="complexity",
                    description=f"Change complexity is {context.complexity}",
                    impact=impact,
                ),
                recommendations=[
                    "Add comprehensive tests for complex changes",
                    "Consider code review from senior team member",
                ],
            )
        ]
