"""Breaking-change risk rule."""

from __future__ import annotations

from diff_sense.heuristics import clip_line, is_breaking_removal
from diff_sense.rules.base import Finding, RiskContext, RiskFactor


class BreakingRule:
    """Flags removed lines that carried an export, function or class."""

    rule_id = "breaking"

    def evaluate(self, context: RiskContext) -> list[Finding]:
        evidence = [
            f"{change.path}: {clip_line(line.content)}"
            for change in context.changes
            for line in change.removed_lines()
            if is_breaking_removal(line.content)
        ]
        if not evidence:
            return []
        return [
            Finding(
                rule_id=self.rule_id,
                factor=RiskFactor(
                    type="breaking",
                    description="Potential breaking changes detected",
                    impact="high",
                    evidence=evidence,
                ),
                recommendations=[
                    "Update API documentation",
                    "Plan migration strategy for dependent code",
                ],
                split_suggestions=["Isolate breaking changes into separate commit"],
            )
        ]
