"""System configuration scope risk rule."""

from __future__ import annotations

from diff_sense.heuristics import is_system_config_path
from diff_sense.rules.base import Finding, RiskContext, RiskFactor


class ScopeRule:
    """Raises risk when build or system configuration files change."""

    rule_id = "scope"

    def evaluate(self, context: RiskContext) -> list[Finding]:
        patterns = context.config.system_config_patterns
        touched = sorted(
            {
                change.path
                for change in context.changes
                if is_system_config_path(change.path, patterns)
            }
        )
        if not touched:
            return []
        return [
            Finding(
                rule_id=self.rule_id,
                factor=RiskFactor(
                    type="scope",
                    description="System configuration files modified",
                    impact="high",
                    evidence=touched,
                ),
                recommendations=[
                    "Test build and deployment processes",
                    "Verify all team members can run the project",
                ],
            )
        ]
