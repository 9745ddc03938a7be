"""Change-size risk rule."""

from __future__ import annotations

from diff_sense.rules.base import Finding, RiskContext, RiskFactor

SPLIT_RECOMMENDATION = "Consider splitting this change into smaller, focused commits"
GROUP_SUGGESTION = "Group related file changes by feature or component"


class SizeRule:
    """Raises risk when too many files or lines change at once."""

    rule_id = "size"

    def evaluate(self, context: RiskContext) -> list[Finding]:
        findings: list[Finding] = []
        config = context.config

        total_files = context.total_files
        if total_files > config.files_medium:
            findings.append(
                Finding(
                    rule_id=self.rule_id,
                    factor=RiskFactor(
                        type="size",
                        description=f"Large number of files changed ({total_files})",
                        impact="high" if total_files > config.files_high else "medium",
                        evidence=[f"{total_files} files changed"],
                    ),
                    recommendations=[SPLIT_RECOMMENDATION],
                    split_suggestions=[GROUP_SUGGESTION],
                )
            )

        changed_lines = context.changed_lines
        if changed_lines > config.lines_medium:
            findings.append(
                Finding(
                    rule_id=self.rule_id,
                    factor=RiskFactor(
                        type="size",
                        description=f"Large number of lines changed ({changed_lines})",
                        impact="high" if changed_lines > config.lines_high else "medium",
                        evidence=[f"{changed_lines} changed lines"],
                    ),
                    recommendations=[SPLIT_RECOMMENDATION],
                )
            )

        return findings
