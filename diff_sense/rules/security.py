"""Security-sensitive change risk rule."""

from __future__ import annotations

from diff_sense.heuristics import clip_line, has_credential_keyword, is_security_sensitive_path
from diff_sense.rules.base import Finding, RiskContext, RiskFactor


class SecurityRule:
    """Raises risk for sensitive paths or credential-like added or removed lines."""

    rule_id = "security"

    def evaluate(self, context: RiskContext) -> list[Finding]:
        markers = context.config.security_markers
        evidence: list[str] = []
        for change in context.changes:
            if is_security_sensitive_path(change.path, markers):
                evidence.append(f"Sensitive path: {change.path}")
            for line in change.added_lines():
                if has_credential_keyword(line.content):
                    evidence.append(f"{change.path}:{line.line_number}: {clip_line(line.content)}")
            for line in change.removed_lines():
                if has_credential_keyword(line.content):
                    evidence.append(f"{change.path}: removed {clip_line(line.content)}")

        if not evidence:
            return []
        return [
            Finding(
                rule_id=self.rule_id,
                factor=RiskFactor(
                    type="security",
                    description="Security-sensitive changes detected",
                    impact="high",
                    evidence=_dedupe(evidence),
                ),
                recommendations=[
                    "Review for exposed secrets or credentials",
                    "Ensure security best practices are followed",
                ],
            )
        ]


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
