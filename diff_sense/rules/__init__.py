"""Rules package."""

from dataclasses import dataclass

from diff_sense.rules.base import Rule
from diff_sense.rules.breaking import BreakingRule
from diff_sense.rules.complexity import ComplexityRule
from diff_sense.rules.scope import ScopeRule
from diff_sense.rules.security import SecurityRule
from diff_sense.rules.size import SizeRule

RULE_CLASSES: tuple[type[Rule], ...] = (
    SizeRule,
    ComplexityRule,
    ScopeRule,
    SecurityRule,
    BreakingRule,
)


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str


def default_rules() -> list[Rule]:
    """Return the default deterministic rule set."""
    return build_rules()


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
) -> list[Rule]:
    """Build rule instances applying enable/disable filters."""
    registry = {rule_cls.rule_id: rule_cls for rule_cls in RULE_CLASSES}
    requested = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])
    unknown = [rule_id for rule_id in requested if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    disabled = set(disabled_rule_ids or [])
    selected = enabled_rule_ids if enabled_rule_ids is not None else list(registry)
    built: list[Rule] = []
    for rule_id in registry:
        if rule_id in selected and rule_id not in disabled:
            built.append(registry[rule_id]())
    return built


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all known rules."""
    return [
        RuleInfo(
            rule_id=rule_cls.rule_id,
            name=rule_cls.__name__,
            description=(rule_cls.__doc__ or "").strip(),
        )
        for rule_cls in RULE_CLASSES
    ]
