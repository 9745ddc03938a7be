"""Tests for session risk rules and level aggregation."""

from __future__ import annotations

import pytest

from diff_sense.config import RiskConfig
from diff_sense.risk import assess_risk, risk_level
from diff_sense.rules import build_rules, list_rule_info
from diff_sense.rules.base import RiskFactor
from diff_sense.rules.size import SPLIT_RECOMMENDATION
from diff_sense.session import classify_complexity
from tests.helpers_changes import make_change, make_sized_change


def _factor(impact: str) -> RiskFactor:
    return RiskFactor(type="size", description="synthetic", impact=impact)


def _large_session():
    changes = [make_sized_change(f"src/mod_{index}.py", 70) for index in range(17)]
    changes.append(make_sized_change("src/mod_17.py", 10))
    return changes


def test_large_session_has_high_size_factor() -> None:
    changes = _large_session()
    complexity = classify_complexity(changes)
    risk = assess_risk(changes, complexity)

    assert complexity == "critical"
    size_factors = [factor for factor in risk.factors if factor.type == "size"]
    assert [factor.impact for factor in size_factors] == ["medium", "high"]
    assert size_factors[0].description == "Large number of files changed (18)"
    assert size_factors[1].description == "Large number of lines changed (1200)"

    complexity_factor = next(factor for factor in risk.factors if factor.type == "complexity")
    assert complexity_factor.impact == "high"
    assert risk.level == "high"
    assert risk.recommendations.count(SPLIT_RECOMMENDATION) == 1
    assert risk.split_suggestions == ["Group related file changes by feature or component"]


def test_small_clean_session_is_low_risk() -> None:
    risk = assess_risk([make_sized_change("src/app.py", 5)], "low")
    assert risk.level == "low"
    assert risk.factors == []
    assert risk.recommendations == []
    assert risk.split_suggestions is None


def test_security_rule_flags_paths_and_credential_lines() -> None:
    changes = [
        make_sized_change("src/auth/session.ts", 4),
        make_change("src/settings.py", ["API_KEY = load_key()"]),
    ]
    risk = assess_risk(changes, "low")

    security = [factor for factor in risk.factors if factor.type == "security"]
    assert len(security) == 1
    assert security[0].impact == "high"
    assert security[0].evidence == [
        "Sensitive path: src/auth/session.ts",
        "src/settings.py:1: API_KEY = load_key()",
    ]
    assert "Review for exposed secrets or credentials" in risk.recommendations
    assert risk.level == "medium"


def test_security_rule_flags_removed_secret() -> None:
    change = make_change("src/client.py", ["token = os.environ['TOKEN']"], ['token = "abc123"'])
    risk = assess_risk([change], "low")

    security = [factor for factor in risk.factors if factor.type == "security"]
    assert security[0].evidence == [
        "src/client.py:1: token = os.environ['TOKEN']",
        'src/client.py: removed token = "abc123"',
    ]

    removal_only = make_change("src/client.py", [], ['token = "abc123"'])
    assert [factor.type for factor in assess_risk([removal_only], "low").factors] == ["security"]


def test_breaking_rule_suggests_isolating_removals() -> None:
    change = make_change("src/api.ts", [], ["export function login(user) {"])
    risk = assess_risk([change], classify_complexity([change]))

    breaking = [factor for factor in risk.factors if factor.type == "breaking"]
    assert breaking[0].evidence == ["src/api.ts: export function login(user) {"]
    assert risk.split_suggestions == ["Isolate breaking changes into separate commit"]
    assert "Plan migration strategy for dependent code" in risk.recommendations


def test_scope_rule_flags_system_config() -> None:
    risk = assess_risk([make_sized_change("tsconfig.json", 2)], "low")
    scope = [factor for factor in risk.factors if factor.type == "scope"]
    assert scope[0].evidence == ["tsconfig.json"]
    assert scope[0].impact == "high"


def test_disabled_rules_are_skipped() -> None:
    config = RiskConfig(disabled_rules=["security"])
    risk = assess_risk([make_sized_change("src/auth/session.ts", 4)], "low", config)
    assert risk.factors == []


def test_configured_size_thresholds() -> None:
    config = RiskConfig(files_medium=1, files_high=2, lines_medium=5, lines_high=10)
    changes = [make_sized_change("src/a.py", 6), make_sized_change("src/b.py", 6)]
    risk = assess_risk(changes, "low", config)

    assert [factor.impact for factor in risk.factors] == ["medium", "high"]


def test_risk_level_thresholds() -> None:
    assert risk_level([]) == "low"
    assert risk_level([_factor("medium")]) == "low"
    assert risk_level([_factor("medium")] * 2) == "medium"
    assert risk_level([_factor("high")]) == "medium"
    assert risk_level([_factor("high")] * 2) == "high"
    assert risk_level([_factor("medium")] * 4) == "high"
    assert risk_level([_factor("high")] * 3) == "critical"


def test_risk_level_is_monotonic_in_high_factors() -> None:
    order = ["low", "medium", "high", "critical"]
    factors = [_factor("medium")]
    previous = order.index(risk_level(factors))
    for _ in range(5):
        factors.append(_factor("high"))
        current = order.index(risk_level(factors))
        assert current >= previous
        previous = current


def test_build_rules_rejects_unknown_ids() -> None:
    with pytest.raises(ValueError, match="Unknown rule ids: nope"):
        build_rules(disabled_rule_ids=["nope"])


def test_build_rules_filters() -> None:
    assert [rule.rule_id for rule in build_rules(enabled_rule_ids=["size", "scope"])] == [
        "size",
        "scope",
    ]
    assert "breaking" not in {rule.rule_id for rule in build_rules(disabled_rule_ids=["breaking"])}


def test_list_rule_info() -> None:
    info = list_rule_info()
    assert [item.rule_id for item in info] == [
        "size",
        "complexity",
        "scope",
        "security",
        "breaking",
    ]
    assert all(item.description for item in info)
