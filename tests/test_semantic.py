"""Tests for semantic change classification."""

from __future__ import annotations

from diff_sense.diff_parser import parse_change
from diff_sense.semantic import SemanticAnalyzer, classify_change_type
from tests.helpers_changes import load_fixture, make_change


def _analyze(changes):
    return SemanticAnalyzer().analyze(changes)


def test_removed_export_with_added_error_handling() -> None:
    change = parse_change("3\t1\tsrc/auth.ts", load_fixture("auth_login.diff"))
    assert change is not None
    analysis = _analyze([change])

    assert analysis.change_type not in {"docs", "chore"}
    assert analysis.change_type == "bugfix"
    breaking = [factor for factor in analysis.risk_factors if factor.type == "breaking"]
    assert len(breaking) == 1
    assert breaking[0].description == "Exported symbol 'login' removed"
    assert breaking[0].severity == "high"
    assert breaking[0].file == "src/auth.ts"
    assert breaking[0].line == 1
    assert [item.name for item in analysis.structure.removed_exports] == ["login"]
    assert analysis.structure.removed_functions[0].name == "login"
    assert analysis.structure.language == "typescript"


def test_docs_only_change() -> None:
    analysis = _analyze([make_change("README.md", ["New usage section"], ["Old text"])])
    assert analysis.change_type == "docs"
    assert analysis.confidence == 1.0
    assert [pattern.type for pattern in analysis.patterns] == ["documentation_change"]


def test_new_test_file() -> None:
    change = make_change(
        "tests/test_login.py",
        ["def test_login():", "    assert login('a', 'b') is True"],
        kind="added",
    )
    analysis = _analyze([change])
    assert analysis.change_type == "test"
    assert analysis.evidence_scores["test"] == 4.5


def test_manifest_change_is_chore() -> None:
    analysis = _analyze([make_change("package.json", ['  "left-pad": "^1.3.0",'])])
    assert analysis.change_type == "chore"
    assert analysis.patterns[0].type == "dependency_change"


def test_no_evidence_defaults_to_chore_with_zero_confidence() -> None:
    analysis = _analyze([])
    assert (analysis.change_type, analysis.confidence) == ("chore", 0.0)
    assert analysis.complexity.lines_of_code == 0
    assert analysis.risk_factors == []


def test_tie_prefers_bugfix_over_feature() -> None:
    change = make_change(
        "src/handlers.py",
        ["def handler(request):", "    raise ValueError('bad request')"],
    )
    analysis = _analyze([change])

    assert analysis.evidence_scores["bugfix"] == analysis.evidence_scores["feature"] == 2.0
    assert analysis.change_type == "bugfix"
    assert analysis.confidence == 0.5


def test_modified_signature_reads_as_refactor() -> None:
    change = make_change(
        "src/io.py",
        ["def load(path, strict=False):"],
        ["def load(path):"],
    )
    analysis = _analyze([change])

    assert analysis.change_type == "refactor"
    assert analysis.confidence == 1.0
    assert [item.name for item in analysis.structure.modified_functions] == ["load"]
    assert analysis.structure.added_functions == []
    assert "function_modification" in {pattern.type for pattern in analysis.patterns}
    assert not any(factor.type == "breaking" for factor in analysis.risk_factors)


def test_new_source_file_with_functions_is_feature() -> None:
    change = make_change(
        "src/billing.ts",
        [
            "export function charge(amount) {",
            "  return amount * 2;",
            "}",
            "export class Invoice {}",
        ],
        kind="added",
    )
    analysis = _analyze([change])

    assert analysis.change_type == "feature"
    assert {item.name for item in analysis.structure.added_functions} == {"charge"}
    assert {item.name for item in analysis.structure.added_classes} == {"Invoice"}
    assert {item.name for item in analysis.structure.added_exports} == {"charge", "Invoice"}


def test_removed_plain_function_is_breaking() -> None:
    change = make_change("src/util.py", [], ["def helper():", "    return 1"], start_line=7)
    analysis = _analyze([change])

    breaking = [factor for factor in analysis.risk_factors if factor.type == "breaking"]
    assert [factor.description for factor in breaking] == ["Function 'helper' removed"]
    assert breaking[0].line == 7


def test_line_level_risk_factors() -> None:
    change = make_change(
        "src/jobs.py",
        [
            'password = "hunter2"',
            'cursor.execute("DROP TABLE users")',
            "global counter",
            "for job in jobs:",
            "    for step in job.steps:",
            "        step.run()",
        ],
    )
    analysis = _analyze([change])
    found = {(factor.type, factor.severity, factor.line) for factor in analysis.risk_factors}

    assert ("security", "high", 1) in found
    assert ("data", "high", 2) in found
    assert ("concurrency", "medium", 3) in found
    assert ("performance", "medium", 4) in found


def test_one_line_reports_every_matching_risk() -> None:
    change = make_change(
        "src/boot.js",
        ['const api_key = "abc123"; eval(payload); window.cache = {};'],
    )
    factors = _analyze([change]).risk_factors
    found = sorted((factor.type, factor.severity, factor.description) for factor in factors)

    assert found == [
        ("concurrency", "medium", "Shared mutable state introduced"),
        ("security", "high", "Dynamic code execution or HTML injection sink"),
        ("security", "high", "Hardcoded credential assigned a literal value"),
    ]
    assert {factor.line for factor in factors} == {1}


def test_alter_statement_is_medium_data_risk() -> None:
    change = make_change("db/schema.py", ['op("ALTER TABLE users ADD COLUMN age int")'])
    factors = _analyze([change]).risk_factors
    assert [(factor.type, factor.severity) for factor in factors] == [("data", "medium")]
    assert factors[0].description == "Raw SQL ALTER statement"


def test_complexity_metrics_for_nested_branches() -> None:
    change = make_change(
        "src/rules.js",
        ["if (a) {", "  if (b) {", "    run();", "  }", "}"],
    )
    metrics = _analyze([change]).complexity

    assert metrics.cyclomatic == 2
    assert metrics.cognitive == 3
    assert metrics.nesting_depth == 2
    assert metrics.lines_of_code == 5


def test_framework_detected_from_added_imports() -> None:
    change = make_change("src/App.tsx", ["import React from 'react';"])
    analysis = _analyze([change])

    assert analysis.structure.framework == "react"
    assert [item.name for item in analysis.structure.added_imports] == ["react"]
    assert analysis.change_type == "chore"


def test_analysis_to_dict_shape() -> None:
    change = parse_change("3\t1\tsrc/auth.ts", load_fixture("auth_login.diff"))
    assert change is not None
    payload = _analyze([change]).to_dict()

    assert set(payload) == {
        "change_type",
        "confidence",
        "patterns",
        "structure",
        "complexity",
        "risk_factors",
        "evidence_scores",
        "impact",
    }
    assert payload["structure"]["exports"]["removed"][0]["name"] == "login"
    assert set(payload["evidence_scores"]) == {
        "bugfix",
        "feature",
        "refactor",
        "test",
        "docs",
        "chore",
    }


def test_classify_change_type_matches_analyzer() -> None:
    changes = [make_change("docs/setup.md", ["Install with pip."])]
    assert classify_change_type(changes) == ("docs", 1.0)
