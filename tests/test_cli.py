"""CLI tests for diff-sense commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from diff_sense import __version__
from diff_sense.cli import app
from tests.helpers_changes import FIXTURE_DIR, load_fixture
from tests.helpers_git import commit_all, init_repo, write_file

runner = CliRunner()


def _repo_with_removed_export(tmp_path: Path) -> Path:
    repo = init_repo(tmp_path)
    write_file(repo, "src/api.ts", "export function login() {}\nexport const ready = true;\n")
    commit_all(repo, "baseline")
    write_file(repo, "src/api.ts", "export const ready = true;\n")
    return repo


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("session", "analyze", "quality", "structure", "rules", "config-init"):
        assert command in result.output


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_analyze_diff_file_json() -> None:
    result = runner.invoke(
        app,
        ["analyze", "--diff-file", str(FIXTURE_DIR / "auth_login.diff"), "--format", "json"],
    )
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["analysis"]["change_type"] == "bugfix"
    assert payload["changes"][0]["path"] == "src/auth.ts"
    assert payload["meta"]["input_source"].startswith("diff_file:")
    assert any(
        factor["type"] == "breaking" for factor in payload["analysis"]["risk_factors"]
    )


def test_analyze_stdin_human() -> None:
    result = runner.invoke(app, ["analyze", "--stdin"], input=load_fixture("multi_file.diff"))
    assert result.exit_code == 0
    assert "Change type:" in result.output
    assert "3 files" in result.output


def test_analyze_rejects_two_inputs() -> None:
    result = runner.invoke(
        app, ["analyze", "--stdin", "--diff-file", str(FIXTURE_DIR / "auth_login.diff")]
    )
    assert result.exit_code == 2


def test_analyze_rejects_unknown_format() -> None:
    result = runner.invoke(
        app,
        ["analyze", "--diff-file", str(FIXTURE_DIR / "auth_login.diff"), "--format", "xml"],
    )
    assert result.exit_code == 2


def test_session_json_and_fail_on(tmp_path: Path) -> None:
    repo = _repo_with_removed_export(tmp_path)

    result = runner.invoke(app, ["session", "--repo", str(repo), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["branch"] == "main"
    assert payload["stats"]["complexity"] == "critical"
    assert payload["risk"]["level"] == "high"
    assert payload["meta"]["input_source"] == "git_working_tree"

    failing = runner.invoke(
        app, ["session", "--repo", str(repo), "--format", "json", "--fail-on", "high"]
    )
    assert failing.exit_code == 1

    passing = runner.invoke(
        app, ["session", "--repo", str(repo), "--format", "json", "--fail-on", "critical"]
    )
    assert passing.exit_code == 0


def test_session_human(tmp_path: Path) -> None:
    repo = _repo_with_removed_export(tmp_path)
    result = runner.invoke(app, ["session", "--repo", str(repo)])
    assert result.exit_code == 0
    assert "Risk level: HIGH" in result.output
    assert "Potential breaking changes detected" in result.output


def test_session_outside_git_repo_is_bad_parameter(tmp_path: Path) -> None:
    result = runner.invoke(app, ["session", "--repo", str(tmp_path)])
    assert result.exit_code == 2


def test_quality_json_and_fail_below(tmp_path: Path) -> None:
    write_file(tmp_path, "src/app.py", 'def run():\n    """Run."""\n    return 1\n')

    result = runner.invoke(
        app, ["quality", "src/app.py", "--repo", str(tmp_path), "--format", "json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["files"][0]["file"] == "src/app.py"
    assert len(payload["files"][0]["metrics"]) == 6
    assert payload["overview"]["files_analyzed"] == 1

    failing = runner.invoke(
        app, ["quality", "src/app.py", "--repo", str(tmp_path), "--fail-below", "101"]
    )
    assert failing.exit_code == 1
    assert "src/app.py:" in failing.output


def test_quality_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["quality", "src/nope.py", "--repo", str(tmp_path)])
    assert result.exit_code == 2


def test_structure_json(tmp_path: Path) -> None:
    source = tmp_path / "service.py"
    source.write_text("import flask\n\n\ndef handler():\n    return 1\n", encoding="utf-8")

    result = runner.invoke(app, ["structure", str(source), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["language"] == "python"
    assert payload["framework"] == "flask"
    assert payload["functions"][0]["name"] == "handler"


def test_rules_reflect_disabled_config(tmp_path: Path) -> None:
    (tmp_path / ".diff-sense.toml").write_text('[risk]\ndisable = ["scope"]\n', encoding="utf-8")

    result = runner.invoke(app, ["rules", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    enabled = {item["rule_id"]: item["enabled"] for item in payload["rules"]}
    assert enabled == {
        "size": True,
        "complexity": True,
        "scope": False,
        "security": True,
        "breaking": True,
    }

    human = runner.invoke(app, ["rules", "--repo", str(tmp_path)])
    assert "- scope [disabled]" in human.output


def test_unknown_disabled_rule_is_bad_parameter(tmp_path: Path) -> None:
    (tmp_path / ".diff-sense.toml").write_text('[risk]\ndisable = ["nope"]\n', encoding="utf-8")
    result = runner.invoke(app, ["config", "--repo", str(tmp_path)])
    assert result.exit_code == 2


def test_config_json(tmp_path: Path) -> None:
    result = runner.invoke(app, ["config", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["source"] is None
    assert payload["active_rule_ids"] == ["size", "complexity", "scope", "security", "breaking"]


def test_config_init_and_validate(tmp_path: Path) -> None:
    out = tmp_path / ".diff-sense.toml"

    created = runner.invoke(app, ["config-init", "--out", str(out)])
    assert created.exit_code == 0
    assert out.exists()

    refused = runner.invoke(app, ["config-init", "--out", str(out)])
    assert refused.exit_code == 2

    forced = runner.invoke(app, ["config-init", "--out", str(out), "--force"])
    assert forced.exit_code == 0

    validated = runner.invoke(app, ["config-validate", "--repo", str(tmp_path)])
    assert validated.exit_code == 0
    assert "Config is valid." in validated.output


def test_config_validate_reports_bad_thresholds(tmp_path: Path) -> None:
    (tmp_path / ".diff-sense.toml").write_text(
        "[session]\nmedium_files = 50\n", encoding="utf-8"
    )
    result = runner.invoke(app, ["config-validate", "--repo", str(tmp_path)])
    assert result.exit_code == 2
