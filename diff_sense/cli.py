"""CLI entrypoint for diff-sense."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from diff_sense import __version__
from diff_sense.config import AppConfig, default_config_template, load_app_config
from diff_sense.diff_parser import Change, parse_change_set, parse_diff_output
from diff_sense.git import GitChangeSource, GitError
from diff_sense.heuristics import detect_language
from diff_sense.output import (
    render_analysis_human,
    render_json,
    render_quality_human,
    render_session_human,
    render_structure_human,
)
from diff_sense.quality import QualityScorer
from diff_sense.rules import build_rules, list_rule_info
from diff_sense.rules.base import Rule
from diff_sense.semantic import SemanticAnalyzer
from diff_sense.session import SessionTracker
from diff_sense.structure import RegexStructureExtractor

RISK_LEVEL_ORDER = ("low", "medium", "high", "critical")

app = typer.Typer(
    name="diff-sense",
    no_args_is_help=True,
    help="Analyze working-tree changes: semantics, session risk and code quality.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug details to stderr."),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("session")
def session_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_on: Annotated[
        str | None,
        typer.Option(help="Exit nonzero when risk reaches this level: medium|high|critical."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Summarize working and staged changes as a development session."""
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _resolve_format(format, app_config)
    if fail_on is not None and fail_on.lower() not in RISK_LEVEL_ORDER[1:]:
        raise typer.BadParameter(
            "fail-on must be one of: medium, high, critical", param_hint="--fail-on"
        )
    _build_configured_rules_or_raise(app_config)

    tracker = SessionTracker(GitChangeSource(repo), config=app_config)
    try:
        session = tracker.current_session()
    except GitError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output_format == "json":
        typer.echo(render_json(session.to_dict(), input_source="git_working_tree"))
    else:
        typer.echo(render_session_human(session))

    if fail_on is not None:
        threshold = RISK_LEVEL_ORDER.index(fail_on.lower())
        if RISK_LEVEL_ORDER.index(session.risk.level) >= threshold:
            raise typer.Exit(code=1)


@app.command("analyze")
def analyze_command(
    diff_file: Annotated[Path | None, typer.Option(help="Path to unified diff file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read unified diff from stdin.")] = False,
    staged: Annotated[
        bool, typer.Option(help="Analyze staged instead of working changes.")
    ] = False,
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Classify changes and report structure deltas and code risk factors."""
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _resolve_format(format, app_config)
    if diff_file and stdin:
        raise typer.BadParameter("Use either --diff-file or --stdin, not both.")

    try:
        changes, input_source = _resolve_changes(
            diff_file=diff_file, stdin=stdin, staged=staged, repo=repo
        )
    except GitError as exc:
        raise typer.BadParameter(str(exc)) from exc

    analysis = SemanticAnalyzer().analyze(changes)
    if output_format == "json":
        payload = {
            "analysis": analysis.to_dict(),
            "changes": [change.to_dict(include_hunks=False) for change in changes],
        }
        typer.echo(render_json(payload, input_source=input_source))
        return
    typer.echo(render_analysis_human(analysis, changes))


@app.command("quality")
def quality_command(
    paths: Annotated[list[Path], typer.Argument(help="Files to score, relative to --repo.")],
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if the overall score is below this value.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Score files across six quality dimensions."""
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _resolve_format(format, app_config)
    root = repo.resolve()
    scorer = QualityScorer(app_config.quality, root=root)

    reports = []
    for path in paths:
        relative = _relative_to_root(path, root)
        if not (root / relative).is_file():
            raise typer.BadParameter(f"File does not exist: {path}", param_hint="paths")
        reports.append(scorer.score_file(relative))
    overview = scorer.project_overview(reports)

    if output_format == "json":
        payload = {
            "files": [report.to_dict() for report in reports],
            "overview": overview.to_dict(),
        }
        typer.echo(render_json(payload, input_source="files"))
    else:
        typer.echo(render_quality_human(reports, overview))

    if fail_below is not None and overview.overall_score < fail_below:
        raise typer.Exit(code=1)


@app.command("structure")
def structure_command(
    path: Annotated[Path, typer.Argument(help="Source file to summarize.")],
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Show exports, imports, functions, classes and routes of a file."""
    output_format = _validate_format(format)
    if not path.is_file():
        raise typer.BadParameter(f"File does not exist: {path}", param_hint="path")

    content = path.read_text(encoding="utf-8", errors="replace")
    structure = RegexStructureExtractor().extract(content, detect_language(path.as_posix()))
    if output_format == "json":
        typer.echo(render_json(structure.to_dict(), input_source=f"file:{path}"))
        return
    typer.echo(render_structure_human(path.as_posix(), structure))


@app.command("rules")
def rules_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available risk rules."""
    output_format = _validate_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(f"- {item.rule_id} [{status}] - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = _validate_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- session: {payload['session']}",
        f"- risk: {payload['risk']}",
        f"- patterns: {payload['patterns']}",
        f"- quality: {payload['quality']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".diff-sense.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter repository config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".diff-sense.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active rules."""
    output_format = _validate_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_ids": [rule.rule_id for rule in active_rules],
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rule_ids: {payload['active_rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _resolve_changes(
    *,
    diff_file: Path | None,
    stdin: bool,
    staged: bool,
    repo: Path,
) -> tuple[list[Change], str]:
    if diff_file is not None:
        return (parse_diff_output(diff_file.read_text(encoding="utf-8")), f"diff_file:{diff_file}")

    if stdin:
        return (parse_diff_output(sys.stdin.read()), "stdin")

    source = GitChangeSource(repo)
    if staged:
        raw = source.staged_changes()
        return (parse_change_set(raw.numstat, raw.diff), "git_staged")
    raw = source.working_changes()
    return (parse_change_set(raw.numstat, raw.diff), "git_working_tree")


def _relative_to_root(path: Path, root: Path) -> str:
    if path.is_absolute():
        resolved = path.resolve()
        if resolved.is_relative_to(root):
            return resolved.relative_to(root).as_posix()
        raise typer.BadParameter(f"{path} is outside repository {root}", param_hint="paths")
    return path.as_posix()


def _resolve_format(value: str | None, app_config: AppConfig) -> str:
    return _validate_format(value or app_config.format)


def _validate_format(value: str) -> str:
    output_format = value.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[Rule]:
    try:
        return build_rules(disabled_rule_ids=app_config.risk.disabled_rules)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.risk.disable") from exc
