"""Git subprocess helpers and the git-backed change source."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from subprocess import CalledProcessError, run

from diff_sense.diff_parser import RawChangeSet

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when git command execution fails."""


class GitChangeSource:
    """Change source reading the working tree and index of a git repository."""

    def __init__(self, repo: Path) -> None:
        self.repo = repo.resolve()

    def working_changes(self) -> RawChangeSet:
        return RawChangeSet(
            numstat=_run_git(self.repo, ["diff", "--numstat"]),
            diff=_run_git(self.repo, ["diff", "--no-color"]),
        )

    def staged_changes(self) -> RawChangeSet:
        return RawChangeSet(
            numstat=_run_git(self.repo, ["diff", "--staged", "--numstat"]),
            diff=_run_git(self.repo, ["diff", "--staged", "--no-color"]),
        )

    def current_branch(self) -> str:
        try:
            return _run_git(self.repo, ["rev-parse", "--abbrev-ref", "HEAD"]).strip()
        except GitError:
            # unborn branch: HEAD has no commit yet
            return _run_git(self.repo, ["symbolic-ref", "--short", "HEAD"]).strip()

    def current_commit(self) -> str:
        return get_head_revision(self.repo) or ""

    def has_unpushed_commits(self) -> bool:
        try:
            output = _run_git(self.repo, ["log", "HEAD", "--not", "--remotes", "--oneline"])
        except GitError as exc:
            logger.debug(f"Treating unpushed-commit check as empty: {exc}")
            return False
        return bool(output.strip())


def get_head_revision(repo: Path) -> str | None:
    """Return HEAD revision if present."""
    try:
        return _run_git(repo, ["rev-parse", "--verify", "HEAD"]).strip()
    except GitError:
        return None


def _run_git(repo: Path, args: list[str]) -> str:
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            env={**os.environ, "GIT_PAGER": "cat"},
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc

    return completed.stdout
