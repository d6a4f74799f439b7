"""
Git integration for gitsmart.

This module is the only place that spawns git. Everything above it
talks to a GitRunner, which answers two kinds of questions: "what did
this command print" and "did this command succeed". Failures are
reported as None/False, never raised, so extractors can substitute
defaults record by record.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional, Sequence

from .errors import GitError, NotARepositoryError

LOG = logging.getLogger(__name__)


def _run_git(
    args: Sequence[str],
    cwd: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    Arguments are passed as a list, never through a shell, so paths and
    branch names containing spaces need no quoting.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
        )
    except OSError as exc:  # noqa: BLE001
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        LOG.debug("git stderr: %s", stderr)
        message = f"git command failed: {' '.join(cmd)}"
        if stderr:
            message = f"{message}: {stderr}"
        raise GitError(message)

    return completed


def strip_trailing_newline(text: str) -> str:
    """
    Remove a single trailing line terminator, if present.
    """

    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


class GitRunner:
    """
    Query executor bound to one repository for one invocation.

    output_limit caps the number of characters kept from any single
    command. Truncated output is cut back to its last complete line so
    no record is half parsed, and the command is remembered in
    truncated_queries so callers can flag an incomplete result.
    """

    def __init__(self, cwd: Optional[str] = None, output_limit: int = 1024 * 1024):
        self.cwd = cwd
        self.output_limit = output_limit
        self.truncated_queries: List[str] = []

    def output(self, args: Sequence[str]) -> Optional[str]:
        """
        Return the stdout of `git <args>`, or None if the command failed.
        """

        try:
            completed = _run_git(args, cwd=self.cwd)
        except GitError as exc:
            LOG.debug("%s", exc)
            return None

        text = completed.stdout or ""
        if self.output_limit and len(text) > self.output_limit:
            text = _truncate_to_line(text, self.output_limit)
            command = " ".join(["git", *args])
            LOG.warning(
                "output of '%s' exceeded %d characters and was truncated",
                command,
                self.output_limit,
            )
            self.truncated_queries.append(command)
            return text

        return strip_trailing_newline(text)

    def succeeds(self, args: Sequence[str]) -> bool:
        """
        Return True if `git <args>` exits with status zero.
        """

        try:
            _run_git(args, cwd=self.cwd)
        except GitError as exc:
            LOG.debug("%s", exc)
            return False
        return True

    @property
    def truncated(self) -> bool:
        return bool(self.truncated_queries)


def _truncate_to_line(text: str, limit: int) -> str:
    head = text[:limit]
    cut = head.rfind("\n")
    if cut == -1:
        return head
    return head[:cut]


def is_git_repository(runner: GitRunner) -> bool:
    return runner.succeeds(["rev-parse", "--git-dir"])


def ensure_repository(runner: GitRunner) -> None:
    """
    Raise NotARepositoryError unless the runner points inside a repository.
    """

    if not is_git_repository(runner):
        location = runner.cwd or "the current directory"
        raise NotARepositoryError(
            f"{location} is not a git repository; run gitsmart inside one"
        )


def current_branch(runner: GitRunner) -> Optional[str]:
    """
    Return the checked-out branch name, or None when HEAD is detached.
    """

    name = runner.output(["branch", "--show-current"])
    if not name:
        return None
    return name.strip() or None
