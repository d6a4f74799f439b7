import subprocess

from gitsmart.errors import GitError, NotARepositoryError
from gitsmart.git_adapter import (
    GitRunner,
    _run_git,
    current_branch,
    ensure_repository,
    strip_trailing_newline,
)


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def test_run_git_includes_stderr_details_on_failure(monkeypatch):
    monkeypatch.setattr(
        "gitsmart.git_adapter.subprocess.run",
        lambda *args, **kwargs: _completed(128, stderr="fatal: not a git repository"),
    )

    try:
        _run_git(["status"])
    except GitError as exc:
        message = str(exc)
        assert "git status" in message
        assert "fatal: not a git repository" in message
    else:
        raise AssertionError("expected GitError to be raised")


def test_run_git_wraps_missing_executable(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr("gitsmart.git_adapter.subprocess.run", fake_run)

    try:
        _run_git(["status"])
    except GitError as exc:
        assert "failed to execute git" in str(exc)
    else:
        raise AssertionError("expected GitError to be raised")


def test_run_git_passes_arguments_without_shell(monkeypatch):
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["shell"] = kwargs.get("shell", False)
        return _completed(stdout="3\n")

    monkeypatch.setattr("gitsmart.git_adapter.subprocess.run", fake_run)

    _run_git(["rev-list", "--count", "HEAD", "--", "docs/my notes.md"])
    assert seen["cmd"][-1] == "docs/my notes.md"
    assert seen["shell"] is False


def test_strip_trailing_newline_removes_only_one_terminator():
    assert strip_trailing_newline("a\nb\n") == "a\nb"
    assert strip_trailing_newline("a\n\n") == "a\n"
    assert strip_trailing_newline("a\r\n") == "a"
    assert strip_trailing_newline("a") == "a"


def test_runner_output_returns_none_on_failure(monkeypatch):
    monkeypatch.setattr(
        "gitsmart.git_adapter.subprocess.run",
        lambda *args, **kwargs: _completed(1, stderr="bad revision"),
    )

    runner = GitRunner()
    assert runner.output(["show", "deadbeef"]) is None
    assert runner.succeeds(["show", "deadbeef"]) is False


def test_runner_output_strips_trailing_newline(monkeypatch):
    monkeypatch.setattr(
        "gitsmart.git_adapter.subprocess.run",
        lambda *args, **kwargs: _completed(stdout="feature-x\n"),
    )

    runner = GitRunner()
    assert runner.output(["branch", "--show-current"]) == "feature-x"
    assert runner.succeeds(["branch", "--show-current"]) is True
    assert not runner.truncated


def test_runner_truncates_at_last_complete_line(monkeypatch):
    monkeypatch.setattr(
        "gitsmart.git_adapter.subprocess.run",
        lambda *args, **kwargs: _completed(stdout="aaaa\nbbbb\ncccc\n"),
    )

    runner = GitRunner(output_limit=12)
    assert runner.output(["ls-files"]) == "aaaa\nbbbb"
    assert runner.truncated
    assert runner.truncated_queries == ["git ls-files"]


def test_ensure_repository_raises_outside_repo(monkeypatch):
    monkeypatch.setattr(
        "gitsmart.git_adapter.subprocess.run",
        lambda *args, **kwargs: _completed(128, stderr="fatal: not a git repository"),
    )

    try:
        ensure_repository(GitRunner(cwd="/tmp/nowhere"))
    except NotARepositoryError as exc:
        assert "/tmp/nowhere" in str(exc)
    else:
        raise AssertionError("expected NotARepositoryError to be raised")


def test_current_branch_is_none_when_detached(make_runner):
    runner = make_runner({("branch", "--show-current"): ""})
    assert current_branch(runner) is None

    runner = make_runner({("branch", "--show-current"): "main"})
    assert current_branch(runner) == "main"
