"""
Report orchestration for gitsmart.

Each show_* function runs one pipeline: query git through the runner,
extract records, aggregate or classify them, and print a plain-text
report to `out`. run_command is the entry point used by the CLI.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO

from .analysis.aggregation import summarize_branches, summarize_commits
from .analysis.classifier import (
    REVIEW_RULES,
    SECURITY_RULES,
    classify_diff,
    count_changed_files,
    scan_concerns,
    suggest_commit_messages,
)
from .analysis.ranking import rank_hot_files
from .analysis.workflow import (
    WorkflowReport,
    average_changes_per_commit,
    commit_size_advice,
    count_doc_commits,
    docs_lagging,
    find_stale_branches,
    largest_files,
    merge_advice,
    merge_percentage,
    workflow_recommendations,
)
from .config import Config
from .errors import UsageError
from .git_adapter import GitRunner, current_branch, ensure_repository
from .log_parser import (
    count_lines,
    load_blame,
    load_branches,
    load_commits,
    load_files,
    parse_ls_tree,
    parse_numstat,
    parse_ref_ages,
    parse_status_porcelain,
)

LOG = logging.getLogger(__name__)

Report = Callable[[Config, GitRunner, TextIO], None]


def _heading(out: TextIO, title: str) -> None:
    print(title, file=out)
    print("=" * len(title), file=out)


def _bullets(out: TextIO, lines, indent: str = "  ") -> None:
    for line in lines:
        print(f"{indent}- {line}", file=out)


def _recent_diff(runner: GitRunner) -> Optional[str]:
    return runner.output(["diff", "HEAD~1"])


def _repo_root(config: Config, runner: GitRunner) -> Path:
    top = runner.output(["rev-parse", "--show-toplevel"])
    if top:
        return Path(top)
    return Path(config.repo_path or ".")


def show_commit_summary(config: Config, runner: GitRunner, out: TextIO) -> None:
    commits = load_commits(runner, config)
    summary = summarize_commits(commits, config.max_authors)

    _heading(out, "Repository Analysis")
    print(f"Total commits: {summary.total_commits}", file=out)
    if not summary.total_commits:
        print("No commit history found.\n", file=out)
        return

    totals = summary.totals
    print(f"Total changes: +{totals.insertions} -{totals.deletions} lines", file=out)
    if summary.top_author is not None:
        print(
            f"Most active author: {summary.top_author.name} "
            f"({summary.top_author.commits} commits)",
            file=out,
        )
    print(f"Latest commit: {summary.latest_subject}", file=out)
    print(file=out)


def show_branches(config: Config, runner: GitRunner, out: TextIO) -> None:
    branches = load_branches(runner, config)

    _heading(out, "Branch Analysis")
    if not branches:
        print("No branches found.\n", file=out)
        return

    summary = summarize_branches(branches, config.trunk_branches)
    print(f"Total branches: {summary.total}", file=out)
    print(f"Current branch: {summary.current_branch or 'unknown'}", file=out)
    print(f"Active branches: {summary.active}", file=out)
    print(f"Merged branches (can be deleted): {summary.merged}", file=out)
    if summary.deletable:
        print("\nBranches that can be safely deleted:", file=out)
        _bullets(out, summary.deletable)
    print(file=out)


def show_hot_files(config: Config, runner: GitRunner, out: TextIO) -> None:
    files = load_files(runner, config)

    _heading(out, "Frequently Changed Files")
    if not files:
        print("No files found in repository.\n", file=out)
        return

    ranked = rank_hot_files(files, config.hot_file_limit)
    print(f"Top {len(ranked)} most frequently changed files:", file=out)
    for record in ranked:
        print(
            f"{record.change_count:3d} changes: {record.path} (last: {record.last_author})",
            file=out,
        )
    print(file=out)


def show_cleanup(config: Config, runner: GitRunner, out: TextIO) -> None:
    status = parse_status_porcelain(runner.output(["status", "--porcelain"]))

    _heading(out, "Cleanup Suggestions")
    if status.is_clean:
        print("Working directory is clean", file=out)
    modified = len(status.modified) + len(status.conflicted)
    if modified:
        print(f"Modified files: {modified} (consider committing changes)", file=out)
    if status.untracked:
        print(
            f"Untracked files: {len(status.untracked)} (consider adding to .gitignore)",
            file=out,
        )

    stashes = count_lines(runner.output(["stash", "list"]))
    if stashes:
        print(f"Stashed changes: {stashes} (consider reviewing or applying)", file=out)
    print(file=out)


def show_analysis(config: Config, runner: GitRunner, out: TextIO) -> None:
    print("\ngitsmart Analysis Report\n", file=out)
    show_commit_summary(config, runner, out)
    show_branches(config, runner, out)
    show_hot_files(config, runner, out)
    show_cleanup(config, runner, out)


def show_blame(config: Config, runner: GitRunner, out: TextIO) -> None:
    path = config.target
    if not path:
        raise UsageError("blame requires a file path")
    base = Path(config.repo_path) if config.repo_path else Path(".")
    if not (base / path).is_file():
        raise UsageError(f"file not found or not readable: {path}")

    _heading(out, f"Smart Blame: {path}")
    lines = load_blame(runner, path, config.blame_line_limit)
    if not lines:
        print("No blame information available.\n", file=out)
        return

    for line in lines:
        print(f"{line.line_number:3d}: {line.author} - {line.subject}", file=out)
    if len(lines) == config.blame_line_limit:
        print(f"... (showing first {config.blame_line_limit} lines)", file=out)
    print(file=out)


def show_suggestions(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Commit Message Suggestions")
    diff = runner.output(["diff", "--staged"])
    result = classify_diff(diff)
    if result.is_empty:
        print("No staged changes found. Use 'git add' to stage changes first.\n", file=out)
        return

    files_changed = count_changed_files(diff)
    print(f"Based on your changes ({files_changed} files, {result.description}):\n", file=out)
    for idx, suggestion in enumerate(suggest_commit_messages(diff), start=1):
        print(f"{idx}. {suggestion}", file=out)
    print(
        "\nTip: use conventional commit format: <type>[optional scope]: <description>\n",
        file=out,
    )


def show_review(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Code Review Checklist")
    diff = _recent_diff(runner)
    if not diff:
        print("No changes to review (or only one commit in repository).\n", file=out)
        return

    print("Review the following for recent changes:\n", file=out)
    report = scan_concerns(diff, REVIEW_RULES)
    for warning in report.warnings:
        print(f"* {warning}", file=out)

    print(
        f"\nSummary: {count_changed_files(diff)} files changed, "
        f"{report.issue_count} potential issues to check",
        file=out,
    )
    if not report.issue_count:
        print("No obvious issues detected in automated checks", file=out)
    print(file=out)


def show_security(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Security Audit")
    diff = _recent_diff(runner)
    if not diff:
        print("No recent changes to audit.\n", file=out)
        return

    print("Scanning for potential security issues...\n", file=out)
    report = scan_concerns(diff, SECURITY_RULES)
    for warning in report.warnings:
        print(f"* {warning}", file=out)

    print(file=out)
    if report.issue_count:
        print(f"Found {report.issue_count} potential security considerations to review", file=out)
    else:
        print("No obvious security issues detected", file=out)
    print(file=out)


def show_impact(config: Config, runner: GitRunner, out: TextIO) -> None:
    target = config.target
    if not target:
        raise UsageError("impact requires a file or component to analyze")

    _heading(out, f"Change Impact Analysis: {target}")
    base = Path(config.repo_path) if config.repo_path else Path(".")
    candidate = base / target
    if candidate.exists():
        print(f"Analyzing impact of changes to file: {target}\n", file=out)
        args = ["log", "--oneline", "--max-count=5"]
        if candidate.is_file():
            args.append("--follow")
        history = runner.output([*args, "--", target])
        if history:
            print("Recent changes to this file:", file=out)
            _bullets(out, history.splitlines())
    else:
        print(f"Analyzing impact of: {target}", file=out)
        print("(Note: this is a simple analysis. For complex projects, consider specialized tools.)", file=out)

    print("\nConsider running tests after modifying this component\n", file=out)


def show_resolve(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Conflict Resolver")
    status = parse_status_porcelain(runner.output(["status", "--porcelain"]))
    if not status.conflicted:
        print("No merge conflicts detected.", file=out)
        print("This helper assists when you have merge conflicts (files marked 'UU').\n", file=out)
        return

    print("Merge conflicts detected. Here's how to resolve them:\n", file=out)
    print("1. Conflicted files:", file=out)
    _bullets(out, status.conflicted, indent="   ")
    print("\n2. For each conflicted file:", file=out)
    _bullets(
        out,
        [
            "Open the file in your editor",
            "Look for <<<<<<<, =======, >>>>>>> markers",
            "Choose which changes to keep (ours/theirs/both)",
            "Remove the conflict markers and clean up the code",
            "Save the file and stage it with 'git add <file>'",
        ],
        indent="   ",
    )
    print("\n3. After resolving all conflicts run 'git commit'.", file=out)
    print("\n4. Helpful commands: git mergetool, git diff, git log --merge\n", file=out)


def show_performance(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Performance Regression Detection")
    recent = runner.output(["log", "--oneline", "--max-count=5"])
    if recent:
        print("Recent commits (watch for large changes):", file=out)
        _bullets(out, recent.splitlines())

    entries = parse_ls_tree(runner.output(["ls-tree", "-r", "-l", "HEAD"]))
    biggest = largest_files(entries)
    if biggest:
        print("\nFiles to monitor for size (potential performance concerns):", file=out)
        _bullets(out, [f"{path} ({size} bytes)" for size, path in biggest])

    print("\nPerformance monitoring tips:", file=out)
    _bullets(
        out,
        [
            "Monitor file size growth over time",
            "Watch for large binary files in the repository",
            "Consider git-lfs for large assets",
            "Use profilers for performance-critical code",
        ],
    )
    print(file=out)


def show_docs(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Documentation Gap Analysis")
    readmes = sorted(_repo_root(config, runner).glob("README*"))
    if readmes:
        print(f"README file found: {readmes[0].name}", file=out)
    else:
        print("No README file found - consider adding project documentation", file=out)

    recent = runner.output(["log", "--format=%s", "--max-count=10"])
    subjects = recent.splitlines() if recent else []
    if subjects:
        doc_commits = count_doc_commits(subjects)
        print(
            f"\nDocumentation activity in last {len(subjects)} commits: "
            f"{doc_commits} doc-related commits",
            file=out,
        )
        if docs_lagging(doc_commits, len(subjects)):
            print("Documentation may be lagging behind code changes", file=out)

    print("\nDocumentation tips:", file=out)
    _bullets(
        out,
        [
            "Update README when adding features",
            "Document API changes in commit messages",
            "Consider adding inline comments for complex logic",
            "Keep CHANGELOG.md for release notes",
        ],
    )
    print(file=out)


def build_workflow_report(config: Config, runner: GitRunner) -> Optional[WorkflowReport]:
    """
    Gather the workflow figures, or None when there is no history.
    """

    commit_count = count_lines(runner.output(["log", "--format=%H", "--max-count=100"]))
    if not commit_count:
        return None

    report = WorkflowReport(commit_count=commit_count)

    sampled, changed = parse_numstat(runner.output(["log", "--numstat", "--format=%H", "--max-count=20"]))
    report.average_changes = average_changes_per_commit(sampled, changed)
    if report.average_changes is not None:
        report.commit_size_advice = commit_size_advice(report.average_changes)

    refs = parse_ref_ages(
        runner.output(
            ["for-each-ref", "--format=%(refname:short)|%(committerdate:relative)", "refs/heads/"]
        )
    )
    report.stale_branches = find_stale_branches(refs, config.trunk_branches)

    merges = count_lines(runner.output(["log", "--oneline", "--merges", "--max-count=20"]))
    total = count_lines(runner.output(["log", "--oneline", "--max-count=20"]))
    report.merge_percentage = merge_percentage(merges, total)
    if report.merge_percentage is not None:
        report.merge_advice = merge_advice(report.merge_percentage)

    branch = current_branch(runner)
    branch_age = None
    if branch and branch not in config.trunk_branches:
        for trunk in config.trunk_branches:
            branch_age = runner.output(["log", "-1", "--format=%cr", f"{trunk}..HEAD"])
            if branch_age:
                break

    status = parse_status_porcelain(runner.output(["status", "--porcelain"]))
    report.recommendations = workflow_recommendations(
        current_branch=branch,
        branch_age=branch_age,
        uncommitted=len(status.modified) + len(status.conflicted),
        remote_branches=count_lines(runner.output(["branch", "-r"])),
        local_branches=count_lines(runner.output(["branch"])),
        trunk_branches=config.trunk_branches,
    )
    return report


def show_workflow(config: Config, runner: GitRunner, out: TextIO) -> None:
    _heading(out, "Git Workflow Optimizer")
    report = build_workflow_report(config, runner)
    if report is None:
        print("Not enough commit history for workflow analysis.\n", file=out)
        return

    print(f"Workflow analysis ({report.commit_count} recent commits):\n", file=out)
    if report.average_changes is not None:
        print(f"* Average changes per commit: {report.average_changes} lines", file=out)
        print(f"  {report.commit_size_advice}", file=out)

    print("* Branch activity:", file=out)
    if report.stale_branches:
        print("  Old branches needing attention:", file=out)
        _bullets(out, [f"{name} ({age})" for name, age in report.stale_branches], indent="    ")
    else:
        print("  No stale branches found", file=out)

    if report.merge_percentage is not None:
        print(
            f"* Merge strategy: {report.merge_percentage}% merge commits in recent history",
            file=out,
        )
        print(f"  {report.merge_advice}", file=out)

    print("\nWorkflow recommendations:", file=out)
    for idx, recommendation in enumerate(report.recommendations, start=1):
        print(f"{idx}. {recommendation}", file=out)
    print(file=out)


COMMANDS: Dict[str, Report] = {
    "analysis": show_analysis,
    "branches": show_branches,
    "hotfiles": show_hot_files,
    "cleanup": show_cleanup,
    "suggest": show_suggestions,
    "review": show_review,
    "security": show_security,
    "blame": show_blame,
    "impact": show_impact,
    "resolve": show_resolve,
    "performance": show_performance,
    "docs": show_docs,
    "workflow": show_workflow,
}

TARGET_COMMANDS = {"blame", "impact"}


def run_command(
    config: Config,
    runner: Optional[GitRunner] = None,
    out: Optional[TextIO] = None,
) -> None:
    """
    Entry point for all report commands.

    Verifies the repository precondition, runs the selected report, and
    notes when any git output had to be truncated.
    """

    LOG.debug("Starting gitsmart with config: %s", config)
    out = out or sys.stdout
    if runner is None:
        runner = GitRunner(cwd=config.repo_path, output_limit=config.output_limit)

    report = COMMANDS.get(config.command)
    if report is None:
        raise UsageError(f"unknown command: {config.command}")
    if config.command in TARGET_COMMANDS and not config.target:
        raise UsageError(f"{config.command} requires a target argument")

    ensure_repository(runner)
    report(config, runner, out)

    if runner.truncated:
        print(
            f"Note: output of {len(runner.truncated_queries)} git queries was truncated; "
            "results may be incomplete.",
            file=out,
        )
