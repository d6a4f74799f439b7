"""
Repository-health heuristics.

These helpers judge already-parsed git output: commit sizes, branch
ages, merge ratios, documentation activity, and large blobs. The
thresholds are rules of thumb rather than measurements.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

LARGE_COMMIT_LINES = 500
SMALL_COMMIT_LINES = 10
MERGE_HEAVY_PERCENT = 50
STALE_AGE_WORDS = ("week", "month", "year")
DOC_KEYWORDS = ("doc", "readme", "Documentation")


@dataclass
class WorkflowReport:
    """
    Findings of the workflow analysis, ready for display.
    """

    commit_count: int
    average_changes: Optional[int] = None
    commit_size_advice: Optional[str] = None
    stale_branches: List[Tuple[str, str]] = field(default_factory=list)
    merge_percentage: Optional[int] = None
    merge_advice: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)


def average_changes_per_commit(commits: int, changed_lines: int) -> Optional[int]:
    if commits <= 0:
        return None
    return changed_lines // commits


def commit_size_advice(average: int) -> str:
    if average > LARGE_COMMIT_LINES:
        return "Consider smaller, more focused commits"
    if average < SMALL_COMMIT_LINES:
        return "Very small commits - consider batching related changes"
    return "Good commit size balance"


def find_stale_branches(
    ref_ages: Sequence[Tuple[str, str]],
    trunk_branches: Sequence[str] = ("main", "master"),
) -> List[Tuple[str, str]]:
    """
    Return (name, age) for non-trunk branches last touched weeks ago or more.
    """

    return [
        (name, age)
        for name, age in ref_ages
        if name not in trunk_branches and any(word in age for word in STALE_AGE_WORDS)
    ]


def merge_percentage(merges: int, total: int) -> Optional[int]:
    if total <= 0:
        return None
    return (merges * 100) // total


def merge_advice(percentage: int) -> str:
    if percentage > MERGE_HEAVY_PERCENT:
        return "Consider using rebase for cleaner history"
    return "Good merge/rebase balance"


def workflow_recommendations(
    *,
    current_branch: Optional[str],
    branch_age: Optional[str],
    uncommitted: int,
    remote_branches: int,
    local_branches: int,
    trunk_branches: Sequence[str] = ("main", "master"),
) -> List[str]:
    recommendations: List[str] = []
    if current_branch and current_branch not in trunk_branches and branch_age:
        recommendations.append(
            f"Feature branch '{current_branch}' last committed {branch_age} - consider merging soon"
        )
    if uncommitted > 5:
        recommendations.append(
            f"You have {uncommitted} uncommitted changes - consider smaller, more frequent commits"
        )
    if remote_branches > local_branches * 2:
        recommendations.append(
            f"Many remote branches ({remote_branches} remote vs {local_branches} local)"
            " - consider cleaning up"
        )
    recommendations.append("Run 'gitsmart review' before pushing changes")
    recommendations.append("Use 'gitsmart suggest' for better commit messages")
    return recommendations


def count_doc_commits(subjects: Sequence[str]) -> int:
    return sum(1 for subject in subjects if any(word in subject for word in DOC_KEYWORDS))


def docs_lagging(doc_commits: int, total_commits: int) -> bool:
    """
    True when fewer than a quarter of the recent commits touch docs.
    """

    return doc_commits < total_commits // 4


def largest_files(entries: Sequence[Tuple[int, str]], limit: int = 3) -> List[Tuple[int, str]]:
    return sorted(entries, key=lambda entry: entry[0], reverse=True)[:limit]
