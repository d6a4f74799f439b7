"""
Aggregation of extracted records into summary statistics.

The functions here fold commit and branch batches into counts. They
never reorder or modify the records they are given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..domain import BranchRecord, CommitRecord


@dataclass(frozen=True)
class AuthorActivity:
    name: str
    commits: int


@dataclass(frozen=True)
class ChangeTotals:
    insertions: int = 0
    deletions: int = 0


@dataclass
class CommitSummary:
    """
    Repository-wide figures derived from one commit batch.
    """

    total_commits: int
    totals: ChangeTotals
    authors: List[AuthorActivity] = field(default_factory=list)
    top_author: Optional[AuthorActivity] = None
    latest_subject: Optional[str] = None


@dataclass
class BranchSummary:
    """
    Partition of a branch batch into merged, active, and excluded.

    Trunk branches and the current branch are excluded even when merged,
    so `deletable` only ever lists branches that can safely be removed.
    """

    total: int
    current_branch: Optional[str]
    merged: int = 0
    active: int = 0
    excluded: int = 0
    deletable: List[str] = field(default_factory=list)


def aggregate_authors(commits: Sequence[CommitRecord], max_authors: int = 50) -> List[AuthorActivity]:
    """
    Count commits per author, in first-seen order.

    Once max_authors distinct names are tracked, commits by any further
    new author are ignored.
    """

    counts: Dict[str, int] = {}
    for commit in commits:
        if commit.author in counts:
            counts[commit.author] += 1
        elif len(counts) < max_authors:
            counts[commit.author] = 1
    return [AuthorActivity(name=name, commits=count) for name, count in counts.items()]


def most_active_author(authors: Sequence[AuthorActivity]) -> Optional[AuthorActivity]:
    """
    Return the author with the most commits; ties go to the first seen.
    """

    if not authors:
        return None
    # max() keeps the first of equal maxima.
    return max(authors, key=lambda a: a.commits)


def total_changes(commits: Sequence[CommitRecord]) -> ChangeTotals:
    return ChangeTotals(
        insertions=sum(c.insertions for c in commits),
        deletions=sum(c.deletions for c in commits),
    )


def summarize_commits(commits: Sequence[CommitRecord], max_authors: int = 50) -> CommitSummary:
    authors = aggregate_authors(commits, max_authors)
    return CommitSummary(
        total_commits=len(commits),
        totals=total_changes(commits),
        authors=authors,
        top_author=most_active_author(authors),
        latest_subject=commits[0].subject if commits else None,
    )


def summarize_branches(
    branches: Sequence[BranchRecord],
    trunk_branches: Sequence[str] = ("main", "master"),
) -> BranchSummary:
    current = next((b.name for b in branches if b.is_current), None)
    summary = BranchSummary(total=len(branches), current_branch=current)

    for branch in branches:
        if branch.name in trunk_branches or branch.is_current:
            summary.excluded += 1
        elif branch.is_merged:
            summary.merged += 1
            summary.deletable.append(branch.name)
        else:
            summary.active += 1
    return summary
