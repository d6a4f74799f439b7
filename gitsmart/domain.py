"""
Core domain models for gitsmart.

These dataclasses describe the records scraped from git output and the
results of classifying a diff. They avoid any direct git dependency so
extractors, aggregators, and reports can share them freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Literal, Optional

ChangeType = Literal["feature-add", "fix", "refactor", "test", "docs", "chore"]

ConcernFlag = Literal[
    "has-todo",
    "has-debug-output",
    "has-secret-like-string",
    "has-unsafe-call",
    "has-new-comment",
    "has-unfreed-allocation",
    "has-permission-change",
]

UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class CommitRecord:
    """
    One commit from the history, newest first within a batch.

    The stat fields are filled from a per-commit summary query and
    default to zero when that query is unavailable.
    """

    identifier: str
    author: str
    date: str
    subject: str
    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class BranchRecord:
    """
    A local branch as listed by `git branch -v`.
    """

    name: str
    last_commit: Optional[str] = None
    is_merged: bool = False
    is_current: bool = False


@dataclass(frozen=True)
class FileRecord:
    """
    A tracked path with its revision count and most recent author.
    """

    path: str
    change_count: int = 1
    last_author: str = UNKNOWN_AUTHOR


@dataclass(frozen=True)
class BlameLine:
    line_number: int
    identifier: str
    author: str
    subject: str
    content: str = ""


@dataclass(frozen=True)
class ClassificationResult:
    """
    The change type assigned to a diff plus any concern flags.

    A result with change_type None is the explicit answer for an empty
    diff; no rule was evaluated.
    """

    change_type: Optional[ChangeType]
    description: str
    flags: FrozenSet[ConcernFlag] = frozenset()
    commit_prefix: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.change_type is None


EMPTY_CLASSIFICATION = ClassificationResult(
    change_type=None,
    description="nothing to classify",
)


@dataclass
class ConcernReport:
    """
    Warnings raised by one pass of concern rules over a diff.
    """

    flags: FrozenSet[ConcernFlag] = frozenset()
    warnings: List[str] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return len(self.warnings)


@dataclass
class WorkingTreeStatus:
    """
    Paths from `git status --porcelain`, grouped by state.
    """

    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)
    conflicted: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.modified or self.untracked or self.conflicted)
