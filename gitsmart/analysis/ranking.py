"""
Top-N ranking of file records.
"""

from __future__ import annotations

from typing import List, Sequence

from ..domain import FileRecord


def rank_hot_files(files: Sequence[FileRecord], limit: int = 10) -> List[FileRecord]:
    """
    Return the `limit` most frequently changed files, most changed first.

    The sort is stable, so files with equal change counts keep their
    original relative order. The input sequence is not modified.
    """

    if limit <= 0:
        return []
    ranked = sorted(files, key=lambda f: f.change_count, reverse=True)
    return ranked[:limit]
