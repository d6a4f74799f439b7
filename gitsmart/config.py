"""
Configuration model for gitsmart.

The CLI constructs a Config instance and passes it down into the
reports and extractors so limits can be adjusted without relying on
global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

# ASCII unit separator; git emits it for the %x1f placeholder.
DEFAULT_FIELD_SEPARATOR = "\x1f"


@dataclass
class Config:
    """
    Top-level configuration for a gitsmart run.
    """

    command: str = "analysis"
    target: Optional[str] = None
    repo_path: Optional[str] = None
    verbosity: int = 0

    max_commits: int = 1000
    max_branches: int = 100
    max_files: int = 500
    max_authors: int = 50
    hot_file_limit: int = 10
    blame_line_limit: int = 10

    # Characters of captured output kept per git query.
    output_limit: int = 1024 * 1024
    field_separator: str = DEFAULT_FIELD_SEPARATOR
    trunk_branches: Tuple[str, ...] = ("main", "master")
