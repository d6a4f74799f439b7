"""
Custom exception types used across gitsmart.

Defining explicit error classes makes it easier for the CLI to
distinguish between user-facing failures and unexpected bugs.
"""

from __future__ import annotations


class GitSmartError(Exception):
    """Base class for all gitsmart specific errors."""


class GitError(GitSmartError):
    """Raised when a git invocation fails."""


class NotARepositoryError(GitSmartError):
    """Raised when the working directory is not inside a git repository."""


class UsageError(GitSmartError):
    """Raised when a command is missing a required argument."""
