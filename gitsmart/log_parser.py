"""
Record extraction for gitsmart.

The parse_* functions turn the text printed by one git command into
typed records and are pure. The load_* functions issue the git
queries, including the per-record enrichment queries, and hand the
text to the parsers.

Extraction is total over its input: a line that cannot be decomposed
into the fields a record needs is dropped and logged at debug level,
and absent upstream text produces an empty list.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .config import Config, DEFAULT_FIELD_SEPARATOR
from .domain import (
    UNKNOWN_AUTHOR,
    BlameLine,
    BranchRecord,
    CommitRecord,
    FileRecord,
    WorkingTreeStatus,
)
from .git_adapter import GitRunner, current_branch

LOG = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")

# "3 files changed, 120 insertions(+), 45 deletions(-)"; every clause
# is optional on its own.
_STAT_CLAUSE_RE = re.compile(r"(?P<count>\d+)\s+(?P<kind>file|insertion|deletion)")

_UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


# ---------------------------------------------------------------------------
# Commits
# ---------------------------------------------------------------------------


def commit_log_format(separator: str = DEFAULT_FIELD_SEPARATOR) -> str:
    """
    Return a `git log --format` value emitting hash, author, date, subject.

    The separator is written as a %xNN escape so control characters
    never have to travel through argv.
    """

    if len(separator) != 1:
        raise ValueError("field separator must be a single character")
    sep = f"%x{ord(separator):02x}"
    return sep.join(["%H", "%an", "%ad", "%s"])


def parse_commit_line(
    line: str,
    separator: str = DEFAULT_FIELD_SEPARATOR,
) -> Optional[CommitRecord]:
    """
    Parse one commit-log line into a CommitRecord, or None if malformed.

    The line is split into at most four fields so that the subject keeps
    any separator characters it contains.
    """

    fields = line.split(separator, 3)
    if len(fields) < 4:
        return None

    identifier, author, date, subject = fields
    identifier = identifier.strip()
    if not _HEX_RE.match(identifier) or not author or not date:
        return None

    return CommitRecord(
        identifier=identifier,
        author=author,
        date=date,
        subject=subject,
    )


def parse_commit_log(
    raw: Optional[str],
    separator: str = DEFAULT_FIELD_SEPARATOR,
    max_records: Optional[int] = None,
) -> List[CommitRecord]:
    if not raw:
        return []

    records: List[CommitRecord] = []
    for line in raw.splitlines():
        if max_records is not None and len(records) >= max_records:
            break
        record = parse_commit_line(line, separator)
        if record is None:
            LOG.debug("Skipping malformed commit line: %r", line)
            continue
        records.append(record)
    return records


def parse_stat_summary(text: Optional[str]) -> Tuple[int, int, int]:
    """
    Return (files_changed, insertions, deletions) from a stat summary.

    The last line mentioning "changed" is used, since `git show --stat`
    prints per-file lines and the commit message before the summary.
    Clauses that are absent count as zero.
    """

    if not text:
        return 0, 0, 0

    summary = None
    for line in reversed(text.splitlines()):
        if "changed" in line and "file" in line:
            summary = line
            break
    if summary is None:
        return 0, 0, 0

    counts = {"file": 0, "insertion": 0, "deletion": 0}
    for match in _STAT_CLAUSE_RE.finditer(summary):
        counts[match.group("kind")] = int(match.group("count"))
    return counts["file"], counts["insertion"], counts["deletion"]


def load_commits(runner: GitRunner, config: Config) -> List[CommitRecord]:
    """
    Load up to config.max_commits commits, newest first, with stats.

    Each commit costs one extra `git show --shortstat` query.
    """

    raw = runner.output(
        [
            "log",
            f"--format={commit_log_format(config.field_separator)}",
            "--date=short",
            f"--max-count={config.max_commits}",
        ]
    )
    commits = parse_commit_log(raw, config.field_separator, config.max_commits)

    enriched: List[CommitRecord] = []
    for commit in commits:
        stats = runner.output(["show", "--shortstat", "--format=", commit.identifier])
        files_changed, insertions, deletions = parse_stat_summary(stats)
        enriched.append(
            replace(
                commit,
                files_changed=files_changed,
                insertions=insertions,
                deletions=deletions,
            )
        )
    LOG.info("Loaded %d commits", len(enriched))
    return enriched


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def parse_branch_line(line: str) -> Optional[Tuple[str, Optional[str]]]:
    """
    Parse a `git branch -v` line into (name, short commit id).

    Leading spaces and the current-branch marker are stripped. Detached
    HEAD entries, whose name starts with "(", are not branches.
    """

    stripped = line.lstrip(" *+")
    tokens = stripped.split()
    if not tokens or tokens[0].startswith("("):
        return None

    name = tokens[0]
    last_commit = tokens[1] if len(tokens) > 1 and _HEX_RE.match(tokens[1]) else None
    return name, last_commit


def parse_branch_list(raw: Optional[str], max_records: Optional[int] = None) -> List[Tuple[str, Optional[str]]]:
    if not raw:
        return []

    seen = set()
    entries: List[Tuple[str, Optional[str]]] = []
    for line in raw.splitlines():
        if max_records is not None and len(entries) >= max_records:
            break
        parsed = parse_branch_line(line)
        if parsed is None or parsed[0] in seen:
            LOG.debug("Skipping branch line: %r", line)
            continue
        seen.add(parsed[0])
        entries.append(parsed)
    return entries


def is_branch_merged(runner: GitRunner, name: str, trunks: Sequence[str]) -> bool:
    """
    Return True if the branch is an ancestor of any trunk branch.

    A trunk is never considered merged into itself or the other trunk.
    """

    if name in trunks:
        return False
    for trunk in trunks:
        if runner.succeeds(["merge-base", "--is-ancestor", name, trunk]):
            return True
    return False


def load_branches(runner: GitRunner, config: Config) -> List[BranchRecord]:
    raw = runner.output(["branch", "-v", "--no-color"])
    entries = parse_branch_list(raw, config.max_branches)
    current = current_branch(runner)

    branches = [
        BranchRecord(
            name=name,
            last_commit=last_commit,
            is_merged=is_branch_merged(runner, name, config.trunk_branches),
            is_current=name == current,
        )
        for name, last_commit in entries
    ]
    LOG.info("Loaded %d branches", len(branches))
    return branches


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def parse_file_list(raw: Optional[str], max_records: Optional[int] = None) -> List[str]:
    """
    Return the paths of a `git ls-files` listing, taken verbatim.
    """

    if not raw:
        return []
    paths = [line for line in raw.splitlines() if line]
    if max_records is not None:
        paths = paths[:max_records]
    return paths


def parse_revision_count(text: Optional[str], default: int = 1) -> int:
    if text is None:
        return default
    try:
        count = int(text.strip())
    except ValueError:
        return default
    return count if count >= 0 else default


def parse_author(text: Optional[str]) -> str:
    if not text:
        return UNKNOWN_AUTHOR
    author = text.strip("\r\n")
    return author or UNKNOWN_AUTHOR


def load_files(runner: GitRunner, config: Config) -> List[FileRecord]:
    """
    Load tracked files with their revision counts and last authors.

    Each path costs two extra queries.
    """

    raw = runner.output(["-c", "core.quotePath=false", "ls-files"])
    files: List[FileRecord] = []
    for path in parse_file_list(raw, config.max_files):
        count = runner.output(["rev-list", "--count", "HEAD", "--", path])
        author = runner.output(["log", "-1", "--format=%an", "--", path])
        files.append(
            FileRecord(
                path=path,
                change_count=parse_revision_count(count),
                last_author=parse_author(author),
            )
        )
    LOG.info("Loaded %d files", len(files))
    return files


# ---------------------------------------------------------------------------
# Blame
# ---------------------------------------------------------------------------


def parse_blame_line(line: str) -> Optional[Tuple[str, str, str]]:
    """
    Parse `<id> (<author> <rest>) <content>` into (id, author, content).

    Only the text up to the first space after "(" is taken as the
    author, so multi-word names are shortened to their first word.
    """

    open_paren = line.find("(")
    if open_paren <= 0:
        return None

    identifier = line[:open_paren].split()
    if not identifier:
        return None
    commit = identifier[0].lstrip("^")
    if not _HEX_RE.match(commit):
        return None

    author_start = open_paren + 1
    author_end = line.find(" ", author_start)
    if author_end == -1:
        return None
    author = line[author_start:author_end]
    if not author:
        return None

    close_paren = line.find(")", author_end)
    content = line[close_paren + 2 :] if close_paren != -1 else ""
    return commit, author, content


def load_blame(runner: GitRunner, path: str, max_lines: int = 10) -> List[BlameLine]:
    """
    Return up to max_lines blame entries for path, each with its subject.

    Lines whose commit subject cannot be looked up are skipped but still
    advance the line number.
    """

    raw = runner.output(["blame", "--", path])
    if not raw:
        return []

    shown: List[BlameLine] = []
    for line_number, line in enumerate(raw.splitlines(), start=1):
        if len(shown) >= max_lines:
            break
        parsed = parse_blame_line(line)
        if parsed is None:
            LOG.debug("Skipping malformed blame line: %r", line)
            continue
        commit, author, content = parsed
        subject = runner.output(["show", "-s", "--format=%s", commit])
        if subject is None:
            continue
        shown.append(
            BlameLine(
                line_number=line_number,
                identifier=commit,
                author=author,
                subject=subject.splitlines()[0] if subject else "",
                content=content,
            )
        )
    return shown


# ---------------------------------------------------------------------------
# Auxiliary listings
# ---------------------------------------------------------------------------


def parse_status_porcelain(raw: Optional[str]) -> WorkingTreeStatus:
    status = WorkingTreeStatus()
    if not raw:
        return status

    for line in raw.splitlines():
        if len(line) < 4:
            continue
        code, path = line[:2], line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        if code == "??":
            status.untracked.append(path)
        elif code == "!!":
            continue
        elif code in _UNMERGED_CODES:
            status.conflicted.append(path)
        else:
            status.modified.append(path)
    return status


def count_lines(raw: Optional[str]) -> int:
    if not raw:
        return 0
    return sum(1 for line in raw.splitlines() if line.strip())


def parse_ls_tree(raw: Optional[str]) -> List[Tuple[int, str]]:
    """
    Parse `git ls-tree -r -l` output into (size, path) pairs.

    Entries without a size (submodules) are skipped.
    """

    if not raw:
        return []

    entries: List[Tuple[int, str]] = []
    for line in raw.splitlines():
        meta, sep, path = line.partition("\t")
        if not sep:
            continue
        parts = meta.split()
        if len(parts) < 4 or not parts[3].isdigit():
            continue
        entries.append((int(parts[3]), path))
    return entries


def parse_numstat(raw: Optional[str]) -> Tuple[int, int]:
    """
    Parse `git log --numstat --format=%H` output.

    Returns (commit_count, changed_lines) where changed_lines sums added
    and deleted lines. Binary files report "-" and count as zero.
    """

    if not raw:
        return 0, 0

    commits = 0
    changed = 0
    for line in raw.splitlines():
        if not line.strip():
            continue
        if "\t" not in line:
            commits += 1
            continue
        added, deleted, _ = (line.split("\t", 2) + ["", ""])[:3]
        changed += int(added) if added.isdigit() else 0
        changed += int(deleted) if deleted.isdigit() else 0
    return commits, changed


def parse_ref_ages(raw: Optional[str]) -> List[Tuple[str, str]]:
    """
    Parse `<refname>|<relative date>` lines from `git for-each-ref`.
    """

    if not raw:
        return []

    entries: List[Tuple[str, str]] = []
    for line in raw.splitlines():
        name, sep, age = line.strip().strip("'").rpartition("|")
        if not sep or not name or not age:
            continue
        entries.append((name, age))
    return entries
