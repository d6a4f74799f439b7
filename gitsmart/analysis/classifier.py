"""
Keyword heuristics over raw diff text.

Three ordered rule tables drive this module:

  - CHANGE_TYPE_RULES picks exactly one change type; the first rule
    whose predicate matches wins.
  - REVIEW_RULES and SECURITY_RULES raise concern flags; every rule is
    evaluated, independently of the change type and of each other.

All matching is case-sensitive substring presence over the whole diff.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence

from ..domain import (
    EMPTY_CLASSIFICATION,
    ChangeType,
    ClassificationResult,
    ConcernFlag,
    ConcernReport,
)

Predicate = Callable[[str], bool]

DEFAULT_SUBJECT = "implement changes"
MAX_IDENTIFIER_LENGTH = 50

_DECLARATION_RE = re.compile(r"\b(?:class|function|def|fn)\s+([A-Za-z_$][\w$]*)")
# "//" not immediately followed by a TODO or FIXME marker.
_NEW_COMMENT_RE = re.compile(r"//(?! ?(?:TODO|FIXME))")


def contains_any(*needles: str) -> Predicate:
    def predicate(text: str) -> bool:
        return any(needle in text for needle in needles)

    return predicate


def contains_all(*needles: str) -> Predicate:
    def predicate(text: str) -> bool:
        return all(needle in text for needle in needles)

    return predicate


def _allocates_without_free(text: str) -> bool:
    return "malloc(" in text and "free(" not in text


def _has_new_comment(text: str) -> bool:
    return _NEW_COMMENT_RE.search(text) is not None


@dataclass(frozen=True)
class ChangeTypeRule:
    label: ChangeType
    description: str
    commit_prefix: str
    predicate: Predicate


@dataclass(frozen=True)
class ConcernRule:
    flag: ConcernFlag
    message: str
    predicate: Predicate


@dataclass(frozen=True)
class KeyChangeRule:
    summary: str
    predicate: Predicate


CHANGE_TYPE_RULES: Sequence[ChangeTypeRule] = (
    ChangeTypeRule(
        "feature-add", "add new feature", "feat", contains_all("--- /dev/null", "+++ b/")
    ),
    ChangeTypeRule("fix", "resolve issue", "fix", contains_any("fix", "bug", "error")),
    ChangeTypeRule(
        "refactor",
        "improve code structure",
        "refactor",
        contains_any("refactor", "cleanup", "optimize"),
    ),
    ChangeTypeRule("test", "add or update tests", "test", contains_any("test")),
    ChangeTypeRule(
        "docs", "update documentation", "docs", contains_any("doc", "readme", "comment")
    ),
    ChangeTypeRule("chore", "maintenance tasks", "chore", lambda text: True),
)

REVIEW_RULES: Sequence[ConcernRule] = (
    ConcernRule(
        "has-todo",
        "TODO/FIXME comments added - consider addressing before merge",
        contains_any("TODO", "FIXME"),
    ),
    ConcernRule(
        "has-debug-output",
        "Debug prints found - remove before production",
        contains_any("printf(", "console.log", "print("),
    ),
    ConcernRule(
        "has-secret-like-string",
        "Potential secrets in code - verify no hardcoded credentials",
        contains_any("password", "secret", "api_key"),
    ),
    ConcernRule(
        "has-new-comment",
        "New comments added - verify they provide useful context",
        _has_new_comment,
    ),
)

SECURITY_RULES: Sequence[ConcernRule] = (
    ConcernRule(
        "has-unsafe-call",
        "System command execution found - validate input sanitization",
        contains_any("system(", "exec(", "popen("),
    ),
    ConcernRule(
        "has-unsafe-call",
        "Unsafe string functions used - consider strncpy/strncat/snprintf",
        contains_any("strcpy(", "strcat(", "sprintf("),
    ),
    ConcernRule(
        "has-unfreed-allocation",
        "Memory allocation without obvious free - check for leaks",
        _allocates_without_free,
    ),
    ConcernRule(
        "has-secret-like-string",
        "Security-related strings modified - verify no sensitive data exposure",
        contains_any("password", "secret", "key"),
    ),
    ConcernRule(
        "has-permission-change",
        "Permission changes detected - review access control requirements",
        contains_any("permission", "chmod", "access"),
    ),
)

KEY_CHANGE_RULES: Sequence[KeyChangeRule] = (
    KeyChangeRule("address code comments", contains_any("TODO", "FIXME")),
    KeyChangeRule("update dependencies", contains_any("import", "include", "require")),
    KeyChangeRule("update configuration", contains_any("config", "setting")),
)


def match_change_type(diff_text: str) -> ChangeTypeRule:
    """
    Return the first change-type rule matching diff_text.

    The table ends with a catch-all, so a rule is always returned.
    """

    for rule in CHANGE_TYPE_RULES:
        if rule.predicate(diff_text):
            return rule
    return CHANGE_TYPE_RULES[-1]


def scan_concerns(diff_text: Optional[str], rules: Sequence[ConcernRule]) -> ConcernReport:
    """
    Evaluate every rule against diff_text and collect the warnings.

    issue_count on the returned report counts triggered rules, so two
    rules raising the same flag count twice.
    """

    report = ConcernReport()
    if not diff_text:
        return report

    flags = set()
    for rule in rules:
        if rule.predicate(diff_text):
            flags.add(rule.flag)
            report.warnings.append(rule.message)
    report.flags = frozenset(flags)
    return report


def classify_diff(diff_text: Optional[str]) -> ClassificationResult:
    """
    Assign a change type and concern flags to a block of diff text.

    Empty input returns EMPTY_CLASSIFICATION without evaluating any rule.
    """

    if not diff_text or not diff_text.strip():
        return EMPTY_CLASSIFICATION

    rule = match_change_type(diff_text)
    flags: FrozenSet[ConcernFlag] = (
        scan_concerns(diff_text, REVIEW_RULES).flags
        | scan_concerns(diff_text, SECURITY_RULES).flags
    )
    return ClassificationResult(
        change_type=rule.label,
        description=rule.description,
        flags=flags,
        commit_prefix=rule.commit_prefix,
    )


def added_lines(diff_text: str) -> List[str]:
    return [
        line[1:]
        for line in diff_text.splitlines()
        if line.startswith("+") and not line.startswith("+++")
    ]


def suggest_subject(diff_text: Optional[str]) -> str:
    """
    Build a commit subject from the first declaration on an added line.

    "+def parse_log(raw):" yields "parse_log implementation". Names of
    MAX_IDENTIFIER_LENGTH characters or more are ignored.
    """

    if not diff_text:
        return DEFAULT_SUBJECT

    for line in added_lines(diff_text):
        match = _DECLARATION_RE.search(line)
        if match and len(match.group(1)) < MAX_IDENTIFIER_LENGTH:
            return f"{match.group(1)} implementation"
    return DEFAULT_SUBJECT


def key_change_summary(diff_text: Optional[str]) -> Optional[str]:
    if not diff_text:
        return None
    for rule in KEY_CHANGE_RULES:
        if rule.predicate(diff_text):
            return rule.summary
    return None


def count_changed_files(diff_text: Optional[str]) -> int:
    if not diff_text:
        return 0
    return sum(1 for line in diff_text.splitlines() if line.startswith("diff --git"))


def suggest_commit_messages(diff_text: Optional[str]) -> List[str]:
    """
    Return conventional-commit style suggestions for a diff.

    An empty diff yields no suggestions.
    """

    result = classify_diff(diff_text)
    if result.is_empty:
        return []

    prefix = result.commit_prefix
    files_changed = count_changed_files(diff_text)
    suggestions = [
        f"{prefix}: {suggest_subject(diff_text)}",
        f"{prefix}: update {files_changed} files for {result.description}",
    ]
    hint = key_change_summary(diff_text)
    if hint:
        suggestions.append(f"{prefix}: {hint}")
    return suggestions
