from gitsmart.analysis.classifier import (
    CHANGE_TYPE_RULES,
    DEFAULT_SUBJECT,
    REVIEW_RULES,
    SECURITY_RULES,
    classify_diff,
    count_changed_files,
    key_change_summary,
    match_change_type,
    scan_concerns,
    suggest_commit_messages,
    suggest_subject,
)
from gitsmart.domain import EMPTY_CLASSIFICATION

NEW_FILE_DIFF = """\
diff --git a/new.py b/new.py
new file mode 100644
--- /dev/null
+++ b/new.py
@@ -0,0 +1,2 @@
+def parse_log(raw):
+    return raw
"""


def test_added_file_classifies_as_feature_add():
    result = classify_diff(NEW_FILE_DIFF)
    assert result.change_type == "feature-add"
    assert result.description == "add new feature"
    assert result.commit_prefix == "feat"


def test_rules_are_evaluated_in_order():
    assert classify_diff("+    optimize the loop").change_type == "refactor"
    assert classify_diff("+ fix the optimize pass").change_type == "fix"
    assert classify_diff("+ add a test").change_type == "test"
    assert classify_diff("+ update readme").change_type == "docs"
    assert classify_diff("+ bump version").change_type == "chore"


def test_matching_is_case_sensitive():
    assert classify_diff("+ Fix Bug Error").change_type == "chore"


def test_each_rule_matches_its_own_keywords():
    samples = {
        "feature-add": "--- /dev/null\n+++ b/x",
        "fix": "error",
        "refactor": "cleanup",
        "test": "test",
        "docs": "comment",
        "chore": "version bump",
    }
    for rule in CHANGE_TYPE_RULES:
        assert rule.predicate(samples[rule.label])
        assert match_change_type(samples[rule.label]) is rule


def test_empty_diff_is_not_classified():
    assert classify_diff("") is EMPTY_CLASSIFICATION
    assert classify_diff(None).is_empty
    assert classify_diff("   \n").change_type != "chore"
    assert suggest_commit_messages("") == []


def test_flags_are_independent_of_change_type():
    result = classify_diff("+ fix crash\n+ # TODO: handle retries\n")
    assert result.change_type == "fix"
    assert "has-todo" in result.flags


def test_review_rules_report_every_triggered_concern():
    diff = '+ print("debug")\n+ password = "hunter2"\n+ // explains the loop\n+ // TODO later\n'
    report = scan_concerns(diff, REVIEW_RULES)

    assert report.flags == frozenset(
        {"has-todo", "has-debug-output", "has-secret-like-string", "has-new-comment"}
    )
    assert report.issue_count == 4
    assert len(report.warnings) == 4


def test_todo_comment_alone_is_not_a_new_comment():
    report = scan_concerns("+ // TODO later\n+ // FIXME soon\n", REVIEW_RULES)
    assert "has-new-comment" not in report.flags
    assert "has-todo" in report.flags


def test_security_rules_count_both_unsafe_call_kinds():
    diff = "+ system(cmd);\n+ strcpy(dst, src);\n+ p = malloc(10);\n"
    report = scan_concerns(diff, SECURITY_RULES)

    assert report.flags == frozenset({"has-unsafe-call", "has-unfreed-allocation"})
    assert report.issue_count == 3


def test_allocation_with_free_is_not_flagged():
    report = scan_concerns("+ p = malloc(10);\n+ free(p);\n", SECURITY_RULES)
    assert "has-unfreed-allocation" not in report.flags


def test_scan_concerns_on_empty_input():
    report = scan_concerns(None, SECURITY_RULES)
    assert report.issue_count == 0
    assert report.flags == frozenset()


def test_classification_flags_union_both_tables():
    result = classify_diff("+ os.chmod(path, 0o777)\n+ TODO\n")
    assert {"has-permission-change", "has-todo"} <= result.flags


def test_suggest_subject_from_added_declaration():
    assert suggest_subject(NEW_FILE_DIFF) == "parse_log implementation"
    assert suggest_subject("+class ReportBuilder:\n") == "ReportBuilder implementation"
    assert suggest_subject("+pub fn render() {}\n") == "render implementation"


def test_suggest_subject_ignores_removed_and_overlong_names():
    assert suggest_subject("-def removed():\n") == DEFAULT_SUBJECT
    assert suggest_subject("+++ b/def.py\n") == DEFAULT_SUBJECT
    assert suggest_subject("+def " + "x" * 60 + "():\n") == DEFAULT_SUBJECT
    assert suggest_subject(None) == DEFAULT_SUBJECT


def test_key_change_summary_order():
    assert key_change_summary("+ TODO\n+import os") == "address code comments"
    assert key_change_summary("+import os") == "update dependencies"
    assert key_change_summary("+ config value") == "update configuration"
    assert key_change_summary("+ x = 1") is None


def test_suggest_commit_messages():
    diff = NEW_FILE_DIFF + "diff --git a/b.py b/b.py\n+import os\n"
    assert count_changed_files(diff) == 2
    assert suggest_commit_messages(diff) == [
        "feat: parse_log implementation",
        "feat: update 2 files for add new feature",
        "feat: update dependencies",
    ]
