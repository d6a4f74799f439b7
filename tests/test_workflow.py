from gitsmart.analysis.workflow import (
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


def test_commit_size_advice_thresholds():
    assert average_changes_per_commit(0, 100) is None
    assert average_changes_per_commit(4, 2010) == 502
    assert commit_size_advice(502).startswith("Consider smaller")
    assert commit_size_advice(5).startswith("Very small commits")
    assert commit_size_advice(120) == "Good commit size balance"


def test_find_stale_branches_skips_trunks_and_fresh_branches():
    refs = [
        ("main", "5 weeks ago"),
        ("feature/old", "3 weeks ago"),
        ("feature/ancient", "2 years ago"),
        ("feature/new", "2 days ago"),
    ]
    assert find_stale_branches(refs) == [
        ("feature/old", "3 weeks ago"),
        ("feature/ancient", "2 years ago"),
    ]


def test_merge_percentage_and_advice():
    assert merge_percentage(3, 0) is None
    assert merge_percentage(11, 20) == 55
    assert merge_advice(55).startswith("Consider using rebase")
    assert merge_advice(50) == "Good merge/rebase balance"


def test_workflow_recommendations():
    recommendations = workflow_recommendations(
        current_branch="feature/login",
        branch_age="3 days ago",
        uncommitted=6,
        remote_branches=9,
        local_branches=4,
    )
    assert recommendations[0].startswith("Feature branch 'feature/login' last committed 3 days ago")
    assert "6 uncommitted changes" in recommendations[1]
    assert "9 remote vs 4 local" in recommendations[2]
    assert len(recommendations) == 5

    on_trunk = workflow_recommendations(
        current_branch="main",
        branch_age="3 days ago",
        uncommitted=0,
        remote_branches=0,
        local_branches=1,
    )
    assert len(on_trunk) == 2


def test_documentation_activity():
    subjects = ["docs: update readme", "fix parser", "add Documentation page", "refactor"]
    assert count_doc_commits(subjects) == 2
    assert docs_lagging(1, 10)
    assert not docs_lagging(2, 10)


def test_largest_files():
    entries = [(10, "a"), (300, "b"), (20, "c"), (300, "d")]
    assert largest_files(entries, limit=3) == [(300, "b"), (300, "d"), (20, "c")]
