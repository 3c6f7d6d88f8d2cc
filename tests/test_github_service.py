"""Tests for GitHub service helpers."""

from types import SimpleNamespace
from unittest.mock import patch

from src.core.pr_parser import parse_pr_reference
from src.services.github.service import files_to_unified_diff, get_pr_details

REFERENCE = parse_pr_reference("https://github.com/acme/widgets/pull/42")


class TestFilesToUnifiedDiff:
    def test_modified_file(self):
        files = [{"filename": "app.py", "status": "modified", "patch": "@@ -1 +1 @@\n-a\n+b"}]

        assert files_to_unified_diff(files) == (
            "diff --git a/app.py b/app.py\n--- a/app.py\n+++ b/app.py\n@@ -1 +1 @@\n-a\n+b\n"
        )

    def test_added_removed_and_renamed(self):
        files = [
            {"filename": "new.py", "status": "added", "patch": "@@ -0,0 +1 @@\n+x"},
            {"filename": "old.py", "status": "removed", "patch": "@@ -1 +0,0 @@\n-x"},
            {"filename": "b.py", "previous_filename": "a.py", "status": "renamed", "patch": "@@ -1 +1 @@\n-y\n+z"},
        ]

        diff = files_to_unified_diff(files)

        assert "--- /dev/null\n+++ b/new.py" in diff
        assert "--- a/old.py\n+++ /dev/null" in diff
        assert "diff --git a/a.py b/b.py\n--- a/a.py\n+++ b/b.py" in diff

    def test_binary_files_skipped(self):
        files = [{"filename": "logo.png", "status": "added", "patch": None}]

        assert files_to_unified_diff(files) == ""


def test_get_pr_details():
    pr = SimpleNamespace(
        title="Add auth",
        body=None,
        additions=5,
        deletions=1,
        changed_files=2,
        base=SimpleNamespace(ref="main"),
        head=SimpleNamespace(ref="feature/auth"),
        html_url="https://github.com/acme/widgets/pull/42",
    )

    with patch("src.services.github.service.fetch_pull_request", return_value=pr) as fetch:
        details = get_pr_details(REFERENCE)

    fetch.assert_called_once_with("acme", "widgets", 42)
    assert details.title == "Add auth"
    assert details.description == ""
    assert details.base_ref == "main"
    assert details.head_ref == "feature/auth"
