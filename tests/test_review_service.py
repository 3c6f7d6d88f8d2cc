"""Tests for the review pipeline orchestration."""

import asyncio
import json
import sys
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from src.core.exceptions import (
    DiffDerivationExhaustedError,
    InvalidReferenceError,
    ValidationError,
    WorkspaceAcquisitionError,
)
from src.services.github.schemas import PRDetails
from src.services.reviewer.invoker import ReviewToolInvoker
from src.services.reviewer.schemas import Finding, RequirementDocument
from src.services.reviewer.service import ReviewPipeline
from src.services.workspace.diff import DiffDeriver
from src.services.workspace.git import GitCommandError
from src.services.workspace.manager import WorkspaceManager

PR_URL = "https://github.com/acme/widgets/pull/42"

FINDING = {
    "id": "F1",
    "status": "FAIL",
    "summary": "Token logged in plain text",
    "reason": "Secrets end up in log files",
    "suggestion": "Redact before logging",
    "evidence": [{"filePath": "auth.py", "startLine": 8, "endLine": 9}],
    "confidence": 0.95,
    "proposedComment": "Please redact the token.",
}


class FakeGit:
    """Simulated git: clone writes a file, diff answers from a table."""

    def __init__(self, diffs: dict[str, str] | None = None, fail_clone: bool = False):
        self.diffs = {"origin/main...HEAD": "diff --git a/auth.py b/auth.py\n+log(token)\n"} if diffs is None else diffs
        self.fail_clone = fail_clone

    async def clone(self, url: str, dest: Path, depth: int | None = None) -> None:
        if self.fail_clone:
            raise GitCommandError(["clone", url], "fatal: could not read Username")
        (dest / "auth.py").write_text("log(token)\n")

    async def fetch_pull_head(self, repo_dir: Path, pr_number: int) -> str:
        return f"pr-{pr_number}"

    async def checkout(self, repo_dir: Path, ref: str) -> None:
        pass

    async def diff(self, repo_dir: Path, revision: str) -> str:
        if revision not in self.diffs:
            raise GitCommandError(["diff", revision], "fatal: bad revision")
        return self.diffs[revision]


class RecordingInvoker:
    """Captures what the review tool would see."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.workspace_dir: Path | None = None
        self.files: dict[str, str] = {}

    async def review(self, workspace_dir: Path) -> list[Finding]:
        self.workspace_dir = workspace_dir
        self.files = {p.name: p.read_text() for p in workspace_dir.iterdir() if p.is_file()}
        if self.error:
            raise self.error
        return [Finding.model_validate(FINDING)]


def details_for(reference) -> PRDetails:
    return PRDetails(title="Add auth", description="Adds token auth", additions=3, deletions=1, changed_files=1)


@pytest.fixture
def root(tmp_path):
    return tmp_path / "workspaces"


def make_pipeline(root: Path, invoker, git: FakeGit | None = None, **kwargs) -> ReviewPipeline:
    git = git or FakeGit()
    return ReviewPipeline(
        workspaces=WorkspaceManager(root, git),
        differ=DiffDeriver(git),
        invoker=invoker,
        fetch_details=details_for,
        with_talk_script=False,
        **kwargs,
    )


def script_invoker(tmp_path: Path, body: str, timeout: float = 10.0) -> ReviewToolInvoker:
    script = tmp_path / "tool.py"
    script.write_text(textwrap.dedent(body))
    return ReviewToolInvoker(command=[sys.executable, str(script), "{prompt}"], timeout=timeout)


class TestCliPath:
    """Workspace-backed review."""

    def test_success(self, root):
        invoker = RecordingInvoker()
        pipeline = make_pipeline(root, invoker)

        result = asyncio.run(pipeline.run(PR_URL))

        assert result.pr_url == PR_URL
        assert [f.id for f in result.findings] == ["F1"]
        assert result.draft_comment.startswith("## PR Review Summary")
        assert "- File: `auth.py` (line 8-9)" in result.draft_comment
        assert invoker.workspace_dir == root / "acme-widgets-42"
        assert "+log(token)" in invoker.files["GEMINI.md"]
        assert "Add auth" in invoker.files["GEMINI.md"]
        assert not invoker.workspace_dir.exists()

    def test_requirement_document_placed(self, root):
        invoker = RecordingInvoker()
        pipeline = make_pipeline(root, invoker)
        document = RequirementDocument(name="reqs.md", content=b"Tokens must never be logged")

        asyncio.run(pipeline.run(PR_URL, requirement=document))

        assert invoker.files["REQUIREMENTS-reqs.md"] == "Tokens must never be logged"
        assert 'Read the file "REQUIREMENTS-reqs.md"' in invoker.files["GEMINI.md"]
        assert not (root / "acme-widgets-42").exists()

    def test_workspace_files_written_off_the_event_loop(self, root, monkeypatch):
        offloaded: list[str] = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func, *args, **kwargs):
            offloaded.append(getattr(func, "__name__", repr(func)))
            return await to_thread(func, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
        pipeline = make_pipeline(root, RecordingInvoker())
        document = RequirementDocument(name="reqs.md", content=b"Tokens must never be logged")

        asyncio.run(pipeline.run(PR_URL, requirement=document))

        assert "place_requirement_document" in offloaded
        assert "write_context_file" in offloaded

    def test_workspace_removed_when_tool_throws(self, root):
        invoker = RecordingInvoker(error=RuntimeError("engine crashed"))
        pipeline = make_pipeline(root, invoker)

        with pytest.raises(RuntimeError):
            asyncio.run(pipeline.run(PR_URL))

        assert invoker.workspace_dir is not None
        assert not invoker.workspace_dir.exists()

    def test_workspace_removed_when_tool_times_out(self, root, tmp_path):
        invoker = script_invoker(tmp_path, "import time\ntime.sleep(30)\n", timeout=1.0)
        pipeline = make_pipeline(root, invoker)

        result = asyncio.run(pipeline.run(PR_URL))

        assert result.findings == []
        assert result.draft_comment == "## PR Review\n\n✅ No issues found."
        assert not (root / "acme-widgets-42").exists()

    def test_real_tool_success(self, root, tmp_path):
        invoker = script_invoker(
            tmp_path,
            f"""
            import json
            assert open("GEMINI.md").read().startswith("# PR Review Context")
            print(json.dumps({{"response": {json.dumps(json.dumps([FINDING]))}}}))
            """,
        )
        pipeline = make_pipeline(root, invoker)

        result = asyncio.run(pipeline.run(PR_URL))

        assert [f.id for f in result.findings] == ["F1"]
        assert not (root / "acme-widgets-42").exists()

    def test_malformed_output_degrades(self, root, tmp_path):
        invoker = script_invoker(tmp_path, "print('I am not JSON')\n")
        pipeline = make_pipeline(root, invoker)

        result = asyncio.run(pipeline.run(PR_URL))

        assert result.findings == []

    def test_diff_exhausted_is_fatal_and_cleaned(self, root):
        invoker = RecordingInvoker()
        pipeline = make_pipeline(root, invoker, git=FakeGit(diffs={}))

        with pytest.raises(DiffDerivationExhaustedError):
            asyncio.run(pipeline.run(PR_URL))

        assert invoker.workspace_dir is None
        assert not (root / "acme-widgets-42").exists()

    def test_acquisition_failure_is_fatal(self, root):
        pipeline = make_pipeline(root, RecordingInvoker(), git=FakeGit(fail_clone=True))

        with pytest.raises(WorkspaceAcquisitionError):
            asyncio.run(pipeline.run(PR_URL))

        assert not (root / "acme-widgets-42").exists()

    def test_invalid_reference(self, root):
        fetch = AsyncMock()
        pipeline = make_pipeline(root, RecordingInvoker())
        pipeline.fetch_details = fetch

        with pytest.raises(InvalidReferenceError):
            asyncio.run(pipeline.run("https://github.com/acme/widgets/issues/42"))

        fetch.assert_not_called()

    def test_unknown_mode(self, root):
        with pytest.raises(ValidationError):
            asyncio.run(make_pipeline(root, RecordingInvoker()).run(PR_URL, mode="batch"))

    def test_talk_script_attached(self, root):
        pipeline = make_pipeline(root, RecordingInvoker())
        pipeline.with_talk_script = True

        with patch(
            "src.services.reviewer.service.generate_talk_script",
            new=AsyncMock(return_value="One issue in auth.py."),
        ) as talk:
            result = asyncio.run(pipeline.run(PR_URL))

        assert result.talk_script == "One issue in auth.py."
        assert [f.id for f in talk.await_args.args[0]] == ["F1"]

    def test_concurrent_distinct_reviews(self, root):
        seen: dict[str, set[str]] = {}

        class Invoker(RecordingInvoker):
            async def review(self, workspace_dir: Path) -> list[Finding]:
                (workspace_dir / "marker.txt").write_text(workspace_dir.name)
                await asyncio.sleep(0.05)
                seen[workspace_dir.name] = {p.read_text() for p in workspace_dir.glob("marker.txt")}
                return []

        pipeline = make_pipeline(root, Invoker())

        async def scenario():
            await asyncio.gather(
                pipeline.run("https://github.com/acme/widgets/pull/1"),
                pipeline.run("https://github.com/acme/widgets/pull/2"),
            )

        asyncio.run(scenario())

        assert seen == {
            "acme-widgets-1": {"acme-widgets-1"},
            "acme-widgets-2": {"acme-widgets-2"},
        }
        assert list(root.iterdir()) == []


class TestApiPath:
    """Direct model review without a workspace."""

    def test_uses_github_diff(self, root):
        direct = AsyncMock()
        direct.review.return_value = [Finding.model_validate(FINDING)]
        pipeline = make_pipeline(root, RecordingInvoker(), direct=direct)
        pipeline.fetch_diff = lambda reference: "x" * 40_000
        document = RequirementDocument(name="reqs.pdf", content=b"%PDF")

        result = asyncio.run(pipeline.run(PR_URL, requirement=document, mode="api"))

        assert [f.id for f in result.findings] == ["F1"]
        details, diff, requirement = direct.review.await_args.args
        assert details.title == "Add auth"
        assert diff.truncated
        assert diff.original_length == 40_000
        assert requirement is document
        assert not root.exists()

    def test_requires_gemini(self, root):
        pipeline = make_pipeline(root, RecordingInvoker(), default_mode="api")

        with pytest.raises(ValidationError):
            asyncio.run(pipeline.run(PR_URL))
