"""Tests for the HTTP surface."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.config import settings
from src.core.exceptions import InvalidReferenceError, WorkspaceAcquisitionError
from src.main import app
from src.services.reviewer.schemas import Finding, ReviewResult
from src.services.reviewer.service import get_pipeline

PR_URL = "https://github.com/acme/widgets/pull/42"

FINDING = {
    "id": "F1",
    "status": "FAIL",
    "summary": "Missing rate limit",
    "reason": "Login can be brute forced",
    "suggestion": "Add a limiter",
    "evidence": [{"filePath": "login.py", "startLine": 12, "endLine": 20}],
    "confidence": 0.8,
    "proposedComment": "Please rate limit login.",
}


@pytest.fixture
def pipeline():
    stub = AsyncMock()
    app.dependency_overrides[get_pipeline] = lambda: stub
    yield stub
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


class TestSubmitPr:
    def test_returns_review_result(self, client, pipeline):
        pipeline.run.return_value = ReviewResult(
            pr_url=PR_URL,
            findings=[Finding.model_validate(FINDING)],
            draft_comment="## PR Review Summary\n\n",
        )

        response = client.post("/api/submit-pr", data={"prUrl": PR_URL})

        assert response.status_code == 200
        body = response.json()
        assert body["prUrl"] == PR_URL
        assert body["findings"][0]["proposedComment"] == "Please rate limit login."
        assert body["findings"][0]["evidence"][0]["filePath"] == "login.py"
        assert "talkScript" not in body
        pipeline.run.assert_awaited_once_with(PR_URL, requirement=None, mode=None)

    def test_requirement_file_forwarded(self, client, pipeline):
        pipeline.run.return_value = ReviewResult(pr_url=PR_URL, findings=[], draft_comment="")

        response = client.post(
            "/api/submit-pr",
            data={"prUrl": PR_URL, "mode": "api"},
            files={"requirementFile": ("reqs.md", b"# Rate limit login", "text/markdown")},
        )

        assert response.status_code == 200
        kwargs = pipeline.run.await_args.kwargs
        assert kwargs["mode"] == "api"
        assert kwargs["requirement"].name == "reqs.md"
        assert kwargs["requirement"].content == b"# Rate limit login"

    def test_invalid_reference_is_client_error(self, client, pipeline):
        pipeline.run.side_effect = InvalidReferenceError("not a pr")

        response = client.post("/api/submit-pr", data={"prUrl": "not a pr"})

        assert response.status_code == 400
        assert response.json()["details"] == {"prUrl": "not a pr"}

    def test_acquisition_failure_is_bad_gateway(self, client, pipeline):
        pipeline.run.side_effect = WorkspaceAcquisitionError("acme-widgets-42", "clone", "repository not found")

        response = client.post("/api/submit-pr", data={"prUrl": PR_URL})

        assert response.status_code == 502
        assert "clone" in response.json()["error"]

    def test_missing_pr_url(self, client, pipeline):
        response = client.post("/api/submit-pr", data={})

        assert response.status_code == 422
        pipeline.run.assert_not_awaited()


class TestDraftComment:
    def test_excludes_dismissed(self, client):
        approved = {**FINDING, "userDecision": "APPROVED"}
        dismissed = {**FINDING, "id": "F2", "summary": "Typo", "userDecision": "DISMISSED"}

        response = client.post("/api/draft-comment", json={"findings": [approved, dismissed]})

        assert response.status_code == 200
        comment = response.json()["draftComment"]
        assert "### ❌ FAIL: Missing rate limit" in comment
        assert "Typo" not in comment

    def test_nothing_approved(self, client):
        response = client.post("/api/draft-comment", json={"findings": []})

        assert response.json() == {"draftComment": "## PR Review\n\n✅ No issues found."}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["review_mode"] == settings.review_mode
    assert body["review_tool"] == settings.review_tool_command[0]
