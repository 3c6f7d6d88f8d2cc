"""Pydantic schemas for reviewer service."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_DRIVE = re.compile(r"^[A-Za-z]:$")


class CamelModel(BaseModel):
    """Model serialized with camelCase keys, accepting either casing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FindingStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    CLARIFY = "CLARIFY"


class UserDecision(str, Enum):
    APPROVED = "APPROVED"
    DISMISSED = "DISMISSED"
    EDITED = "EDITED"


class Evidence(CamelModel):
    """File location supporting a finding."""

    file_path: str
    start_line: int | None = None
    end_line: int | None = None

    @field_validator("file_path")
    @classmethod
    def _relative_to_repo(cls, value: str) -> str:
        path = value.strip().replace("\\", "/")
        while path.startswith("./"):
            path = path[2:]
        if not path:
            raise ValueError("file path is empty")
        parts = PurePosixPath(path).parts
        if not parts or path.startswith("/") or _DRIVE.match(parts[0]) or ".." in parts:
            raise ValueError(f"file path must be relative to the repository: {value}")
        return path


class Finding(CamelModel):
    """One structured review observation."""

    id: str
    story_id: str | None = None
    criteria_id: str | None = None
    status: FindingStatus
    summary: str
    reason: str | None = None
    suggestion: str | None = None
    evidence: list[Evidence] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    proposed_comment: str
    user_decision: UserDecision | None = None
    user_note: str | None = None


class ReviewResult(CamelModel):
    """Terminal artifact of a PR review."""

    pr_url: str
    findings: list[Finding]
    talk_script: str | None = None
    draft_comment: str | None = None


class DraftCommentRequest(CamelModel):
    """Findings carrying the user's decisions."""

    findings: list[Finding]


class DraftCommentResponse(CamelModel):
    draft_comment: str


class ReviewContext(CamelModel):
    """Everything the review tool is told about the PR."""

    model_config = ConfigDict(frozen=True)

    pr_title: str
    pr_description: str
    diff: str
    requirement_file_name: str | None = None


@dataclass(frozen=True)
class RequirementDocument:
    """Uploaded requirement file held for the duration of one review."""

    name: str
    content: bytes
