"""Review API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.core.logging import get_logger
from src.services.reviewer.aggregator import generate_draft_comment
from src.services.reviewer.schemas import (
    DraftCommentRequest,
    DraftCommentResponse,
    RequirementDocument,
    ReviewResult,
)
from src.services.reviewer.service import ReviewPipeline, get_pipeline

logger = get_logger("reviewer.routes")

router = APIRouter()


@router.post("/submit-pr", response_model=ReviewResult, response_model_exclude_none=True)
async def submit_pr(
    pr_url: str = Form(..., alias="prUrl"),
    requirement_file: Optional[UploadFile] = File(default=None, alias="requirementFile"),
    mode: Optional[str] = Form(default=None),
    pipeline: ReviewPipeline = Depends(get_pipeline),
) -> ReviewResult:
    """Review a pull request, optionally against an uploaded requirement document."""
    requirement = None
    if requirement_file is not None and requirement_file.filename:
        content = await requirement_file.read()
        if content:
            logger.info(f"Requirement file: {requirement_file.filename} ({len(content)} bytes)")
            requirement = RequirementDocument(name=requirement_file.filename, content=content)

    result = await pipeline.run(pr_url, requirement=requirement, mode=mode)
    logger.info("Review complete!")
    return result


@router.post("/draft-comment", response_model=DraftCommentResponse)
async def draft_comment(request: DraftCommentRequest) -> DraftCommentResponse:
    """Re-derive the PR comment after the user approved or dismissed findings."""
    return DraftCommentResponse(draft_comment=generate_draft_comment(request.findings))
