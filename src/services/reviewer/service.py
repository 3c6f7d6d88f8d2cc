"""Reviewer service - orchestration layer."""

import asyncio
from functools import lru_cache
from typing import Callable

from src.config import Settings, settings
from src.core.exceptions import ValidationError
from src.core.gemini import get_gemini_client
from src.core.logging import get_logger
from src.core.pr_parser import PRReference, resolve_pr_reference
from src.core.retry import RetryPolicy
from src.services.github.schemas import PRDetails
from src.services.github.service import get_pr_details, get_pr_diff
from src.services.indexer.service import DocumentIndexer
from src.services.reviewer.aggregator import generate_draft_comment
from src.services.reviewer.context import (
    build_review_context,
    place_requirement_document,
    write_context_file,
)
from src.services.reviewer.direct import DirectReviewer
from src.services.reviewer.invoker import ReviewToolInvoker
from src.services.reviewer.schemas import Finding, RequirementDocument, ReviewResult
from src.services.reviewer.talk_script import generate_talk_script
from src.services.workspace.diff import DiffDeriver, truncate_diff
from src.services.workspace.git import GitCli
from src.services.workspace.manager import WorkspaceManager

logger = get_logger("reviewer.service")

REVIEW_MODES = ("cli", "api")


class ReviewPipeline:
    """Runs one PR review from locator to ReviewResult.

    The CLI path checks the PR out into a workspace and runs the review tool
    there; the workspace is removed whatever happens after acquisition. The
    API path sends the GitHub diff to the model, optionally with the
    requirement document indexed for retrieval.
    """

    def __init__(
        self,
        workspaces: WorkspaceManager,
        differ: DiffDeriver,
        invoker: ReviewToolInvoker,
        direct: DirectReviewer | None = None,
        fetch_details: Callable[[PRReference], PRDetails] = get_pr_details,
        fetch_diff: Callable[[PRReference], str] = get_pr_diff,
        default_mode: str = "cli",
        with_talk_script: bool = True,
    ) -> None:
        self.workspaces = workspaces
        self.differ = differ
        self.invoker = invoker
        self.direct = direct
        self.fetch_details = fetch_details
        self.fetch_diff = fetch_diff
        self.default_mode = default_mode
        self.with_talk_script = with_talk_script

    async def run(
        self,
        pr_url: str,
        requirement: RequirementDocument | None = None,
        mode: str | None = None,
    ) -> ReviewResult:
        mode = mode or self.default_mode
        if mode not in REVIEW_MODES:
            raise ValidationError(f"Unknown review mode: {mode}", {"supported": list(REVIEW_MODES)})

        reference = resolve_pr_reference(pr_url)
        logger.info(f"Processing PR: {reference.slug} ({mode})")

        details = await asyncio.to_thread(self.fetch_details, reference)
        logger.info(f"PR: {details.title}")

        if mode == "api":
            findings = await self.review_via_api(reference, details, requirement)
        else:
            findings = await self.review_via_cli(reference, details, requirement)

        logger.info(f"Found {len(findings)} findings")

        talk_script = await generate_talk_script(findings) if self.with_talk_script else None

        return ReviewResult(
            pr_url=pr_url,
            findings=findings,
            talk_script=talk_script,
            draft_comment=generate_draft_comment(findings),
        )

    async def review_via_cli(
        self,
        reference: PRReference,
        details: PRDetails,
        requirement: RequirementDocument | None = None,
    ) -> list[Finding]:
        async with self.workspaces.acquire(reference) as workspace:
            requirement_file_name = None
            if requirement is not None:
                requirement_file_name = await asyncio.to_thread(
                    place_requirement_document, workspace.path, requirement
                )

            diff = await self.differ.derive(workspace)
            context = build_review_context(details, diff, requirement_file_name)
            await asyncio.to_thread(write_context_file, workspace.path, context)

            return await self.invoker.review(workspace.path)

    async def review_via_api(
        self,
        reference: PRReference,
        details: PRDetails,
        requirement: RequirementDocument | None = None,
    ) -> list[Finding]:
        if self.direct is None:
            raise ValidationError("Direct API review requires GEMINI_API_KEY")

        diff_text = await asyncio.to_thread(self.fetch_diff, reference)
        diff = truncate_diff(diff_text, self.differ.max_chars)
        logger.info(f"Diff size: {diff.original_length} characters")

        return await self.direct.review(details, diff, requirement)


def build_pipeline(config: Settings) -> ReviewPipeline:
    """Wire a pipeline from settings."""
    git = GitCli(timeout=config.git_timeout)

    direct = None
    if config.gemini_api_key:
        client = get_gemini_client()
        indexer = DocumentIndexer(
            client,
            scratch_dir=config.scratch_root,
            policy=RetryPolicy(
                max_attempts=config.index_max_attempts,
                interval=config.index_poll_interval,
            ),
        )
        direct = DirectReviewer(client, model=config.gemini_model, indexer=indexer)

    return ReviewPipeline(
        workspaces=WorkspaceManager(
            root=config.workspace_root,
            git=git,
            clone_depth=config.clone_depth,
            token=config.github_token,
        ),
        differ=DiffDeriver(git, bases=config.diff_bases, max_chars=config.diff_max_chars),
        invoker=ReviewToolInvoker(
            command=config.review_tool_command,
            timeout=config.review_tool_timeout,
            max_output_bytes=config.review_tool_max_output_bytes,
        ),
        direct=direct,
        default_mode=config.review_mode,
        with_talk_script=config.generate_talk_script,
    )


@lru_cache(maxsize=1)
def get_pipeline() -> ReviewPipeline:
    return build_pipeline(settings)


async def review_pull_request(
    pr_url: str,
    requirement: RequirementDocument | None = None,
    mode: str | None = None,
) -> ReviewResult:
    """Review a pull request with the configured pipeline."""
    return await get_pipeline().run(pr_url, requirement, mode)
