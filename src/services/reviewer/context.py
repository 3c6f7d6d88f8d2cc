"""Review context assembly for the review tool."""

from pathlib import Path, PurePath

from src.core.logging import get_logger
from src.core.prompts import render_review_context
from src.services.github.schemas import PRDetails
from src.services.reviewer.schemas import RequirementDocument, ReviewContext
from src.services.workspace.diff import DiffDocument

logger = get_logger("reviewer.context")

CONTEXT_FILE_NAME = "GEMINI.md"
REQUIREMENT_PREFIX = "REQUIREMENTS-"


def build_review_context(
    details: PRDetails,
    diff: DiffDocument,
    requirement_file_name: str | None = None,
) -> ReviewContext:
    """Combine PR metadata and the derived diff."""
    return ReviewContext(
        pr_title=details.title,
        pr_description=details.description,
        diff=diff.text,
        requirement_file_name=requirement_file_name,
    )


def render(context: ReviewContext) -> str:
    return render_review_context(
        pr_title=context.pr_title,
        pr_description=context.pr_description,
        diff=context.diff,
        requirement_file_name=context.requirement_file_name,
    )


def write_context_file(workspace_dir: Path, context: ReviewContext) -> Path:
    """Write the rendered context where the review tool picks it up."""
    path = workspace_dir / CONTEXT_FILE_NAME
    path.write_text(render(context), encoding="utf-8")
    logger.info(f"Created {CONTEXT_FILE_NAME} context file")
    return path


def place_requirement_document(workspace_dir: Path, document: RequirementDocument) -> str:
    """Copy the requirement document into the workspace and return its file name."""
    # Only the base name is kept so uploads cannot escape the workspace
    base_name = PurePath(document.name.replace("\\", "/")).name or "document"
    file_name = f"{REQUIREMENT_PREFIX}{base_name}"
    (workspace_dir / file_name).write_bytes(document.content)
    logger.info(f"Requirement file copied to {workspace_dir / file_name}")
    return file_name
