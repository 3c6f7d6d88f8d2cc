"""GitHub service - business logic layer."""

from src.core.logging import get_logger
from src.core.pr_parser import PRReference
from src.services.github.client import fetch_pr_files, fetch_pull_request
from src.services.github.schemas import PRDetails

logger = get_logger("github.service")


def get_pr_details(reference: PRReference) -> PRDetails:
    """Get title, description and change counts for a PR."""
    logger.info(f"Fetching PR: {reference.slug}")
    pr = fetch_pull_request(reference.owner, reference.repo, reference.pr_number)
    details = PRDetails(
        title=pr.title,
        description=pr.body or "",
        additions=pr.additions,
        deletions=pr.deletions,
        changed_files=pr.changed_files,
        base_ref=pr.base.ref,
        head_ref=pr.head.ref,
        html_url=pr.html_url,
    )
    logger.info(
        f"PR {reference.slug}: +{details.additions} -{details.deletions} "
        f"in {details.changed_files} files"
    )
    return details


def get_pr_diff(reference: PRReference) -> str:
    """Build a unified diff for a PR from its per-file patches."""
    pr = fetch_pull_request(reference.owner, reference.repo, reference.pr_number)
    files = fetch_pr_files(pr)
    logger.info(f"Found {len(files)} files in PR")
    return files_to_unified_diff(files)


def files_to_unified_diff(files: list[dict]) -> str:
    """Join file patches into one unified diff, skipping binary files."""
    sections = []
    for f in files:
        if not f.get("patch"):
            continue
        new_path = f["filename"]
        old_path = f.get("previous_filename") or new_path
        old_label = "/dev/null" if f.get("status") == "added" else f"a/{old_path}"
        new_label = "/dev/null" if f.get("status") == "removed" else f"b/{new_path}"
        sections.append(
            f"diff --git a/{old_path} b/{new_path}\n"
            f"--- {old_label}\n"
            f"+++ {new_label}\n"
            f"{f['patch']}\n"
        )
    return "".join(sections)
