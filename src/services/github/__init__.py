"""GitHub service."""

from src.services.github.schemas import PRDetails
from src.services.github.service import files_to_unified_diff, get_pr_details, get_pr_diff

__all__ = [
    "PRDetails",
    "files_to_unified_diff",
    "get_pr_details",
    "get_pr_diff",
]
