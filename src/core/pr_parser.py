"""Parse GitHub pull request locators."""

import re
from dataclasses import dataclass
from typing import Optional

from src.core.exceptions import InvalidReferenceError

# https://github.com/owner/repo/pull/123 with optional /files, query or fragment
PR_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)/"
    r"(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?/"
    r"pull/(?P<number>\d+)"
    r"(?:[/?#].*)?$"
)


@dataclass(frozen=True)
class PRReference:
    """Parsed PR reference."""

    owner: str
    repo: str
    pr_number: int
    clone_url: str

    @property
    def workspace_key(self) -> str:
        return f"{self.owner}-{self.repo}-{self.pr_number}"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pr_number}"


def parse_pr_reference(text: str) -> Optional[PRReference]:
    """
    Parse a GitHub pull request URL.

    Supported formats:
    - https://github.com/owner/repo/pull/123
    - https://github.com/owner/repo/pull/123/files
    - github.com/owner/repo/pull/123

    Returns None for anything else, including non-GitHub hosts and
    non-numeric pull request ids.
    """
    match = PR_URL_PATTERN.match(text.strip())
    if not match:
        return None

    number = int(match.group("number"))
    if number <= 0:
        return None

    owner = match.group("owner")
    repo = match.group("repo")
    return PRReference(
        owner=owner,
        repo=repo,
        pr_number=number,
        clone_url=f"https://github.com/{owner}/{repo}.git",
    )


def resolve_pr_reference(text: str) -> PRReference:
    """Parse a PR URL or raise InvalidReferenceError."""
    reference = parse_pr_reference(text)
    if reference is None:
        raise InvalidReferenceError(text)
    return reference
