"""Derive a size-bounded unified diff for a checked-out PR."""

from dataclasses import dataclass
from typing import Sequence

from src.core.exceptions import DiffDerivationExhaustedError
from src.core.logging import get_logger
from src.services.workspace.git import GitCli, GitCommandError
from src.services.workspace.manager import Workspace

logger = get_logger("workspace.diff")

DEFAULT_DIFF_BASES = ("origin/main", "origin/master")
DEFAULT_MAX_CHARS = 30_000
TRUNCATION_MARKER = "\n... [diff truncated due to size]"
LAST_RESORT_REVISION = "HEAD~1"


@dataclass(frozen=True)
class DiffDocument:
    text: str
    truncated: bool
    original_length: int
    base: str | None = None


def truncate_diff(text: str, max_chars: int = DEFAULT_MAX_CHARS, base: str | None = None) -> DiffDocument:
    """Cap a diff at ``max_chars`` and append a marker when it was cut."""
    if len(text) <= max_chars:
        return DiffDocument(text=text, truncated=False, original_length=len(text), base=base)
    return DiffDocument(
        text=text[:max_chars] + TRUNCATION_MARKER,
        truncated=True,
        original_length=len(text),
        base=base,
    )


class DiffDeriver:
    """Tries each diff base in order, falling back to the previous commit."""

    def __init__(
        self,
        git: GitCli,
        bases: Sequence[str] = DEFAULT_DIFF_BASES,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self.git = git
        self.bases = tuple(bases)
        self.max_chars = max_chars

    def revisions(self) -> list[str]:
        return [f"{base}...HEAD" for base in self.bases] + [LAST_RESORT_REVISION]

    async def derive(self, workspace: Workspace) -> DiffDocument:
        """Return the diff from the first base that works.

        Raises:
            DiffDerivationExhaustedError: If every revision fails.
        """
        failures: dict[str, str] = {}
        for revision in self.revisions():
            try:
                text = await self.git.diff(workspace.path, revision)
            except GitCommandError as e:
                logger.warning(f"Diff against {revision} failed: {e.reason}")
                failures[revision] = e.reason
                continue

            document = truncate_diff(text, self.max_chars, base=revision)
            logger.info(
                f"Diff against {revision}: {document.original_length} characters"
                + (" (truncated)" if document.truncated else "")
            )
            return document

        raise DiffDerivationExhaustedError(failures)
