"""Per-PR disposable workspaces."""

import asyncio
import shutil
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from src.core.exceptions import WorkspaceAcquisitionError
from src.core.logging import get_logger
from src.core.pr_parser import PRReference
from src.services.workspace.git import GitCli, GitCommandError, with_token

logger = get_logger("workspace")


@dataclass(frozen=True)
class Workspace:
    """A checked-out PR head owned by one review."""

    path: Path
    reference: PRReference
    branch: str


class WorkspaceManager:
    """Acquires and releases one working directory per PR.

    Directories are keyed by ``owner-repo-number`` under ``root``. Reviews of
    the same PR serialize on a per-key lock; reviews of different PRs never
    touch each other's directory.
    """

    def __init__(
        self,
        root: Path,
        git: GitCli,
        clone_depth: int = 50,
        token: str | None = None,
    ) -> None:
        self.root = Path(root)
        self.git = git
        self.clone_depth = clone_depth
        self._token = token
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: Counter[str] = Counter()

    def path_for(self, reference: PRReference) -> Path:
        return self.root / reference.workspace_key

    @asynccontextmanager
    async def acquire(self, reference: PRReference) -> AsyncIterator[Workspace]:
        """Check out the PR head and remove the directory on exit.

        The directory is removed on every exit path, including a failed
        acquisition and exceptions raised by the caller's block.

        Raises:
            WorkspaceAcquisitionError: If clone, fetch or checkout fails.
        """
        key = reference.workspace_key
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            if lock.locked():
                logger.info(f"Waiting for in-flight review of {reference.slug}")
            async with lock:
                path = self.path_for(reference)
                try:
                    workspace = await self._prepare(reference, path)
                    yield workspace
                finally:
                    await self.release(path)
        finally:
            self._users[key] -= 1
            if self._users[key] <= 0:
                del self._users[key]
                self._locks.pop(key, None)

    async def _prepare(self, reference: PRReference, path: Path) -> Workspace:
        key = reference.workspace_key
        step = "prepare directory"
        try:
            if path.exists():
                logger.warning(f"Removing stale workspace {path}")
                await asyncio.to_thread(shutil.rmtree, path)
            path.mkdir(parents=True)

            step = "clone"
            logger.info(f"Cloning {reference.clone_url} (depth {self.clone_depth})...")
            await self.git.clone(with_token(reference.clone_url, self._token), path, self.clone_depth)

            step = "fetch"
            logger.info(f"Fetching PR #{reference.pr_number}...")
            branch = await self.git.fetch_pull_head(path, reference.pr_number)

            step = "checkout"
            await self.git.checkout(path, branch)
        except GitCommandError as e:
            logger.error(f"Workspace {key}: {step} failed: {e}")
            raise WorkspaceAcquisitionError(key, step, e.reason) from e
        except OSError as e:
            logger.error(f"Workspace {key}: {step} failed: {e}")
            raise WorkspaceAcquisitionError(key, step, str(e)) from e

        logger.info(f"Repository ready at {path}")
        return Workspace(path=path, reference=reference, branch=branch)

    async def release(self, path: Path) -> None:
        """Remove a workspace directory; failures are logged, never raised."""
        try:
            await asyncio.to_thread(shutil.rmtree, path)
            logger.info(f"Cleaned up {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Cleanup failed for {path}: {e}")
