"""Thin async wrapper around the git command line."""

import os
from pathlib import Path

from src.core.exceptions import ProcessLaunchError
from src.core.logging import get_logger, redact
from src.core.process import DEFAULT_MAX_OUTPUT_BYTES, run_process

logger = get_logger("workspace.git")


def with_token(url: str, token: str | None) -> str:
    """Embed a GitHub token into an https clone URL."""
    if not token or not url.startswith("https://"):
        return url
    return url.replace("https://", f"https://x-access-token:{token}@", 1)


class GitCommandError(Exception):
    """A git command exited unsuccessfully."""

    def __init__(self, args: list[str], reason: str) -> None:
        self.command = "git " + " ".join(redact(a) for a in args)
        self.reason = redact(reason.strip())
        super().__init__(f"{self.command}: {self.reason}")


class GitCli:
    """Runs git commands with a per-command timeout."""

    def __init__(
        self,
        timeout: float = 300.0,
        executable: str = "git",
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> None:
        self.timeout = timeout
        self.executable = executable
        self.max_output_bytes = max_output_bytes
        self._env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    async def run(self, args: list[str], cwd: Path | None = None) -> str:
        """Run ``git <args>`` and return stdout."""
        logger.debug(f"git {redact(' '.join(args))}")
        try:
            result = await run_process(
                [self.executable, *args],
                cwd=cwd,
                timeout=self.timeout,
                max_output_bytes=self.max_output_bytes,
                env=self._env,
            )
        except ProcessLaunchError as e:
            raise GitCommandError(args, str(e)) from e

        if result.timed_out:
            raise GitCommandError(args, f"timed out after {self.timeout:g}s")
        if result.output_truncated:
            raise GitCommandError(args, f"output exceeded {self.max_output_bytes} bytes")
        if result.exit_code != 0:
            raise GitCommandError(args, result.stderr or f"exit code {result.exit_code}")
        return result.stdout

    async def clone(self, url: str, dest: Path, depth: int | None = None) -> None:
        args = ["clone", "--quiet"]
        if depth:
            args += ["--depth", str(depth)]
        await self.run([*args, url, str(dest)])

    async def fetch_pull_head(self, repo_dir: Path, pr_number: int) -> str:
        """Fetch ``pull/<n>/head`` into a local branch and return its name."""
        branch = f"pr-{pr_number}"
        await self.run(["fetch", "--quiet", "origin", f"pull/{pr_number}/head:{branch}"], cwd=repo_dir)
        return branch

    async def checkout(self, repo_dir: Path, ref: str) -> None:
        await self.run(["checkout", "--quiet", ref], cwd=repo_dir)

    async def diff(self, repo_dir: Path, revision: str) -> str:
        return await self.run(["diff", revision], cwd=repo_dir)
