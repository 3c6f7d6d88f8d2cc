"""Runs the external review engine inside a workspace."""

from pathlib import Path
from typing import Sequence

from src.core.exceptions import ProcessLaunchError, ToolTimeoutError
from src.core.logging import get_logger
from src.core.process import DEFAULT_MAX_OUTPUT_BYTES, ProcessResult, run_process
from src.services.reviewer.output_parser import parse_findings
from src.services.reviewer.schemas import Finding

logger = get_logger("reviewer.invoker")

DEFAULT_COMMAND = ("gemini", "-p", "{prompt}", "--output-format", "json")
DEFAULT_TIMEOUT = 120.0

REVIEW_PROMPT = (
    "Read the GEMINI.md file and perform the PR review. Return ONLY a valid JSON array "
    "of findings with id, status, summary, reason, suggestion, evidence, confidence, "
    "proposedComment fields."
)

# Conventional shell exit status for "command not found"
EXIT_NOT_FOUND = 127


class ReviewToolInvoker:
    """Invokes the review CLI and turns its output into findings.

    ``command`` is an argv template; ``{prompt}`` in any argument is replaced
    with the review instruction.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        timeout: float = DEFAULT_TIMEOUT,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        prompt: str = REVIEW_PROMPT,
    ) -> None:
        if not command:
            raise ValueError("review tool command is empty")
        self.command = tuple(command)
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.prompt = prompt

    def build_args(self) -> list[str]:
        return [arg.replace("{prompt}", self.prompt) for arg in self.command]

    async def invoke(self, workspace_dir: Path) -> ProcessResult:
        """Run the tool; timeouts, failures and a missing executable are returned, not raised."""
        logger.info(f"Running {self.command[0]} for review (timeout {self.timeout:g}s)...")
        try:
            result = await run_process(
                self.build_args(),
                cwd=workspace_dir,
                timeout=self.timeout,
                max_output_bytes=self.max_output_bytes,
            )
        except ProcessLaunchError as e:
            logger.error(f"Review tool unavailable: {e}")
            return ProcessResult(stdout="", stderr=str(e), exit_code=EXIT_NOT_FOUND)

        if result.stderr:
            logger.debug(f"stderr: {result.stderr[:300]}")
        logger.info(f"Review tool exited with {result.exit_code}, stdout length {len(result.stdout)}")
        return result

    def collect_findings(self, result: ProcessResult) -> list[Finding]:
        """Classify an invocation result and extract findings where possible.

        A failed run with usable stdout still goes through the parser; a failed
        run without output yields no findings.

        Raises:
            ToolTimeoutError: If the run was killed by the timeout.
        """
        if result.timed_out:
            raise ToolTimeoutError(self.timeout)

        if result.exit_code != 0 or result.output_truncated:
            if not result.stdout.strip():
                logger.error(
                    f"Review tool failed with exit code {result.exit_code} and no output: "
                    f"{result.stderr.strip()[:300]}"
                )
                return []
            logger.warning(
                f"Review tool failed with exit code {result.exit_code}, parsing partial output"
            )

        return parse_findings(result.stdout)

    async def review(self, workspace_dir: Path) -> list[Finding]:
        """Invoke the tool and return findings, degrading to none on timeout."""
        result = await self.invoke(workspace_dir)
        try:
            return self.collect_findings(result)
        except ToolTimeoutError as e:
            logger.error(f"{e}; continuing with no findings")
            return []
