"""Custom exceptions for the application.

Fatal pipeline errors derive from ``ApiException`` so they surface to the
HTTP caller with a status code. Recoverable errors derive from
``RecoverableReviewError``; the pipeline catches them and degrades.
"""


class ApiException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: dict | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ApiException):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(404, f"{resource} not found: {identifier}")


class ValidationError(ApiException):
    """Request validation error."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(422, message, details)


class ExternalServiceError(ApiException):
    """External service (GitHub, Gemini, etc.) error."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(502, f"{service} error: {message}")


class PRNotFoundError(NotFoundError):
    """Pull request not found."""

    def __init__(self, owner: str, repo: str, pr_number: int) -> None:
        super().__init__("Pull request", f"{owner}/{repo}#{pr_number}")


class InvalidReferenceError(ApiException):
    """PR locator does not match the expected GitHub pull request URL."""

    def __init__(self, locator: str) -> None:
        super().__init__(400, f"Invalid GitHub PR URL: {locator}", {"prUrl": locator})


class WorkspaceAcquisitionError(ApiException):
    """Clone, fetch or checkout of the PR workspace failed."""

    def __init__(self, key: str, step: str, reason: str) -> None:
        self.step = step
        super().__init__(
            502,
            f"Could not prepare workspace {key}: {step} failed",
            {"step": step, "reason": reason},
        )


class DiffDerivationExhaustedError(ApiException):
    """Every diff base failed for a workspace."""

    def __init__(self, attempts: dict[str, str]) -> None:
        super().__init__(
            422,
            "Could not derive a diff against any base",
            {"attempts": attempts},
        )


class RecoverableReviewError(Exception):
    """Failure that degrades the review instead of aborting it."""


class ToolTimeoutError(RecoverableReviewError):
    """The external review tool exceeded its time bound."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Review tool timed out after {timeout:g}s")


class MalformedOutputError(RecoverableReviewError):
    """No extraction stage could recover findings from tool output."""


class IndexingError(RecoverableReviewError):
    """The retrieval store rejected or failed to index the document."""


class IndexingTimeoutError(IndexingError):
    """The retrieval store was not ready within the polling bound."""

    def __init__(self, attempts: int, elapsed: float) -> None:
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(f"Document indexing not complete after {attempts} polls ({elapsed:.1f}s)")


class ProcessLaunchError(OSError):
    """The executable for a subprocess could not be started."""
