"""Shared library utilities."""

from src.core.logging import get_logger
from src.core.pr_parser import PRReference, parse_pr_reference, resolve_pr_reference
from src.core.process import ProcessResult, run_process
from src.core.retry import PollOutcome, RetryPolicy

__all__ = [
    "get_logger",
    "PRReference",
    "parse_pr_reference",
    "resolve_pr_reference",
    "ProcessResult",
    "run_process",
    "PollOutcome",
    "RetryPolicy",
]
