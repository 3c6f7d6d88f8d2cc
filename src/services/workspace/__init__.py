"""Workspace service."""

from src.services.workspace.diff import DiffDeriver, DiffDocument, truncate_diff
from src.services.workspace.git import GitCli, GitCommandError
from src.services.workspace.manager import Workspace, WorkspaceManager

__all__ = [
    "DiffDeriver",
    "DiffDocument",
    "GitCli",
    "GitCommandError",
    "Workspace",
    "WorkspaceManager",
    "truncate_diff",
]
