"""Pydantic schemas for GitHub service."""

from pydantic import BaseModel


class PRDetails(BaseModel):
    """PR metadata needed before context assembly."""

    title: str
    description: str = ""
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    base_ref: str | None = None
    head_ref: str | None = None
    html_url: str | None = None
