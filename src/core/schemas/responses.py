"""Shared response schemas for API endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = False
    error: str
    details: dict | None = None


class HealthResponse(BaseModel):
    """Health check response with the active review configuration."""

    status: str = "healthy"
    service: str = "pr-requirement-reviewer"
    review_mode: str
    review_tool: str
    direct_review: bool
