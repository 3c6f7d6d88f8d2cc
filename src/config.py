"""Configuration for the PR Requirement Reviewer."""

import tempfile
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

_TMP = Path(tempfile.gettempdir())


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=True, env="DEBUG")
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8080, env="PORT")

    # GitHub - a personal token is enough for public and private repos;
    # App credentials are used when no token is set
    github_token: Optional[str] = Field(default=None, env="GITHUB_TOKEN")
    github_app_id: Optional[str] = Field(default=None, env="GITHUB_APP_ID")
    github_private_key: Optional[str] = Field(default=None, env="GITHUB_PRIVATE_KEY")
    github_installation_id: Optional[str] = Field(default=None, env="GITHUB_INSTALLATION_ID")

    # LLM - Gemini for review and retrieval, OpenRouter for the talk script
    gemini_api_key: Optional[str] = Field(default=None, env="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", env="GEMINI_MODEL")
    openrouter_api_key: Optional[str] = Field(default=None, env="OPENROUTER_API_KEY")
    talk_script_model: str = Field(default="gemini-2.5-flash", env="TALK_SCRIPT_MODEL")
    generate_talk_script: bool = Field(default=True, env="GENERATE_TALK_SCRIPT")

    # Review pipeline
    review_mode: str = Field(default="cli", env="REVIEW_MODE")
    workspace_root: Path = Field(default=_TMP / "pr-review-workspaces", env="WORKSPACE_ROOT")
    scratch_root: Path = Field(default=_TMP / "pr-review-uploads", env="SCRATCH_ROOT")
    clone_depth: int = Field(default=50, env="CLONE_DEPTH")
    git_timeout: float = Field(default=300.0, env="GIT_TIMEOUT")
    diff_bases: list[str] = Field(default=["origin/main", "origin/master"], env="DIFF_BASES")
    diff_max_chars: int = Field(default=30_000, env="DIFF_MAX_CHARS")

    # External review engine; "{prompt}" is replaced with the review instruction
    review_tool_command: list[str] = Field(
        default=["gemini", "-p", "{prompt}", "--output-format", "json"],
        env="REVIEW_TOOL_COMMAND",
    )
    review_tool_timeout: float = Field(default=120.0, env="REVIEW_TOOL_TIMEOUT")
    review_tool_max_output_bytes: int = Field(default=10 * 1024 * 1024, env="REVIEW_TOOL_MAX_OUTPUT_BYTES")

    # Retrieval store indexing
    index_poll_interval: float = Field(default=2.0, env="INDEX_POLL_INTERVAL")
    index_max_attempts: int = Field(default=30, env="INDEX_MAX_ATTEMPTS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
