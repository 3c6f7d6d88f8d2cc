"""GitHub API client - data layer."""

from typing import Optional

from github import Auth, Github, GithubException, GithubIntegration, UnknownObjectException
from github.PullRequest import PullRequest
from loguru import logger

from src.config import settings
from src.core.exceptions import ExternalServiceError, PRNotFoundError

_github_client: Optional[Github] = None


def get_github_client() -> Github:
    """Get a GitHub client.

    Prefers a personal access token, then App installation credentials, and
    falls back to anonymous access which only works for public repositories.
    """
    global _github_client

    if _github_client:
        return _github_client

    if settings.github_token:
        _github_client = Github(auth=Auth.Token(settings.github_token))
        logger.info("GitHub client initialized with token")
    elif all([settings.github_app_id, settings.github_private_key, settings.github_installation_id]):
        private_key = settings.github_private_key.replace("\\n", "\n")
        integration = GithubIntegration(
            auth=Auth.AppAuth(int(settings.github_app_id), private_key),
        )
        access_token = integration.get_access_token(int(settings.github_installation_id)).token
        _github_client = Github(auth=Auth.Token(access_token))
        logger.info("GitHub App client initialized")
    else:
        _github_client = Github()
        logger.warning("No GitHub credentials configured, using anonymous access")

    return _github_client


def fetch_pull_request(owner: str, repo: str, pr_number: int) -> PullRequest:
    """Fetch a pull request from GitHub API."""
    client = get_github_client()
    try:
        repository = client.get_repo(f"{owner}/{repo}")
        return repository.get_pull(pr_number)
    except UnknownObjectException as e:
        raise PRNotFoundError(owner, repo, pr_number) from e
    except GithubException as e:
        raise ExternalServiceError("GitHub", f"{e.status} {e.data}") from e


def fetch_pr_files(pr: PullRequest) -> list[dict]:
    """Fetch changed files from a PR."""
    files = []
    for f in pr.get_files():
        files.append({
            "filename": f.filename,
            "previous_filename": f.previous_filename,
            "status": f.status,
            "additions": f.additions,
            "deletions": f.deletions,
            "patch": f.patch or "",
        })
    return files
