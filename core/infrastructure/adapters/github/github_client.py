"""
GitHub Client Implementation.

Creates tags, tag references and commit statuses via the GitHub REST API.
"""
from dataclasses import asdict
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.application.interfaces import CommitStatus, ICommitStatusClient, ITagClient
from core.domain.value_objects import ProjectCredentials, RepoRef, Tag
from core.settings.modules.integrations_settings import GitHubSettings


logger = logging.getLogger(__name__)


class GitHubApiError(Exception):
    """GitHub answered with an error status."""

    def __init__(self, status: int, body: str):
        self.status = status
        super().__init__(f"GitHub API error: {status} - {body}")


class GitHubClient(ITagClient, ICommitStatusClient):
    """
    GitHub implementation of tag and commit status operations.

    Credentials passed per call take precedence over the configured token.
    """

    def __init__(self, settings: Optional[GitHubSettings] = None, timeout_seconds: float = 30.0):
        """
        Initialize GitHub client.

        Args:
            settings: API URL and fallback token
            timeout_seconds: Total timeout per request
        """
        self.settings = settings or GitHubSettings()
        self.api_url = self.settings.api_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def create_tag(self, credentials: ProjectCredentials, repo_ref: RepoRef, tag: Tag) -> None:
        """Create an annotated tag object."""
        payload = {
            "tag": tag.tag,
            "message": tag.message,
            "object": tag.object,
            "type": tag.type,
            "tagger": {
                "name": tag.tagger.name,
                "email": tag.tagger.email,
                "date": tag.tagger.date.isoformat(),
            },
        }
        await self._post(credentials, f"/repos/{repo_ref.slug}/git/tags", payload)
        logger.info("Created tag object %s on %s", tag.tag, repo_ref)

    async def create_tag_reference(
        self, credentials: ProjectCredentials, repo_ref: RepoRef, tag: Tag
    ) -> None:
        """Create the tag reference."""
        payload = {"ref": tag.ref, "sha": tag.object}
        await self._post(credentials, f"/repos/{repo_ref.slug}/git/refs", payload)
        logger.info("Created reference %s on %s", tag.ref, repo_ref)

    async def create_status(
        self, credentials: ProjectCredentials, repo_ref: RepoRef, status: CommitStatus
    ) -> None:
        """Create a commit status."""
        payload = {k: v for k, v in asdict(status).items() if v is not None}
        await self._post(credentials, f"/repos/{repo_ref.slug}/statuses/{repo_ref.sha}", payload)

    async def _post(
        self, credentials: ProjectCredentials, path: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        token = credentials.token or self.settings.token
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"token {token}",
        }
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(f"{self.api_url}{path}", json=payload, headers=headers) as response:
                if response.status >= 300:
                    error_text = await response.text()
                    logger.error("GitHub API error on %s: %s - %s", path, response.status, error_text)
                    raise GitHubApiError(response.status, error_text)
                return await response.json()
