"""GitLab REST v4 client.

Covers only what commit-record queries need: user lookup by username,
project lookup by path, and a single page of commits in a time window.
"""

import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from .base_client import APIClientError, BaseAPIClient, UpstreamError

logger = logging.getLogger(__name__)

COMMITS_PER_PAGE = 100


class UserNotFoundError(APIClientError):
    """Exception raised when no GitLab user matches the username."""

    pass


class ProjectNotFoundError(APIClientError):
    """Exception raised when a project does not exist or is not visible."""

    pass


class GitLabUser(BaseModel):
    """A GitLab user as returned by ``GET /users``."""

    id: int
    username: str
    name: str = ""
    email: Optional[str] = None


class GitLabProject(BaseModel):
    """A GitLab project as returned by ``GET /projects/:id``."""

    id: int
    name: str
    path_with_namespace: str
    web_url: str = ""


class GitLabCommit(BaseModel):
    """A commit as returned by ``GET /projects/:id/repository/commits``."""

    id: str
    short_id: str = ""
    title: str = ""
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    committed_date: datetime
    web_url: str = Field(default="", description="Upstream URL, unused for output")


class GitLabAPIClient(BaseAPIClient):
    """Client for the GitLab REST v4 API.

    Certificate verification is always disabled; internal GitLab instances
    commonly run with self-signed certificates.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            base_url=base_url,
            access_token=access_token,
            timeout=timeout,
            verify_ssl=False,
            transport=transport,
        )

    async def resolve_user(self, username: str) -> GitLabUser:
        """Look up a user by exact username.

        Raises:
            UserNotFoundError: If GitLab returns no users
            UpstreamError: On non-200 status or malformed body
        """
        response = await self.get("/api/v4/users", params={"username": username})
        if response.status_code != 200:
            raise UpstreamError(
                f"GitLab returned status {response.status_code} for user lookup",
                response.status_code,
            )

        users = self._decode_json(response, "user lookup")
        if not users:
            raise UserNotFoundError(f"User not found: {username}", 404)

        try:
            return GitLabUser.model_validate(users[0])
        except (ValidationError, TypeError, KeyError) as e:
            raise UpstreamError(f"Unexpected user payload: {e}")

    async def fetch_project(self, project_path: str) -> GitLabProject:
        """Fetch project metadata by ``namespace/path``.

        Raises:
            ProjectNotFoundError: On 404 (missing or no access)
            UpstreamError: On any other non-200 status
        """
        encoded_path = quote(project_path, safe="")
        response = await self.get(f"/api/v4/projects/{encoded_path}")

        if response.status_code == 404:
            raise ProjectNotFoundError(
                f"Project not found or not accessible: {project_path}", 404
            )
        if response.status_code != 200:
            raise UpstreamError(
                f"Failed to fetch project {project_path}, status {response.status_code}",
                response.status_code,
            )

        try:
            return GitLabProject.model_validate(
                self._decode_json(response, "project")
            )
        except ValidationError as e:
            raise UpstreamError(f"Unexpected project payload for {project_path}: {e}")

    async def list_commits(
        self, project_id: int, since: datetime, until: datetime
    ) -> List[GitLabCommit]:
        """List commits on all branches between ``since`` and ``until``.

        Only the first page (up to 100 commits) is read.

        Raises:
            UpstreamError: On non-200 status or malformed body
        """
        params = {
            "since": since.isoformat(),
            "until": until.isoformat(),
            "per_page": str(COMMITS_PER_PAGE),
            "all": "true",
        }
        response = await self.get(
            f"/api/v4/projects/{project_id}/repository/commits", params=params
        )
        if response.status_code != 200:
            raise UpstreamError(
                f"Failed to list commits for project {project_id}, "
                f"status {response.status_code}",
                response.status_code,
            )

        payload = self._decode_json(response, "commit list")
        try:
            return [GitLabCommit.model_validate(item) for item in payload]
        except (ValidationError, TypeError) as e:
            raise UpstreamError(f"Unexpected commit payload for project {project_id}: {e}")
