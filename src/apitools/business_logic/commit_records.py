"""Commit Record Business Logic.

Aggregates one user's commits across a list of GitLab projects. All HTTP
is delegated to GitLabAPIClient.
"""

import logging
from typing import Callable, List, Optional

from ..api_clients import (
    APIClientError,
    GitLabAPIClient,
    GitLabCommit,
    GitLabProject,
)
from ..config import GitLabConfig
from ..server.models import (
    CommitInfo,
    GitCommitRecordRequest,
    GitCommitRecordResponse,
    GitCommitSummary,
    ProjectCommits,
)
from .date_range import DateRange, DateRangeError, parse_date_range

logger = logging.getLogger(__name__)

COMMITTED_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

GitLabClientFactory = Callable[[str, str, float], GitLabAPIClient]


def is_user_commit(commit: GitLabCommit, username: str) -> bool:
    """Loose authorship match: username is a substring of author email or name.

    GitLab usernames often differ from the author strings in commits, so an
    exact id match would miss most commits.
    """
    username = username.lower()
    return (
        username in commit.author_email.lower()
        or username in commit.author_name.lower()
    )


def build_commit_web_url(gitlab_url: str, project_path: str, commit_id: str) -> str:
    return f"{gitlab_url.rstrip('/')}/{project_path}/-/commit/{commit_id}"


def to_commit_info(
    commit: GitLabCommit, gitlab_url: str, project: GitLabProject
) -> CommitInfo:
    return CommitInfo(
        commit_id=commit.id,
        short_id=commit.short_id,
        title=commit.title,
        message=commit.message,
        author_name=commit.author_name,
        author_email=commit.author_email,
        committed_date=commit.committed_date.strftime(COMMITTED_DATE_FORMAT),
        web_url=build_commit_web_url(
            gitlab_url, project.path_with_namespace, commit.id
        ),
    )


class CommitRecordService:
    """Answers commit-record queries against a GitLab server."""

    def __init__(
        self,
        config: GitLabConfig,
        client_factory: Optional[GitLabClientFactory] = None,
    ):
        self.config = config
        self._client_factory = client_factory or GitLabAPIClient

    @staticmethod
    def _validate(request: GitCommitRecordRequest) -> Optional[str]:
        if not request.projects:
            return "project list cannot be empty"
        if not request.username.strip():
            return "username cannot be empty"
        return None

    async def query(self, request: GitCommitRecordRequest) -> GitCommitRecordResponse:
        """Run one commit-record query.

        Failures are reported through the business code: 400 for bad input,
        500 when the user cannot be resolved. A failing project is skipped.
        """
        validation_error = self._validate(request)
        if validation_error:
            logger.info(f"Rejected commit-record request: {validation_error}")
            return GitCommitRecordResponse(
                code=400, message=f"Invalid request: {validation_error}"
            )

        gitlab_url = (request.gitlab_url or self.config.default_url).rstrip("/")
        access_token = request.access_token or self.config.default_access_token

        try:
            date_range = parse_date_range(request.start_date, request.end_date)
        except DateRangeError as e:
            logger.info(f"Rejected commit-record request: {e}")
            return GitCommitRecordResponse(
                code=400, message=f"Invalid date range: {e}"
            )

        client = self._client_factory(
            gitlab_url, access_token, float(self.config.timeout_seconds)
        )
        async with client:
            try:
                user = await client.resolve_user(request.username)
            except APIClientError as e:
                logger.error(f"Failed to resolve user {request.username}: {e}")
                return GitCommitRecordResponse(
                    code=500, message=f"Failed to resolve user: {e}"
                )

            logger.info(f"Resolved user {request.username} to id {user.id}")

            project_commits = await self._collect_project_commits(
                client, gitlab_url, request, date_range
            )

        total_commits = sum(p.commit_count for p in project_commits)
        summary = GitCommitSummary(
            projects_with_commits=len(project_commits),
            total_commits=total_commits,
            total_projects=len(request.projects),
            gitlab_server=gitlab_url,
        )

        logger.info(
            f"Commit-record query done - projects: {summary.total_projects}, "
            f"with commits: {summary.projects_with_commits}, "
            f"commits: {summary.total_commits}"
        )

        return GitCommitRecordResponse(
            code=200,
            message="query succeeded",
            username=request.username,
            date_range=date_range.label,
            project_commits=project_commits,
            summary=summary,
        )

    async def _collect_project_commits(
        self,
        client: GitLabAPIClient,
        gitlab_url: str,
        request: GitCommitRecordRequest,
        date_range: DateRange,
    ) -> List[ProjectCommits]:
        results: List[ProjectCommits] = []

        for project_path in request.projects:
            logger.info(f"Querying project: {project_path}")
            try:
                project = await client.fetch_project(project_path)
                commits = await client.list_commits(
                    project.id, date_range.start, date_range.end
                )
            except APIClientError as e:
                logger.error(f"Skipping project {project_path}: {e}")
                continue

            matched = [c for c in commits if is_user_commit(c, request.username)]
            if not matched:
                continue

            infos = [to_commit_info(c, gitlab_url, project) for c in matched]
            results.append(
                ProjectCommits(
                    project_id=project.id,
                    project_name=project.name,
                    project_path=project.path_with_namespace,
                    project_url=project.web_url,
                    commits=infos,
                    commit_count=len(infos),
                )
            )
            logger.info(f"Project {project.name}: {len(infos)} matching commits")

        return results
