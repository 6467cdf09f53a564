"""
Shared pytest fixtures for apitools tests.

Provides GitLab payload builders, an httpx mock transport that routes
requests to a fake GitLab, and a reset for the exception logger singleton.
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from apitools.config import AppConfig, EmailConfig, GitLabConfig
from apitools.utils.exception_logger import ExceptionLogger

GITLAB_URL = "https://gitlab.test"


def make_commit(
    commit_id: str,
    author_name: str = "Jane Doe",
    author_email: str = "jane.doe@example.com",
    title: str = "Fix build",
    committed_date: str = "2024-01-15T10:30:00.000+00:00",
) -> Dict[str, Any]:
    return {
        "id": commit_id,
        "short_id": commit_id[:8],
        "title": title,
        "message": f"{title}\n",
        "author_name": author_name,
        "author_email": author_email,
        "committed_date": committed_date,
        "web_url": f"{GITLAB_URL}/upstream/{commit_id}",
    }


def make_project(project_id: int, path: str) -> Dict[str, Any]:
    return {
        "id": project_id,
        "name": path.split("/")[-1],
        "path_with_namespace": path,
        "web_url": f"{GITLAB_URL}/{path}",
    }


class FakeGitLab:
    """Routes GitLab v4 requests to canned responses and records them."""

    def __init__(self):
        self.users: List[Dict[str, Any]] = [{"id": 42, "username": "jane.doe"}]
        self.projects: Dict[str, Any] = {}
        self.commits: Dict[int, Any] = {}
        self.requests: List[httpx.Request] = []

    def add_project(self, project_id: int, path: str, commits: Optional[list] = None):
        self.projects[path] = make_project(project_id, path)
        self.commits[project_id] = commits or []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # raw_path keeps %2F so project paths stay a single segment
        path = request.url.raw_path.decode().split("?")[0]

        if path == "/api/v4/users":
            return httpx.Response(200, json=self.users)

        if path.startswith("/api/v4/projects/") and path.endswith("/repository/commits"):
            project_id = int(path.split("/")[4])
            commits = self.commits.get(project_id)
            if isinstance(commits, int):
                return httpx.Response(commits, json={"message": "error"})
            return httpx.Response(200, json=commits or [])

        if path.startswith("/api/v4/projects/"):
            project_path = unquote(path[len("/api/v4/projects/"):])
            project = self.projects.get(project_path)
            if isinstance(project, int):
                return httpx.Response(project, json={"message": "error"})
            if project is None:
                return httpx.Response(404, json={"message": "404 Project Not Found"})
            return httpx.Response(200, json=project)

        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_gitlab() -> FakeGitLab:
    return FakeGitLab()


@pytest.fixture
def gitlab_config() -> GitLabConfig:
    return GitLabConfig(
        default_url=GITLAB_URL, default_access_token="default-token", timeout_seconds=5
    )


@pytest.fixture
def client_factory(fake_gitlab) -> Callable:
    """GitLabAPIClient factory bound to the fake GitLab transport."""
    from apitools.api_clients import GitLabAPIClient

    created = []

    def factory(base_url: str, access_token: str, timeout: float):
        client = GitLabAPIClient(
            base_url, access_token, timeout, transport=fake_gitlab.transport()
        )
        created.append(client)
        return client

    factory.created = created
    return factory


@pytest.fixture
def app_config(gitlab_config) -> AppConfig:
    return AppConfig(
        gitlab=gitlab_config,
        email=EmailConfig(
            host="smtp.test",
            port=587,
            username="mailer",
            password="secret",
            from_address="noreply@example.com",
            from_name="API Tools",
        ),
        email_backend="smtp",
    )


@pytest.fixture(autouse=True)
def reset_exception_logger():
    ExceptionLogger._instance = None
    yield
    ExceptionLogger._instance = None
