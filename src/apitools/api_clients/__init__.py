"""API client abstractions for upstream services.

Business logic talks to upstreams only through these clients; no raw HTTP
calls live outside this package.
"""

from .base_client import (
    APIClientError,
    BaseAPIClient,
    NetworkError,
    UpstreamError,
    UpstreamTimeoutError,
)
from .gitlab_client import (
    GitLabAPIClient,
    GitLabCommit,
    GitLabProject,
    GitLabUser,
    ProjectNotFoundError,
    UserNotFoundError,
)

__all__ = [
    # Base client
    "APIClientError",
    "BaseAPIClient",
    "NetworkError",
    "UpstreamError",
    "UpstreamTimeoutError",
    # GitLab client
    "GitLabAPIClient",
    "GitLabCommit",
    "GitLabProject",
    "GitLabUser",
    "ProjectNotFoundError",
    "UserNotFoundError",
]
