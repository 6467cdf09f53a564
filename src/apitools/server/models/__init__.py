"""API models for the HTTP server."""

from .api_models import (
    HOUR_MINUTE_SECOND,
    AverageTimeRequest,
    AverageTimeResponse,
    BusinessResponse,
    CamelModel,
    CommitInfo,
    GitCommitRecordRequest,
    GitCommitRecordResponse,
    GitCommitSummary,
    HealthResponse,
    ProjectCommits,
)

__all__ = [
    "HOUR_MINUTE_SECOND",
    "AverageTimeRequest",
    "AverageTimeResponse",
    "BusinessResponse",
    "CamelModel",
    "CommitInfo",
    "GitCommitRecordRequest",
    "GitCommitRecordResponse",
    "GitCommitSummary",
    "HealthResponse",
    "ProjectCommits",
]
