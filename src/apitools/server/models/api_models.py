"""Request and response models for the HTTP API.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HOUR_MINUTE_SECOND = "hour-minute-second"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BusinessResponse(CamelModel):
    """Envelope carried by every business endpoint."""

    code: int = Field(default=200, description="Business status: 200, 400 or 500")
    message: str = Field(default="", description="Human-readable outcome")


# Commit records


class GitCommitRecordRequest(CamelModel):
    """Commit-record query; empty fields fall back to server defaults."""

    gitlab_url: str = Field(default="", description="GitLab URL override")
    access_token: str = Field(default="", description="Access token override")
    username: str = Field(default="", description="GitLab username to report on")
    projects: List[str] = Field(
        default_factory=list, description="Project paths, e.g. group/project"
    )
    start_date: str = Field(default="", description="YYYY-MM-DD, 'today' or empty")
    end_date: str = Field(default="", description="YYYY-MM-DD, 'today' or empty")


class CommitInfo(CamelModel):
    commit_id: str
    short_id: str
    title: str
    message: str
    author_name: str
    author_email: str
    committed_date: str = Field(..., description="YYYY-MM-DD HH:MM:SS")
    web_url: str


class ProjectCommits(CamelModel):
    project_id: int
    project_name: str
    project_path: str
    project_url: str
    commits: List[CommitInfo] = Field(default_factory=list)
    commit_count: int = 0


class GitCommitSummary(CamelModel):
    projects_with_commits: int = 0
    total_commits: int = 0
    total_projects: int = 0
    gitlab_server: str = ""


class GitCommitRecordResponse(BusinessResponse):
    username: str = ""
    date_range: str = ""
    project_commits: List[ProjectCommits] = Field(default_factory=list)
    summary: GitCommitSummary = Field(default_factory=GitCommitSummary)


# Average time


class AverageTimeRequest(CamelModel):
    timestamp_list: List[int] = Field(
        default_factory=list, description="Epoch timestamps in seconds"
    )
    calculate_type: str = Field(
        default=HOUR_MINUTE_SECOND, description="Only 'hour-minute-second'"
    )


class AverageTimeResponse(BusinessResponse):
    average_time: str = Field(default="", description="YYYY-MM-DD HH:MM:SS")
    average_timestamp: int = 0
    hhmmss: str = Field(default="", description="HH:MM:SS")


class HealthResponse(CamelModel):
    status: str
    email_backend: str
    version: str
