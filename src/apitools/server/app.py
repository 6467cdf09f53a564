"""
FastAPI application for the apitools HTTP API.

Email relay, GitLab commit records and average time of day. Every business
endpoint answers with transport status 200 and a business ``code`` field.
"""

import logging
import time
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..business_logic import (
    AverageTimeError,
    CommitRecordService,
    calculate_average_time,
)
from ..config import AppConfig, load_config
from ..mail import EmailSender, SendEmailRequest, SendEmailResponse, create_email_sender
from ..utils.exception_logger import ExceptionLogger, log_exception
from .models import (
    AverageTimeRequest,
    AverageTimeResponse,
    GitCommitRecordRequest,
    GitCommitRecordResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_commit_record_service(request: Request) -> CommitRecordService:
    return request.app.state.commit_record_service


def create_app(
    config: Optional[AppConfig] = None,
    email_sender: Optional[EmailSender] = None,
    commit_record_service: Optional[CommitRecordService] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Collaborators default to what ``config`` describes; tests pass their own.

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config = load_config()
        ExceptionLogger.initialize(mode="server").install_thread_exception_hook()

    app = FastAPI(
        title="apitools",
        description="Email relay, GitLab commit records and average time API",
        version=__version__,
    )

    app.state.config = config
    app.state.email_sender = email_sender or create_email_sender(config)
    app.state.commit_record_service = commit_record_service or CommitRecordService(
        config.gitlab
    )

    @app.middleware("http")
    async def log_request_details(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            log_exception(e, context={"method": request.method, "path": request.url.path})
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms)"
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        logger.info(f"Malformed request to {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content={"code": 400, "message": f"Malformed request: {errors}"},
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(config: AppConfig = Depends(get_config)):
        return HealthResponse(
            status="ok", email_backend=config.email_backend, version=__version__
        )

    @app.post("/api/email/send", response_model=SendEmailResponse)
    def send_email(
        body: SendEmailRequest,
        sender: EmailSender = Depends(get_email_sender),
    ):
        """Send an email through the configured backend (SMTP or RPC tier)."""
        return sender.send_email(body)

    @app.post("/api/work/git-commit-record", response_model=GitCommitRecordResponse)
    async def git_commit_record(
        body: GitCommitRecordRequest,
        service: CommitRecordService = Depends(get_commit_record_service),
    ):
        """Report a user's commits across GitLab projects in a date range."""
        return await service.query(body)

    @app.post("/api/lark/average-time", response_model=AverageTimeResponse)
    async def average_time(body: AverageTimeRequest):
        """Average time of day of the given timestamps, anchored on today."""
        try:
            return calculate_average_time(body)
        except AverageTimeError as e:
            logger.info(f"Rejected average-time request: {e}")
            return AverageTimeResponse(code=400, message=str(e))

    return app
