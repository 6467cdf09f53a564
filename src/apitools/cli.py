"""Command line interface for apitools.

Runs the two services and gives direct access to the same business logic
the HTTP API exposes.
"""

import asyncio
import base64
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .business_logic import AverageTimeError, CommitRecordService, calculate_average_time
from .config import load_config
from .mail import Attachment, SendEmailRequest, create_email_sender
from .server.models import AverageTimeRequest, GitCommitRecordRequest

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

console = Console()


def _business_failed(code: int, message: str) -> None:
    console.print(f"[red]✗ [{code}] {message}[/red]")
    sys.exit(1)


@click.group()
@click.option("--config", "-f", type=click.Path(), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="apitools")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Email relay, GitLab commit records and average-time tools.

    \b
    SERVICES:
      apitools serve        # HTTP API (FastAPI + uvicorn)
      apitools rpc-serve    # Email RPC tier (rpyc)

    \b
    EXAMPLES:
      apitools commits -u jane -p group/api -p group/web --start 2024-01-01 --end today
      apitools average-time 1700000000 1700003600
      apitools send-email --to a@example.com -s "Report" -m "See attached" -a report.pdf
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT
    )


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", type=int, default=None, help="Port to run on")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP API."""
    from .server.main import run_server

    logging.getLogger().setLevel(logging.INFO)
    run_server(ctx.obj["config_path"], host, port, reload)


@cli.command("rpc-serve")
@click.option("--host", default=None, help="Override RPC bind host")
@click.option("--port", type=int, default=None, help="Override RPC port")
@click.option("--socket", "socket_path", default=None, help="Bind a Unix socket")
@click.pass_context
def rpc_serve(ctx, host: Optional[str], port: Optional[int], socket_path: Optional[str]):
    """Run the email RPC tier."""
    from .daemon.server import start_server
    from .utils.exception_logger import ExceptionLogger

    logging.getLogger().setLevel(logging.INFO)
    config = load_config(ctx.obj["config_path"])
    if host:
        config.email_rpc.host = host
    if port:
        config.email_rpc.port = port
    if socket_path:
        config.email_rpc.socket_path = socket_path

    ExceptionLogger.initialize(mode="rpc").install_thread_exception_hook()
    start_server(config)


@cli.command()
@click.option("--username", "-u", required=True, help="GitLab username")
@click.option(
    "--project", "-p", "projects", multiple=True, required=True,
    help="Project path (repeatable), e.g. group/project",
)
@click.option("--start", "start_date", default="", help="YYYY-MM-DD or 'today'")
@click.option("--end", "end_date", default="", help="YYYY-MM-DD or 'today'")
@click.option("--gitlab-url", default="", help="Override configured GitLab URL")
@click.option("--token", default="", envvar="APITOOLS_GITLAB_TOKEN", help="Access token")
@click.pass_context
def commits(
    ctx,
    username: str,
    projects: Tuple[str, ...],
    start_date: str,
    end_date: str,
    gitlab_url: str,
    token: str,
):
    """Show a user's commits across GitLab projects."""
    config = load_config(ctx.obj["config_path"])
    request = GitCommitRecordRequest(
        gitlab_url=gitlab_url,
        access_token=token,
        username=username,
        projects=list(projects),
        start_date=start_date,
        end_date=end_date,
    )

    with console.status("Querying GitLab..."):
        result = asyncio.run(CommitRecordService(config.gitlab).query(request))

    if result.code != 200:
        _business_failed(result.code, result.message)

    summary = result.summary
    console.print(
        Panel(
            f"User: [cyan]{result.username}[/cyan]\n"
            f"Range: {result.date_range}\n"
            f"Server: {summary.gitlab_server}\n"
            f"Projects with commits: {summary.projects_with_commits}/{summary.total_projects}\n"
            f"Total commits: [bold]{summary.total_commits}[/bold]",
            title="Commit records",
        )
    )

    for project in result.project_commits:
        table = Table(title=f"{project.project_path} ({project.commit_count})")
        table.add_column("Commit", style="yellow", no_wrap=True)
        table.add_column("Date", no_wrap=True)
        table.add_column("Author")
        table.add_column("Title")
        for commit in project.commits:
            table.add_row(
                commit.short_id, commit.committed_date, commit.author_name, commit.title
            )
        console.print(table)


@cli.command("average-time")
@click.argument("timestamps", nargs=-1, type=int, required=True)
def average_time(timestamps: Tuple[int, ...]):
    """Average time of day of epoch TIMESTAMPS, anchored on today."""
    try:
        result = calculate_average_time(AverageTimeRequest(timestamp_list=list(timestamps)))
    except AverageTimeError as e:
        _business_failed(400, str(e))
        return

    console.print(f"[green]✓[/green] Average time: [bold]{result.hhmmss}[/bold]")
    console.print(f"  {result.average_time} (timestamp {result.average_timestamp})")


def _read_attachments(paths: List[str]) -> List[Attachment]:
    attachments = []
    for path_str in paths:
        path = Path(path_str)
        data = path.read_bytes()
        attachments.append(
            Attachment(
                file_name=path.name,
                content=base64.b64encode(data).decode("ascii"),
                size=len(data),
            )
        )
    return attachments


@cli.command("send-email")
@click.option("--to", "to", multiple=True, required=True, help="Recipient (repeatable)")
@click.option("--cc", multiple=True, help="Cc recipient (repeatable)")
@click.option("--bcc", multiple=True, help="Bcc recipient (repeatable)")
@click.option("--subject", "-s", required=True, help="Subject line")
@click.option("--message", "-m", "content", default="", help="Message body")
@click.option(
    "--body-file", type=click.Path(exists=True, dir_okay=False), help="Read body from file"
)
@click.option("--html", is_flag=True, help="Send the body as text/html")
@click.option(
    "--priority", type=click.Choice(["1", "3", "5"]), default=None, help="1 high, 3 normal, 5 low"
)
@click.option(
    "--attach", "-a", multiple=True, type=click.Path(exists=True, dir_okay=False),
    help="Attach a file (repeatable)",
)
@click.pass_context
def send_email(
    ctx,
    to: Tuple[str, ...],
    cc: Tuple[str, ...],
    bcc: Tuple[str, ...],
    subject: str,
    content: str,
    body_file: Optional[str],
    html: bool,
    priority: Optional[str],
    attach: Tuple[str, ...],
):
    """Send an email through the configured backend."""
    config = load_config(ctx.obj["config_path"])
    if body_file:
        content = Path(body_file).read_text()

    request = SendEmailRequest(
        to=list(to),
        cc=list(cc),
        bcc=list(bcc),
        subject=subject,
        content=content,
        content_type="text/html" if html else "text/plain",
        priority=int(priority) if priority else 0,
        attachments=_read_attachments(list(attach)),
    )

    with console.status(f"Sending via {config.email_backend}..."):
        result = create_email_sender(config).send_email(request)

    if result.code != 200:
        _business_failed(result.code, result.message)

    console.print(f"[green]✓ Email sent[/green] id={result.email_id}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
