"""CLI command for posting merge summaries to Jira issues."""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..comment_builder import CommentBuilder
from ..config import ConfigurationError, SyncConfig
from ..event import EventPayloadError, load_pull_request_event
from ..github_client.client import GitHubClient, GitHubPullRequestSource
from ..github_client.models import PullRequest
from ..keys import extract_issue_keys
from ..report import SyncStatus
from ..sync import MergeSync, NoIssueKeyError
from .options import (
    CONCURRENCY_OPTION,
    DRY_RUN_OPTION,
    EVENT_PATH_OPTION,
    ORG_OPTION,
    PR_NUMBER_OPTION,
    REPO_OPTION,
    VERBOSE_OPTION,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_repository(
    org: str | None, repo: str | None
) -> tuple[str | None, str | None]:
    """Fill in org/repo from GITHUB_REPOSITORY when not given."""
    repository = os.getenv("GITHUB_REPOSITORY", "")
    if "/" in repository:
        env_org, env_repo = repository.split("/", 1)
        org = org or env_org
        repo = repo or env_repo
    return org, repo


def _load_pull_request(
    config: SyncConfig,
    event_path: str | None,
    org: str | None,
    repo: str | None,
    pr_number: int | None,
) -> PullRequest:
    if pr_number is not None:
        if not (org and repo):
            raise ValueError(
                "--org and --repo are required when --pr-number is specified"
            )
        client = GitHubClient(token=config.github_token)
        return client.get_pull_request(org, repo, pr_number)

    pr = load_pull_request_event(Path(event_path) if event_path else None)
    if org and repo:
        pr = pr.model_copy(update={"org": org, "repo": repo})
    return pr


def sync(
    event_path: str | None = EVENT_PATH_OPTION,
    org: str | None = ORG_OPTION,
    repo: str | None = REPO_OPTION,
    pr_number: int | None = PR_NUMBER_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    concurrency: int = CONCURRENCY_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Comment on every Jira issue referenced by a merged pull request.

    Issue keys are collected from the PR title, branch name, description and
    commit messages, then extended with each issue's subtasks and linked
    issues. Every issue receives the same merge summary once.

    Requires JIRA_TOKEN and JIRA_DOMAIN. GITHUB_TOKEN is needed to read
    commits and changed files.

    Examples:
        # Inside a GitHub Actions pull_request (closed) workflow
        jira-merge-sync sync

        # Preview the comment for a specific PR
        jira-merge-sync sync --org myorg --repo myrepo --pr-number 42 --dry-run
    """
    _configure_logging(verbose)

    try:
        config = SyncConfig.from_env()
        config.validate()
    except ConfigurationError as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    org, repo = _resolve_repository(org, repo)

    try:
        pr = _load_pull_request(config, event_path, org, repo, pr_number)

        source = GitHubPullRequestSource(token=config.github_token)
        merge_sync = MergeSync(config, source, concurrency=concurrency)
        report = asyncio.run(merge_sync.run(pr, dry_run=dry_run))

    except KeyboardInterrupt:
        console.print("\n❌ [yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(1)
    except (EventPayloadError, NoIssueKeyError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"❌ [red]Unexpected error: {e}[/red]")
        raise typer.Exit(1)

    builder = CommentBuilder()

    if report.status == SyncStatus.SKIPPED:
        console.print(
            "✅ [green]PR was closed but not merged. No Jira comment needed.[/green]"
        )
        return

    if report.status == SyncStatus.DRY_RUN:
        console.print("\n📋 [blue]Planned Comments:[/blue]")
        console.print(builder.build_dry_run_summary(report), markup=False)
        return

    console.print("\n📊 [blue]Execution Summary:[/blue]")
    console.print(builder.build_execution_summary(report), markup=False)

    if report.status == SyncStatus.FAILED:
        raise typer.Exit(1)


def extract_keys(
    text: list[str] = typer.Argument(..., help="Text to scan for Jira issue keys"),
) -> None:
    """Print the Jira issue keys found in the given text."""
    keys = extract_issue_keys(text)
    if not keys:
        console.print("No Jira issue keys found.")
        raise typer.Exit(1)
    for key in keys:
        console.print(key)
