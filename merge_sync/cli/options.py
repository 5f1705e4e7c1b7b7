"""Standardized CLI option definitions for consistent shorthand mappings."""

import typer

# Pull request location - used when fetching from GitHub instead of an event file
ORG_OPTION = typer.Option(
    None, "--org", "-o", help="GitHub organization name (default: GITHUB_REPOSITORY)"
)

REPO_OPTION = typer.Option(
    None, "--repo", "-r", help="GitHub repository name (default: GITHUB_REPOSITORY)"
)

PR_NUMBER_OPTION = typer.Option(
    None, "--pr-number", "-p", help="Pull request number to fetch from GitHub"
)

EVENT_PATH_OPTION = typer.Option(
    None,
    "--event-path",
    "-e",
    help="GitHub pull_request event file (default: GITHUB_EVENT_PATH)",
)

# Behavior options - control command behavior
DRY_RUN_OPTION = typer.Option(
    False, "--dry-run", "-d", help="Preview the comment and targets without posting"
)

CONCURRENCY_OPTION = typer.Option(
    4, "--concurrency", "-c", min=1, help="Maximum concurrent Jira requests"
)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
