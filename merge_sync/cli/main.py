"""Main CLI entry point."""

import typer
from rich.console import Console

from .sync import extract_keys, sync

app = typer.Typer(
    name="jira-merge-sync",
    help="Post merged pull request summaries to the Jira issues they reference",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


app.command(name="sync", context_settings={"help_option_names": ["-h", "--help"]})(
    sync
)
app.command(
    name="extract-keys", context_settings={"help_option_names": ["-h", "--help"]}
)(extract_keys)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from merge_sync import __version__

    console.print(f"Jira Merge Sync v{__version__}")


if __name__ == "__main__":
    app()
