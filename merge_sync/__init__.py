"""Post merged pull request summaries to the Jira issues they reference."""

__version__ = "0.1.0"
