"""GitHub client package for API interaction."""

from .client import GitHubClient, GitHubPullRequestSource
from .models import GitHubUser, PullRequest, PullRequestCommit

__all__ = [
    "GitHubClient",
    "GitHubPullRequestSource",
    "GitHubUser",
    "PullRequest",
    "PullRequestCommit",
]
