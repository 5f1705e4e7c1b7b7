"""GitHub API client using PyGitHub."""

import os
import time

from github import Github
from github.Commit import Commit
from github.GithubException import RateLimitExceededException, UnknownObjectException
from github.NamedUser import NamedUser
from github.PullRequest import PullRequest as GithubPullRequest
from github.Repository import Repository
from rich.console import Console

from .models import GitHubUser, PullRequest, PullRequestCommit

console = Console(stderr=True)


class GitHubClient:
    """GitHub API client for reading merged pull request details."""

    def __init__(self, token: str | None = None):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.github = Github(self.token)

    def _check_rate_limit(self) -> None:
        """Check rate limit and sleep if necessary."""
        try:
            rate_limit = self.github.get_rate_limit()
            remaining = rate_limit.rate.remaining

            if remaining < 10:
                reset_time = rate_limit.rate.reset.timestamp()
                sleep_time = reset_time - time.time() + 1
                console.print(
                    f"Rate limit low, sleeping for {sleep_time:.1f} seconds..."
                )
                time.sleep(sleep_time)

        except Exception:
            # Silently continue if rate limit check fails - it's not critical
            pass

    def _convert_user(self, github_user: NamedUser | None) -> GitHubUser | None:
        """Convert PyGitHub user to our model."""
        if github_user is None:
            return None
        return GitHubUser(login=github_user.login, id=github_user.id)

    def _convert_commit(self, github_commit: Commit) -> PullRequestCommit:
        """Convert PyGitHub commit to our model."""
        return PullRequestCommit(
            sha=github_commit.sha,
            message=github_commit.commit.message or "",
        )

    def _convert_pull_request(
        self, github_pr: GithubPullRequest, org: str, repo: str
    ) -> PullRequest:
        """Convert PyGitHub pull request to our model."""
        return PullRequest(
            number=github_pr.number,
            title=github_pr.title,
            body=github_pr.body,
            head_ref=github_pr.head.ref,
            merged=bool(github_pr.merged),
            user=self._convert_user(github_pr.user),
            org=org,
            repo=repo,
        )

    def get_repository(self, org: str, repo: str) -> Repository:
        """Get repository object."""
        try:
            return self.github.get_repo(f"{org}/{repo}")
        except UnknownObjectException:
            raise ValueError(f"Repository {org}/{repo} not found")

    def _get_github_pull(self, org: str, repo: str, number: int) -> GithubPullRequest:
        repository = self.get_repository(org, repo)
        try:
            return repository.get_pull(number)
        except UnknownObjectException:
            raise ValueError(f"Pull request #{number} not found in {org}/{repo}")

    def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest:
        """Get a pull request with the fields needed for a merge summary."""
        self._check_rate_limit()
        github_pr = self._get_github_pull(org, repo, number)
        return self._convert_pull_request(github_pr, org, repo)

    def get_changed_files(self, org: str, repo: str, number: int) -> list[str]:
        """List the file paths changed by a pull request.

        Raises:
            ValueError: If repository or pull request not found
            Exception: For other API errors
        """
        self._check_rate_limit()

        try:
            github_pr = self._get_github_pull(org, repo, number)
            return [changed.filename for changed in github_pr.get_files()]
        except RateLimitExceededException:
            console.print("Rate limit exceeded while listing files, waiting...")
            time.sleep(60)
            return self.get_changed_files(org, repo, number)

    def get_commits(self, org: str, repo: str, number: int) -> list[PullRequestCommit]:
        """List the commits of a pull request in order.

        Raises:
            ValueError: If repository or pull request not found
            Exception: For other API errors
        """
        self._check_rate_limit()

        try:
            github_pr = self._get_github_pull(org, repo, number)
            return [self._convert_commit(commit) for commit in github_pr.get_commits()]
        except RateLimitExceededException:
            console.print("Rate limit exceeded while listing commits, waiting...")
            time.sleep(60)
            return self.get_commits(org, repo, number)


class GitHubPullRequestSource:
    """Adapts ``GitHubClient`` to the pull request source used by the sync.

    The client is created on first use, so a run that stops before reading
    commits never needs a GitHub token.
    """

    def __init__(
        self, client: GitHubClient | None = None, token: str | None = None
    ) -> None:
        self._client = client
        self._token = token

    @property
    def client(self) -> GitHubClient:
        """Get or create the GitHub client."""
        if self._client is None:
            self._client = GitHubClient(token=self._token)
        return self._client

    def _location(self, pr: PullRequest) -> tuple[str, str]:
        if not pr.org or not pr.repo:
            raise ValueError(
                f"Pull request #{pr.number} has no repository; "
                "pass --org and --repo or set GITHUB_REPOSITORY"
            )
        return pr.org, pr.repo

    def get_changed_files(self, pr: PullRequest) -> list[str]:
        org, repo = self._location(pr)
        return self.client.get_changed_files(org, repo, pr.number)

    def get_commits(self, pr: PullRequest) -> list[PullRequestCommit]:
        org, repo = self._location(pr)
        return self.client.get_commits(org, repo, pr.number)
