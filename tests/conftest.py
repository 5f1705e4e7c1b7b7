"""Test configuration and fixtures."""

import json
import threading
from pathlib import Path
from typing import Any

import pytest

from merge_sync.config import SyncConfig
from merge_sync.github_client.models import GitHubUser, PullRequest, PullRequestCommit
from merge_sync.jira_client.models import PublishOutcome
from merge_sync.keys import RelatedIssues


class FakeTracker:
    """In-memory stand-in for JiraClient that records every call."""

    def __init__(
        self,
        related: dict[str, list[str]] | None = None,
        failing_lookups: set[str] | None = None,
        failing_posts: set[str] | None = None,
    ) -> None:
        self.related = related or {}
        self.failing_lookups = failing_lookups or set()
        self.failing_posts = failing_posts or set()
        self.lookups: list[str] = []
        self.posts: list[tuple[str, str]] = []

    async def get_related_issues(self, key: str) -> RelatedIssues:
        self.lookups.append(key)
        if key in self.failing_lookups:
            return RelatedIssues(key=key, ok=False)
        return RelatedIssues(key=key, subtasks=self.related.get(key, []))

    async def add_comment(self, key: str, body: str) -> PublishOutcome:
        self.posts.append((key, body))
        if key in self.failing_posts:
            return PublishOutcome(
                key=key,
                delivered=False,
                status_code=404,
                message="Issue Does Not Exist",
            )
        return PublishOutcome(
            key=key, delivered=True, comment_id=str(10000 + len(self.posts))
        )


class FakeSource:
    """Pull request source returning fixed commits and files."""

    def __init__(
        self,
        commits: list[PullRequestCommit] | None = None,
        files: list[str] | None = None,
    ) -> None:
        self.commits = commits or []
        self.files = files or []
        self.calls: list[str] = []
        self.threads: list[int] = []

    def get_commits(self, pr: PullRequest) -> list[PullRequestCommit]:
        self.calls.append("commits")
        self.threads.append(threading.get_ident())
        return self.commits

    def get_changed_files(self, pr: PullRequest) -> list[str]:
        self.calls.append("files")
        self.threads.append(threading.get_ident())
        return self.files


@pytest.fixture
def config() -> SyncConfig:
    """Fully populated sync configuration."""
    return SyncConfig(
        jira_base_url="https://jira.example.com/",
        jira_token="jira-secret",
        github_token="gh-secret",
    )


@pytest.fixture
def merged_pr() -> PullRequest:
    """Merged pull request referencing PROJ-123 and PROJ-124."""
    return PullRequest(
        number=42,
        title="PROJ-123: add logging",
        body="Closes PROJ-124",
        head_ref="feature/PROJ-123-logging",
        merged=True,
        user=GitHubUser(login="octocat", id=1),
        org="test-org",
        repo="test-repo",
    )


@pytest.fixture
def commits() -> list[PullRequestCommit]:
    """Single commit referencing PROJ-125."""
    return [
        PullRequestCommit(
            sha="a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
            message="fix PROJ-125 bug\n\nLonger explanation.",
        )
    ]


@pytest.fixture
def event_payload() -> dict[str, Any]:
    """Minimal GitHub pull_request 'closed' event payload."""
    return {
        "action": "closed",
        "pull_request": {
            "number": 42,
            "title": "PROJ-123: add logging",
            "body": "Closes PROJ-124",
            "merged": True,
            "head": {"ref": "feature/PROJ-123-logging"},
            "user": {"login": "octocat", "id": 1},
        },
        "repository": {"full_name": "test-org/test-repo"},
    }


@pytest.fixture
def event_file(tmp_path: Path, event_payload: dict[str, Any]) -> Path:
    """Event payload written to disk."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event_payload))
    return path
