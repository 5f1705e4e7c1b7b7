"""Tests for the merge sync run."""

import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from conftest import FakeSource, FakeTracker

from merge_sync.config import ConfigurationError, SyncConfig
from merge_sync.github_client.models import PullRequest, PullRequestCommit
from merge_sync.jira_client.models import PublishOutcome
from merge_sync.keys import RelatedIssues
from merge_sync.report import SyncStatus
from merge_sync.sync import MergeSync, NoIssueKeyError, collect_text_sources


class TestMergeSyncEndToEnd:
    """Full runs against in-memory collaborators."""

    @pytest.mark.asyncio
    async def test_comments_on_every_discovered_issue(
        self,
        config: SyncConfig,
        merged_pr: PullRequest,
        commits: list[PullRequestCommit],
    ) -> None:
        """Title, branch, body, commits and subtasks all become targets."""
        tracker = FakeTracker(related={"PROJ-123": ["PROJ-126"]})
        source = FakeSource(commits=commits, files=["src/app.py"])

        report = await MergeSync(config, source, tracker).run(merged_pr)

        assert report.status == SyncStatus.COMPLETED
        assert report.seed_keys == ["PROJ-123", "PROJ-124", "PROJ-125"]
        assert report.target_keys == ["PROJ-123", "PROJ-124", "PROJ-125", "PROJ-126"]
        assert sorted(tracker.lookups) == ["PROJ-123", "PROJ-124", "PROJ-125"]

        posted_keys = sorted(key for key, _ in tracker.posts)
        assert posted_keys == ["PROJ-123", "PROJ-124", "PROJ-125", "PROJ-126"]
        bodies = {body for _, body in tracker.posts}
        assert len(bodies) == 1
        body = bodies.pop()
        assert body == report.comment
        assert "Pull request merged by @octocat" in body
        assert "- src/app.py" in body
        assert "- a1b2c3d fix PROJ-125 bug" in body
        assert report.ok

    @pytest.mark.asyncio
    async def test_each_issue_commented_once(
        self, config: SyncConfig, merged_pr: PullRequest
    ) -> None:
        """An issue reachable from several seeds receives one comment."""
        tracker = FakeTracker(
            related={"PROJ-123": ["PROJ-124", "OPS-1"], "PROJ-124": ["OPS-1"]}
        )

        report = await MergeSync(config, FakeSource(), tracker).run(merged_pr)

        assert report.target_keys == ["PROJ-123", "PROJ-124", "OPS-1"]
        assert len(tracker.posts) == 3

    @pytest.mark.asyncio
    async def test_resolver_failure_still_publishes_all_seeds(
        self, config: SyncConfig
    ) -> None:
        """A failed lookup leaves the seed itself and its siblings as targets."""
        pr = PullRequest(number=1, title="AA-1 and BB-2", merged=True)
        tracker = FakeTracker(related={"BB-2": ["CC-3"]}, failing_lookups={"AA-1"})

        report = await MergeSync(config, FakeSource(), tracker).run(pr)

        assert sorted(tracker.lookups) == ["AA-1", "BB-2"]
        assert sorted(key for key, _ in tracker.posts) == ["AA-1", "BB-2", "CC-3"]
        assert report.status == SyncStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_publish_failure_continues_and_fails_run(
        self, config: SyncConfig
    ) -> None:
        """Every target is attempted and the run is marked failed."""
        pr = PullRequest(number=1, title="AA-1 BB-2 CC-3", merged=True)
        tracker = FakeTracker(failing_posts={"AA-1"})

        report = await MergeSync(config, FakeSource(), tracker).run(pr)

        assert sorted(key for key, _ in tracker.posts) == ["AA-1", "BB-2", "CC-3"]
        assert report.status == SyncStatus.FAILED
        assert not report.ok
        assert [o.key for o in report.failed] == ["AA-1"]
        assert [o.key for o in report.delivered] == ["BB-2", "CC-3"]

    @pytest.mark.asyncio
    async def test_publish_exception_is_contained(self, config: SyncConfig) -> None:
        """A tracker that raises on one post does not cancel the others."""
        pr = PullRequest(number=1, title="AA-1 BB-2", merged=True)
        tracker = FakeTracker()

        async def add_comment(key: str, body: str) -> PublishOutcome:
            if key == "AA-1":
                raise RuntimeError("socket closed")
            return PublishOutcome(key=key, delivered=True, comment_id="1")

        tracker.add_comment = add_comment  # type: ignore[method-assign]

        report = await MergeSync(config, FakeSource(), tracker).run(pr)

        assert report.status == SyncStatus.FAILED
        assert report.failed[0].key == "AA-1"
        assert report.failed[0].message == "socket closed"
        assert report.delivered[0].key == "BB-2"

    @pytest.mark.asyncio
    async def test_dry_run_does_not_publish(
        self, config: SyncConfig, merged_pr: PullRequest
    ) -> None:
        """Dry runs resolve targets and build the comment only."""
        tracker = FakeTracker(related={"PROJ-123": ["PROJ-126"]})

        report = await MergeSync(config, FakeSource(), tracker).run(
            merged_pr, dry_run=True
        )

        assert report.status == SyncStatus.DRY_RUN
        assert report.target_keys == ["PROJ-123", "PROJ-124", "PROJ-126"]
        assert report.comment
        assert tracker.posts == []


class TestMergeSyncGates:
    """Terminal states reached before any tracker call."""

    @pytest.mark.asyncio
    async def test_unmerged_pr_is_noop(
        self, config: SyncConfig, merged_pr: PullRequest
    ) -> None:
        """A closed but unmerged PR makes no calls and succeeds."""
        pr = merged_pr.model_copy(update={"merged": False})
        tracker = FakeTracker()
        source = FakeSource()

        report = await MergeSync(config, source, tracker).run(pr)

        assert report.status == SyncStatus.SKIPPED
        assert report.ok
        assert tracker.lookups == []
        assert tracker.posts == []
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_unmerged_pr_creates_no_client(
        self, config: SyncConfig, merged_pr: PullRequest
    ) -> None:
        """Without an injected tracker, no Jira client is created."""
        pr = merged_pr.model_copy(update={"merged": False})

        with patch("merge_sync.sync.JiraClient") as mock_client:
            await MergeSync(config, FakeSource()).run(pr)

        mock_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_token_fails_before_anything(
        self, merged_pr: PullRequest
    ) -> None:
        """Configuration is checked before extraction or network calls."""
        config = SyncConfig(jira_base_url="https://jira.example.com")
        tracker = FakeTracker()
        source = FakeSource()

        with pytest.raises(ConfigurationError, match="JIRA_TOKEN"):
            await MergeSync(config, source, tracker).run(merged_pr)

        assert source.calls == []
        assert tracker.lookups == []

    @pytest.mark.asyncio
    async def test_no_issue_key(self, config: SyncConfig) -> None:
        """A merged PR without any key is a hard failure."""
        pr = PullRequest(
            number=7, title="Update docs", head_ref="docs/typo", merged=True
        )
        tracker = FakeTracker()
        source = FakeSource(commits=[PullRequestCommit(sha="abc1234", message="typo")])

        with pytest.raises(NoIssueKeyError, match="No Jira issue key found"):
            await MergeSync(config, source, tracker).run(pr)

        assert tracker.lookups == []
        assert tracker.posts == []
        assert source.calls == ["commits"]


@pytest.mark.asyncio
async def test_creates_jira_client_when_not_injected(
    config: SyncConfig, merged_pr: PullRequest
) -> None:
    """A JiraClient is opened for the run and closed afterwards."""
    client = MagicMock()
    client.get_related_issues = AsyncMock(
        side_effect=lambda key: RelatedIssues(key=key)
    )
    client.add_comment = AsyncMock(
        side_effect=lambda key, body: PublishOutcome(key=key, delivered=True)
    )
    client.__aenter__.return_value = client

    with patch("merge_sync.sync.JiraClient", return_value=client) as mock_class:
        report = await MergeSync(config, FakeSource()).run(merged_pr)

    mock_class.assert_called_once_with(config)
    client.__aexit__.assert_awaited_once()
    assert report.status == SyncStatus.COMPLETED
    assert client.add_comment.await_count == 2


def test_collect_text_sources(
    merged_pr: PullRequest, commits: list[PullRequestCommit]
) -> None:
    """Title, branch, description and each commit message are sources."""
    sources = collect_text_sources(merged_pr, commits)

    assert [s.name for s in sources] == [
        "title",
        "branch",
        "description",
        "commit a1b2c3d",
    ]
    assert sources[3].text == commits[0].message


@pytest.mark.asyncio
async def test_source_reads_run_off_the_event_loop(
    config: SyncConfig, merged_pr: PullRequest
) -> None:
    """Blocking GitHub reads happen in a worker thread."""
    source = FakeSource()

    await MergeSync(config, source, FakeTracker()).run(merged_pr)

    assert source.calls == ["commits", "files"]
    assert threading.get_ident() not in source.threads
