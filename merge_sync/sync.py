"""Run one merge sync: find Jira keys in a merged pull request and comment on them."""

import asyncio
import logging
from typing import Optional, Protocol

from .comment_builder import CommentBuilder
from .config import SyncConfig
from .github_client.models import PullRequest, PullRequestCommit
from .jira_client.client import JiraClient
from .jira_client.models import PublishOutcome
from .keys import RelatedIssues, TextSource, expand_issue_keys, extract_from_sources
from .report import SyncReport, SyncStatus

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


class NoIssueKeyError(ValueError):
    """Raised when a merged pull request references no Jira issue."""


class PullRequestSource(Protocol):
    """Supplies the commits and changed files of a pull request."""

    def get_changed_files(self, pr: PullRequest) -> list[str]: ...

    def get_commits(self, pr: PullRequest) -> list[PullRequestCommit]: ...


class IssueTracker(Protocol):
    """The tracker operations the sync depends on."""

    async def get_related_issues(self, key: str) -> RelatedIssues: ...

    async def add_comment(self, key: str, body: str) -> PublishOutcome: ...


def collect_text_sources(
    pr: PullRequest, commits: list[PullRequestCommit]
) -> list[TextSource]:
    """Text fragments of a pull request that may reference issue keys."""
    sources = [
        TextSource(name="title", text=pr.title),
        TextSource(name="branch", text=pr.head_ref),
        TextSource(name="description", text=pr.body),
    ]
    sources.extend(
        TextSource(name=f"commit {commit.short_sha}", text=commit.message)
        for commit in commits
    )
    return sources


class MergeSync:
    """Posts a merge summary to every Jira issue a pull request references."""

    def __init__(
        self,
        config: SyncConfig,
        source: PullRequestSource,
        tracker: Optional[IssueTracker] = None,
        comment_builder: Optional[CommentBuilder] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """Initialize the sync.

        Args:
            config: Sync configuration, validated when a run starts
            source: Where commits and changed files are read from
            tracker: Jira access. If None, a ``JiraClient`` is created for the
                run once the pull request is known to be merged.
            comment_builder: Builds the comment body
            concurrency: Maximum number of Jira requests in flight
        """
        self.config = config
        self.source = source
        self.tracker = tracker
        self.comment_builder = comment_builder or CommentBuilder()
        self.concurrency = max(1, concurrency)

    async def run(self, pr: PullRequest, dry_run: bool = False) -> SyncReport:
        """Run the sync for one pull request event.

        Raises:
            ConfigurationError: If the Jira token or address is missing
            NoIssueKeyError: If no issue key is found in the pull request
        """
        self.config.validate()

        if not pr.merged:
            logger.info(
                f"PR #{pr.number} was closed but not merged. No Jira comment needed."
            )
            return SyncReport(status=SyncStatus.SKIPPED, pr_number=pr.number)

        commits = await asyncio.to_thread(self.source.get_commits, pr)
        seed_keys = extract_from_sources(collect_text_sources(pr, commits))
        if not seed_keys:
            raise NoIssueKeyError(
                "No Jira issue key found in pull request title, branch, "
                "description or commits."
            )
        logger.info(f"Found Jira issue key(s) {', '.join(seed_keys)}")

        if self.tracker is not None:
            return await self._run_with_tracker(
                self.tracker, pr, commits, seed_keys, dry_run
            )

        async with JiraClient(self.config) as tracker:
            return await self._run_with_tracker(
                tracker, pr, commits, seed_keys, dry_run
            )

    async def _run_with_tracker(
        self,
        tracker: IssueTracker,
        pr: PullRequest,
        commits: list[PullRequestCommit],
        seed_keys: list[str],
        dry_run: bool,
    ) -> SyncReport:
        target_keys = await expand_issue_keys(
            seed_keys, tracker.get_related_issues, self.concurrency
        )
        related = [key for key in target_keys if key not in seed_keys]
        if related:
            logger.info(f"Including related issue(s) {', '.join(related)}")

        files_changed = await asyncio.to_thread(self.source.get_changed_files, pr)
        comment = self.comment_builder.build_merge_comment(pr, files_changed, commits)

        report = SyncReport(
            status=SyncStatus.DRY_RUN,
            pr_number=pr.number,
            seed_keys=seed_keys,
            target_keys=target_keys,
            comment=comment,
        )
        if dry_run:
            return report

        report.outcomes = await self._publish(tracker, target_keys, comment)
        report.status = SyncStatus.FAILED if report.failed else SyncStatus.COMPLETED
        return report

    async def _publish(
        self, tracker: IssueTracker, keys: list[str], comment: str
    ) -> list[PublishOutcome]:
        """Post ``comment`` to every key, each attempt independent of the others."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _post(key: str) -> PublishOutcome:
            async with semaphore:
                logger.info(f"Posting comment to issue {key}...")
                return await tracker.add_comment(key, comment)

        results = await asyncio.gather(
            *(_post(key) for key in keys), return_exceptions=True
        )

        outcomes = []
        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                logger.warning(f"Error posting to Jira issue {key}: {result}")
                outcomes.append(
                    PublishOutcome(key=key, delivered=False, message=str(result))
                )
            else:
                outcomes.append(result)
        return outcomes
