"""Jira REST API client using httpx."""

import logging
from types import TracebackType
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import SyncConfig
from ..keys import RelatedIssues
from .models import JiraComment, JiraIssue, PublishOutcome

logger = logging.getLogger(__name__)


class JiraClient:
    """Async Jira client for reading issue relationships and posting comments.

    Per-issue failures are reported through the returned models instead of
    being raised, so one bad issue never stops the others.
    """

    def __init__(
        self,
        config: SyncConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize Jira client.

        Args:
            config: Validated sync configuration
            http_client: Optional preconfigured client, mainly for tests.
                When omitted one is created and closed by ``aclose``.
        """
        config.validate()
        self.config = config
        self.base_url = config.jira_base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            verify=config.verify_ssl, timeout=config.timeout
        )

    async def __aenter__(self) -> "JiraClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _issue_url(self, key: str) -> str:
        return f"{self.base_url}/rest/api/2/issue/{key}"

    async def get_issue(self, key: str) -> JiraIssue:
        """Fetch an issue restricted to its subtask and issue-link fields.

        Raises:
            httpx.HTTPError: On transport errors or non-success status
            ValueError: If the response body is not valid JSON
            pydantic.ValidationError: If the body has an unexpected shape
        """
        response = await self._client.get(
            self._issue_url(key),
            params={"fields": "subtasks,issuelinks"},
            headers=self.config.auth_headers(),
        )
        response.raise_for_status()
        return JiraIssue.model_validate(response.json())

    async def get_related_issues(self, key: str) -> RelatedIssues:
        """Return the subtasks and linked issues of ``key``.

        Any failure is logged and reported as an empty result.
        """
        try:
            issue = await self.get_issue(key)
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Could not fetch related issues for {key}: "
                f"{e.response.status_code} {e.response.text}"
            )
            return RelatedIssues(key=key, ok=False)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.warning(f"Could not fetch related issues for {key}: {e}")
            return RelatedIssues(key=key, ok=False)

        related = RelatedIssues(
            key=key,
            subtasks=[k.upper() for k in issue.subtask_keys()],
            links=[k.upper() for k in issue.linked_keys()],
        )
        logger.debug(
            f"{key}: subtasks={related.subtasks} links={related.links}"
        )
        return related

    async def add_comment(self, key: str, body: str) -> PublishOutcome:
        """Post a comment to an issue.

        Args:
            key: Issue key
            body: Comment text

        Returns:
            Delivered outcome with the new comment id, or a failed outcome
            carrying the HTTP status and response text
        """
        try:
            response = await self._client.post(
                f"{self._issue_url(key)}/comment",
                json={"body": body},
                headers=self.config.auth_headers(),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Error posting to Jira issue {key}: {e}")
            return PublishOutcome(key=key, delivered=False, message=str(e))

        if not response.is_success:
            logger.warning(
                f"Failed to post Jira comment to {key} "
                f"({response.status_code}): {response.text}"
            )
            return PublishOutcome(
                key=key,
                delivered=False,
                status_code=response.status_code,
                message=response.text,
            )

        try:
            comment = JiraComment.model_validate(response.json())
        except (ValidationError, ValueError):
            # Jira accepted the comment, only the id is unknown
            logger.info(f"Posted comment to {key}, response had no comment id")
            return PublishOutcome(key=key, delivered=True)

        logger.info(f"Successfully posted comment to {key}. Comment ID: {comment.id}")
        return PublishOutcome(key=key, delivered=True, comment_id=str(comment.id))
