"""Jira issue key extraction and one-hop expansion.

Keys are pulled out of pull request text (title, branch, description and
commit messages) and then expanded once through the tracker's subtask and
issue-link relationships.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# 2-10 uppercase ASCII letters, a hyphen, one or more digits
ISSUE_KEY_PATTERN = re.compile(r"\b[A-Z]{2,10}-\d+\b", re.ASCII)


class TextSource(BaseModel):
    """A named piece of pull request text that may reference issue keys."""

    name: str = Field(..., description="Where the text came from, e.g. 'title'")
    text: str | None = Field(None, description="Raw text, may be absent")


class RelatedIssues(BaseModel):
    """Keys related to one issue through subtasks or issue links."""

    key: str = Field(..., description="Issue key that was queried")
    subtasks: list[str] = Field(default_factory=list, description="Subtask keys")
    links: list[str] = Field(
        default_factory=list, description="Inward and outward linked issue keys"
    )
    ok: bool = Field(True, description="False when the tracker query failed")

    @property
    def keys(self) -> list[str]:
        """All related keys, subtasks first, without duplicates."""
        return list(dict.fromkeys([*self.subtasks, *self.links]))


Resolver = Callable[[str], Awaitable[RelatedIssues]]


def find_issue_keys(text: str | None) -> list[str]:
    """Return every issue key in a single piece of text, in order of appearance."""
    if not text:
        return []
    return list(dict.fromkeys(ISSUE_KEY_PATTERN.findall(text.upper())))


def extract_issue_keys(fragments: Iterable[str | None]) -> list[str]:
    """Collect the unique issue keys found across all text fragments.

    Args:
        fragments: Text fragments in priority order. ``None`` and empty
            strings are skipped.

    Returns:
        Issue keys in first-seen order.
    """
    found: dict[str, None] = {}
    for fragment in fragments:
        for key in find_issue_keys(fragment):
            found.setdefault(key)
    return list(found)


def extract_from_sources(sources: Iterable[TextSource]) -> list[str]:
    """Extract issue keys from named text sources."""
    keys: dict[str, None] = {}
    for source in sources:
        source_keys = find_issue_keys(source.text)
        if source_keys:
            logger.debug(f"Found {source_keys} in {source.name}")
        for key in source_keys:
            keys.setdefault(key)
    return list(keys)


async def expand_issue_keys(
    seeds: Iterable[str],
    resolver: Resolver,
    concurrency: int = 4,
) -> list[str]:
    """Expand seed keys with their subtasks and linked issues.

    Only the seeds are resolved. Related keys are added to the result but
    never queried themselves, so the expansion is exactly one hop deep.

    Args:
        seeds: Keys extracted directly from pull request text
        resolver: Coroutine returning the related issues for one key. It is
            expected to report failures as an empty result rather than raise.
        concurrency: Maximum number of resolver calls in flight

    Returns:
        Seeds in first-seen order followed by newly discovered keys,
        ordered by the seed that produced them.
    """
    snapshot = list(dict.fromkeys(seeds))
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _resolve(key: str) -> RelatedIssues:
        async with semaphore:
            return await resolver(key)

    results = await asyncio.gather(
        *(_resolve(key) for key in snapshot), return_exceptions=True
    )

    related: dict[str, None] = {}
    for key, result in zip(snapshot, results):
        if isinstance(result, BaseException):
            logger.warning(f"Could not resolve related issues for {key}: {result}")
            continue
        for related_key in result.keys:
            normalized = related_key.strip().upper()
            if not ISSUE_KEY_PATTERN.fullmatch(normalized):
                logger.debug(f"Ignoring malformed related key {related_key!r} of {key}")
                continue
            related.setdefault(normalized)

    expanded = dict.fromkeys(snapshot)
    for key in related:
        expanded.setdefault(key)
    return list(expanded)
