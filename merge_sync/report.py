"""Result models for one merge sync run."""

from enum import Enum

from pydantic import BaseModel, Field

from .jira_client.models import PublishOutcome


class SyncStatus(str, Enum):
    """Terminal state of a sync run."""

    SKIPPED = "skipped"
    DRY_RUN = "dry_run"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncReport(BaseModel):
    """What a sync run found and did."""

    status: SyncStatus = Field(..., description="Terminal state of the run")
    pr_number: int | None = Field(None, description="Pull request number")
    seed_keys: list[str] = Field(
        default_factory=list, description="Keys extracted from pull request text"
    )
    target_keys: list[str] = Field(
        default_factory=list, description="Seed keys plus one-hop related keys"
    )
    comment: str | None = Field(None, description="Comment body shared by all targets")
    outcomes: list[PublishOutcome] = Field(
        default_factory=list, description="Per-key publish results"
    )

    @property
    def delivered(self) -> list[PublishOutcome]:
        return [o for o in self.outcomes if o.delivered]

    @property
    def failed(self) -> list[PublishOutcome]:
        return [o for o in self.outcomes if not o.delivered]

    @property
    def ok(self) -> bool:
        """True unless a publish attempt failed."""
        return self.status != SyncStatus.FAILED
