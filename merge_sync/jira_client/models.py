"""Pydantic models for Jira REST API v2 responses.

Only the fields the sync relies on are modelled. Everything else in the
payload is ignored.
API Reference: https://docs.atlassian.com/software/jira/docs/api/REST/latest/
"""

from pydantic import BaseModel, Field


class JiraIssueRef(BaseModel):
    """Minimal reference to another issue (subtask or link target)."""

    key: str | None = Field(None, description="Issue key, e.g. 'PROJ-123'")


class JiraIssueLink(BaseModel):
    """Jira issue link. Exactly one side is normally populated."""

    inward_issue: JiraIssueRef | None = Field(
        None, alias="inwardIssue", description="Issue on the inward side"
    )
    outward_issue: JiraIssueRef | None = Field(
        None, alias="outwardIssue", description="Issue on the outward side"
    )


class JiraIssueFields(BaseModel):
    """Subset of issue fields requested with ``fields=subtasks,issuelinks``."""

    subtasks: list[JiraIssueRef] | None = Field(
        None, description="Subtasks of the issue"
    )
    issuelinks: list[JiraIssueLink] | None = Field(
        None, description="Inward and outward issue links"
    )


class JiraIssue(BaseModel):
    """Response of ``GET /rest/api/2/issue/{key}``."""

    key: str | None = Field(None, description="Issue key")
    fields: JiraIssueFields | None = Field(None, description="Requested fields")

    def subtask_keys(self) -> list[str]:
        """Keys of all subtasks that carry a key."""
        if not self.fields or not self.fields.subtasks:
            return []
        return [task.key for task in self.fields.subtasks if task.key]

    def linked_keys(self) -> list[str]:
        """Keys on either side of every issue link."""
        if not self.fields or not self.fields.issuelinks:
            return []
        keys = []
        for link in self.fields.issuelinks:
            for side in (link.inward_issue, link.outward_issue):
                if side and side.key:
                    keys.append(side.key)
        return keys


class JiraComment(BaseModel):
    """Response of ``POST /rest/api/2/issue/{key}/comment``."""

    id: str | int = Field(..., description="Identifier assigned to the new comment")


class PublishOutcome(BaseModel):
    """Result of posting one comment to one issue."""

    key: str = Field(..., description="Issue key the comment was posted to")
    delivered: bool = Field(..., description="Whether Jira accepted the comment")
    comment_id: str | None = Field(None, description="Jira comment id on success")
    status_code: int | None = Field(
        None, description="HTTP status on failure, None for transport errors"
    )
    message: str | None = Field(None, description="Error text on failure")
