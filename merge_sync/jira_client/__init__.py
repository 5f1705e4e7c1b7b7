"""Jira client package for tracker interaction."""

from .client import JiraClient
from .models import JiraComment, JiraIssue, JiraIssueLink, JiraIssueRef, PublishOutcome

__all__ = [
    "JiraClient",
    "JiraComment",
    "JiraIssue",
    "JiraIssueLink",
    "JiraIssueRef",
    "PublishOutcome",
]
