"""Pydantic models for GitHub pull request data.

These models map to the parts of GitHub's REST API v3 pull request and
commit structures used when summarising a merge.
API Reference: https://docs.github.com/en/rest/pulls
"""

from pydantic import BaseModel, Field


class GitHubUser(BaseModel):
    """GitHub user model representing a user account.

    Maps to GitHub REST API User object.
    API Reference: https://docs.github.com/en/rest/users/users
    """

    login: str = Field(..., description="GitHub username/login (string)")
    id: int | None = Field(None, description="Unique user identifier (integer)")


class PullRequestCommit(BaseModel):
    """A commit included in a pull request.

    Maps to GitHub REST API Commit object (``GET /pulls/{n}/commits``).
    """

    sha: str = Field(..., description="Full commit SHA (string)")
    message: str = Field("", description="Full commit message (string)")

    @property
    def short_sha(self) -> str:
        """Abbreviated SHA as shown by git."""
        return self.sha[:7]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.splitlines()[0] if self.message else ""


class PullRequest(BaseModel):
    """GitHub pull request model.

    Maps to GitHub REST API Pull Request object, trimmed to the fields
    needed to find issue keys and describe the merge.
    API Reference: https://docs.github.com/en/rest/pulls/pulls
    """

    number: int = Field(..., description="Pull request number (integer)")
    title: str | None = Field(None, description="Pull request title (string)")
    body: str | None = Field(
        None, description="Pull request description in markdown (string)"
    )
    head_ref: str | None = Field(
        None, description="Name of the source branch (head.ref)"
    )
    merged: bool = Field(False, description="Whether the pull request was merged")
    user: GitHubUser | None = Field(None, description="Author of the pull request")
    org: str | None = Field(None, description="Repository owner")
    repo: str | None = Field(None, description="Repository name")

    @property
    def author(self) -> str:
        """Author login, or 'unknown' when GitHub did not supply one."""
        return self.user.login if self.user else "unknown"
