"""Comment generation for Jira merge notifications."""

from .github_client.models import PullRequest, PullRequestCommit
from .report import SyncReport


class CommentBuilder:
    """Builds the Jira comment describing a merged pull request."""

    def build_merge_comment(
        self,
        pr: PullRequest,
        files_changed: list[str] | None = None,
        commits: list[PullRequestCommit] | None = None,
    ) -> str:
        """Generate the comment posted to every related Jira issue.

        Args:
            pr: The merged pull request
            files_changed: Paths of files changed by the pull request
            commits: Commits included in the pull request

        Returns:
            Plain text comment ready for posting to Jira
        """
        lines = [
            f"Pull request merged by @{pr.author}",
            "",
            "PR Title:",
            pr.title or "(no title)",
            "",
            "PR Description:",
            pr.body or "(no description)",
        ]

        if files_changed:
            lines.append("")
            lines.append("Files Changed:")
            lines.extend(f"- {path}" for path in files_changed)

        if commits:
            lines.append("")
            lines.append("Commits:")
            lines.extend(
                f"- {commit.short_sha} {commit.summary}".rstrip() for commit in commits
            )

        return "\n".join(lines).strip()

    def build_dry_run_summary(self, report: SyncReport) -> str:
        """Generate a summary of what a real run would post.

        Args:
            report: Report of a dry run

        Returns:
            Formatted summary text for console output
        """
        if not report.target_keys:
            return "No Jira issues to comment on."

        lines = [f"Would comment on {len(report.target_keys)} Jira issue(s):"]
        for key in report.target_keys:
            origin = "" if key in report.seed_keys else " (related)"
            lines.append(f"  - {key}{origin}")

        if report.comment:
            lines.append("")
            lines.append("**Jira Comment Preview:**")
            lines.append("---")
            lines.append(report.comment)
            lines.append("---")

        return "\n".join(lines)

    def build_execution_summary(self, report: SyncReport) -> str:
        """Generate a summary of publish results.

        Args:
            report: Report of a completed or failed run

        Returns:
            Formatted summary text for console output
        """
        lines = []

        if report.delivered:
            lines.append(f"✅ Commented on {len(report.delivered)} Jira issue(s):")
            for outcome in report.delivered:
                lines.append(f"  - {outcome.key}: comment {outcome.comment_id}")
            lines.append("")

        if report.failed:
            lines.append(
                f"❌ Failed to comment on {len(report.failed)} Jira issue(s):"
            )
            for outcome in report.failed:
                status = outcome.status_code if outcome.status_code else "error"
                lines.append(f"  - {outcome.key} ({status}): {outcome.message}")
            lines.append("")

        if not report.outcomes:
            lines.append("No Jira issues processed.")

        return "\n".join(lines)
