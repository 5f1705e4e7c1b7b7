"""Loading of GitHub Actions ``pull_request`` event payloads."""

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .github_client.models import GitHubUser, PullRequest


class EventPayloadError(ValueError):
    """Raised when the event payload cannot be read or has no pull request."""


def _section(parent: dict[str, Any], name: str) -> dict[str, Any]:
    value = parent.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise EventPayloadError(f"Event payload field {name!r} is not an object")
    return value


def pull_request_from_payload(payload: dict[str, Any]) -> PullRequest:
    """Build a PullRequest from a decoded ``pull_request`` event payload."""
    pr = payload.get("pull_request")
    if not isinstance(pr, dict):
        raise EventPayloadError("Event payload does not contain a pull_request")

    org = repo = None
    repository = _section(payload, "repository")
    full_name = repository.get("full_name")
    if isinstance(full_name, str) and "/" in full_name:
        org, repo = full_name.split("/", 1)

    user = _section(pr, "user")
    head = _section(pr, "head")

    try:
        return PullRequest(
            number=pr["number"],
            title=pr.get("title"),
            body=pr.get("body"),
            head_ref=head.get("ref"),
            merged=bool(pr.get("merged")),
            user=GitHubUser(login=user["login"], id=user.get("id"))
            if user.get("login")
            else None,
            org=org,
            repo=repo,
        )
    except KeyError as e:
        raise EventPayloadError(f"Pull request payload is missing {e}") from e
    except ValidationError as e:
        raise EventPayloadError(f"Pull request payload is invalid: {e}") from e


def load_pull_request_event(path: str | Path | None = None) -> PullRequest:
    """Load the pull request from a GitHub event file.

    Args:
        path: Event file path. If None, reads GITHUB_EVENT_PATH.

    Raises:
        EventPayloadError: If the file is missing, unreadable or not a
            pull request event
    """
    event_path = path or os.getenv("GITHUB_EVENT_PATH")
    if not event_path:
        raise EventPayloadError(
            "No event file given. Set GITHUB_EVENT_PATH or pass --event-path."
        )

    event_file = Path(event_path)
    if not event_file.exists():
        raise EventPayloadError(f"Event file {event_file} does not exist")

    try:
        with open(event_file) as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise EventPayloadError(f"Could not read event file {event_file}: {e}") from e

    if not isinstance(payload, dict):
        raise EventPayloadError("Event payload is not a JSON object")

    return pull_request_from_payload(payload)
