"""Pull request resolution from explicit arguments or the GitHub Actions environment.

Inside a workflow run, GITHUB_REPOSITORY names the repository and
GITHUB_EVENT_PATH points at the JSON payload of the triggering event. The PR
number is ``pull_request.number`` for pull_request* events and
``issue.number`` for issue_comment events on a pull request.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_EVENTS = (
    "pull_request",
    "pull_request_review",
    "pull_request_review_comment",
    "issue_comment",
)


class PullRequestContextError(ValueError):
    """Raised when the repository or pull request number cannot be determined."""


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def split_repo(full_name: str) -> tuple[str, str]:
    owner, sep, name = (full_name or "").strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise PullRequestContextError(f"Invalid repository {full_name!r}; expected owner/name.")
    return owner, name


def load_event_payload(event_path: str | None) -> dict:
    """Read the triggering event payload, or return {} if there is none."""
    if not event_path:
        return {}
    path = Path(event_path)
    if not path.exists():
        logger.debug("Event payload %s does not exist", event_path)
        return {}
    with open(path, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise PullRequestContextError(f"Could not parse event payload {event_path}: {e}") from e
    return payload if isinstance(payload, dict) else {}


def pr_number_from_payload(payload: dict) -> int | None:
    for key in ("pull_request", "issue"):
        number = (payload.get(key) or {}).get("number")
        if number:
            return int(number)
    return None


def resolve_pull_request(
    repo: str | None = None,
    pr_number: int | None = None,
    environ: dict | None = None,
) -> PullRequestRef:
    """Resolve the target pull request.

    Explicit ``repo``/``pr_number`` win; otherwise GITHUB_REPOSITORY and the
    event payload are used.
    """
    env = os.environ if environ is None else environ

    full_name = repo or env.get("GITHUB_REPOSITORY")
    if not full_name:
        raise PullRequestContextError("Could not determine repository. Pass --repo or set GITHUB_REPOSITORY.")
    owner, name = split_repo(full_name)

    if pr_number is None:
        pr_number = pr_number_from_payload(load_event_payload(env.get("GITHUB_EVENT_PATH")))

    if not pr_number:
        raise PullRequestContextError(
            "Could not determine PR number. This action must be triggered by a "
            + ", ".join(SUPPORTED_EVENTS[:-1])
            + f", or {SUPPORTED_EVENTS[-1]} event."
        )

    return PullRequestRef(owner=owner, repo=name, number=pr_number)
