"""Minimize stale, fully resolved reviews on a pull request."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import requests
from github import GithubException
from rich.console import Console

from prtidy_core.gh.pull_request import GraphQLClient, fetch_pull_request_data, minimize_review
from prtidy_core.models import Review
from prtidy_core.reviews import build_review_list, find_reviews_to_minimize

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class MinimizeSummary:
    """Outcome of one pass over a pull request.

    ``review_ids`` are the reviews selected for minimizing. In dry-run mode
    nothing is sent, so ``minimized`` and ``failed`` stay empty.
    """

    repo: str
    pr_number: int
    dry_run: bool = False
    reviews: list[Review] = field(default_factory=list)
    review_ids: list[str] = field(default_factory=list)
    minimized: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def minimized_count(self) -> int:
        return len(self.minimized)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def authors(self) -> set[str]:
        return {r.author for r in self.reviews}


def load_reviews(client: GraphQLClient, owner: str, repo: str, pr_number: int) -> list[Review]:
    """Fetch a PR's threads and reviews and assemble the canonical review list."""
    data = fetch_pull_request_data(client, owner, repo, pr_number)
    console.print(f"Found {len(data.threads)} review threads across {len(data.reviews)} reviews")
    logger.info("Found %d review threads across %d reviews", len(data.threads), len(data.reviews))
    return build_review_list(data.threads, data.reviews)


def minimize_all(client: GraphQLClient, review_ids: Sequence[str]) -> tuple[list[str], list[str]]:
    """Minimize each review in turn. Returns (minimized, failed) ids.

    A failure is logged and counted; it never stops the remaining calls.
    """
    minimized: list[str] = []
    failed: list[str] = []
    for review_id in review_ids:
        try:
            minimize_review(client, review_id)
        except (GithubException, requests.RequestException) as e:
            failed.append(review_id)
            logger.warning("Failed to minimize review %s: %s", review_id, e)
            console.print(f"  [red]Failed to minimize review {review_id}: {e}[/red]")
            continue
        minimized.append(review_id)
        logger.debug("Minimized review %s", review_id)
    return minimized, failed


def run_minimize(
    client: GraphQLClient,
    owner: str,
    repo: str,
    pr_number: int,
    users: Sequence[str] = (),
    dry_run: bool = False,
) -> MinimizeSummary:
    """Run the full pipeline for one pull request.

    Fetch errors propagate to the caller; errors while minimizing are isolated
    per review and reported in the summary.
    """
    allowed = list(users)
    console.print(f"Allowed users: {', '.join(allowed) if allowed else 'all users'}")
    logger.info("Allowed users: %s", ", ".join(allowed) if allowed else "all users")
    console.print(f"Processing PR #{pr_number} in {owner}/{repo}")
    logger.info("Processing PR #%d in %s/%s", pr_number, owner, repo)

    summary = MinimizeSummary(repo=f"{owner}/{repo}", pr_number=pr_number, dry_run=dry_run)
    summary.reviews = load_reviews(client, owner, repo, pr_number)
    console.print(f"Found {len(summary.reviews)} reviews from {len(summary.authors)} users")
    logger.info("Found %d reviews from %d users", len(summary.reviews), len(summary.authors))

    summary.review_ids = find_reviews_to_minimize(summary.reviews, allowed)
    console.print(f"Found {len(summary.review_ids)} reviews to minimize")
    logger.info("Found %d reviews to minimize: %s", len(summary.review_ids), summary.review_ids)

    if dry_run:
        for review_id in summary.review_ids:
            console.print(f"  [dim]Would minimize review {review_id}[/dim]")
        console.print(f"[bold]Dry run complete. {len(summary.review_ids)} review(s) would be minimized.[/bold]")
        return summary

    summary.minimized, summary.failed = minimize_all(client, summary.review_ids)
    logger.info("Done: minimized %d reviews, %d failed", summary.minimized_count, summary.failed_count)
    style = "yellow" if summary.failed else "green"
    console.print(
        f"[{style}]Done: minimized {summary.minimized_count} reviews, {summary.failed_count} failed[/{style}]"
    )
    return summary
