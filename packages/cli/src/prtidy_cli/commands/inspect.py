"""inspect command — show every review on a pull request and its minimize decision."""

from __future__ import annotations

import click
import requests
from github import GithubException
from rich.console import Console
from rich.table import Table

from prtidy_cli.target import load_command_config, resolve_target
from prtidy_core.minimizer import load_reviews
from prtidy_core.reviews import classify_reviews

console = Console()

_decision_style = {
    "keep-latest": "green",
    "minimize": "yellow",
    "already-minimized": "dim",
    "unresolved": "red",
    "not-allowed": "dim",
}


@click.command("inspect")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Defaults to GITHUB_REPOSITORY.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number.")
@click.option("--users", default=None, help="Comma-separated review authors to act on. Overrides config file.")
@click.pass_context
def inspect_cmd(ctx, repo: str | None, pr_number: int | None, users: str | None):
    """Show reviews on a pull request and what `minimize` would do with each.

    Read-only: nothing is changed on GitHub.
    """
    config = load_command_config(ctx, users)
    client, ref = resolve_target(repo, pr_number)

    try:
        reviews = load_reviews(client, ref.owner, ref.repo, ref.number)
    except (GithubException, requests.RequestException) as e:
        raise click.ClickException(f"Could not fetch reviews for {ref.full_name}#{ref.number}: {e}")

    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return

    table = Table(title=f"Reviews — {ref.full_name}#{ref.number}", show_header=True, header_style="bold cyan")
    table.add_column("Review", style="bold")
    table.add_column("Author")
    table.add_column("Created")
    table.add_column("Resolved", justify="right")
    table.add_column("Minimized")
    table.add_column("Decision", no_wrap=True)

    for review, decision in classify_reviews(reviews, config["users"]):
        resolved = sum(1 for t in review.threads if t.is_resolved)
        style = _decision_style.get(decision, "white")
        table.add_row(
            review.review_id,
            review.author,
            review.created_at[:16].replace("T", " "),
            f"{resolved}/{len(review.threads)}",
            "yes" if review.is_minimized else "no",
            f"[{style}]{decision}[/{style}]",
        )

    console.print(table)
