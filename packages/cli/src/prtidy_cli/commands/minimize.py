"""minimize command — hide older, fully resolved reviews on a pull request."""

from __future__ import annotations

import click
import requests
from github import GithubException
from rich.console import Console

from prtidy_cli.target import load_command_config, resolve_target, write_action_outputs
from prtidy_core.minimizer import run_minimize

console = Console()


@click.command("minimize")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to GITHUB_REPOSITORY.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the PR of the triggering GitHub event.",
)
@click.option(
    "--users",
    default=None,
    envvar="INPUT_USERS",
    help="Comma-separated review authors to act on. Omit for all authors. Overrides config file.",
)
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Print which reviews would be minimized without changing anything.",
)
@click.pass_context
def minimize_cmd(ctx, repo: str | None, pr_number: int | None, users: str | None, dry_run: bool):
    """Minimize stale reviews on a pull request.

    For every reviewer, the most recent review always stays visible. Older
    reviews are minimized once all of their threads are resolved.

    \b
    Environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
      GITHUB_REPOSITORY    owner/name, set by GitHub Actions
      GITHUB_EVENT_PATH    event payload, set by GitHub Actions
      GITHUB_OUTPUT        receives minimized-count and failed-count
    """
    config = load_command_config(ctx, users, dry_run or None)
    client, ref = resolve_target(repo, pr_number)

    try:
        summary = run_minimize(
            client,
            ref.owner,
            ref.repo,
            ref.number,
            users=config["users"],
            dry_run=config["dry_run"],
        )
    except (GithubException, requests.RequestException) as e:
        raise click.ClickException(f"Could not fetch reviews for {ref.full_name}#{ref.number}: {e}")

    write_action_outputs(
        {
            "minimized-count": summary.minimized_count,
            "failed-count": summary.failed_count,
        }
    )
