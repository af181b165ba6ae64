"""Shared setup for commands that talk to a pull request."""

from __future__ import annotations

import os

import click

from prtidy_core.context import PullRequestContextError, PullRequestRef, resolve_pull_request
from prtidy_core.gh.pull_request import GithubGraphQLClient, get_client


def load_command_config(ctx: click.Context, users: str | None, dry_run: bool | None = None) -> dict:
    from prtidy_core.config import load_config

    config_path = (ctx.obj or {}).get("config_path", ".prtidy.yml")
    # An empty --users (or INPUT_USERS="") leaves the config file value in place.
    if users is not None and not users.strip():
        users = None
    return load_config(config_path, cli_overrides={"users": users, "dry_run": dry_run})


def resolve_target(repo: str | None, pr_number: int | None) -> tuple[GithubGraphQLClient, PullRequestRef]:
    """Return a GraphQL client and the pull request to act on, or fail with a usage error."""
    from prtidy_cli.auth import resolve_github_token

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    try:
        ref = resolve_pull_request(repo=repo, pr_number=pr_number)
    except PullRequestContextError as e:
        raise click.UsageError(str(e))

    return get_client(token), ref


def write_action_outputs(outputs: dict, output_path: str | None = None) -> bool:
    """Append ``name=value`` lines to the GitHub Actions output file.

    Returns False when not running under Actions (no GITHUB_OUTPUT).
    """
    output_path = output_path or os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with open(output_path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")
    return True
