import os
from pathlib import Path
from typing import Optional, Union

import yaml

DEFAULT_CONFIG: dict = {
    "users": [],  # review authors whose stale reviews may be minimized; empty = everyone
    "dry_run": False,
}


def parse_users(value: Union[str, list, None]) -> list[str]:
    """Normalize an allow-list of review authors.

    Accepts a comma-separated string (the GitHub Action input form) or a list
    from YAML. Entries are stripped and empty ones dropped; order is kept.
    """
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def load_config(config_path: str = ".prtidy.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtidy.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "users": list(DEFAULT_CONFIG["users"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["users"] = parse_users(config.get("users"))

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
