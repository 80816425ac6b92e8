"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from .schema import BotConfig

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} and ${VAR_NAME:-default} patterns with environment values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable without a default is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name, default = match.group(1), match.group(2)
        value = os.environ.get(var_name)
        if value is None:
            if default is None:
                raise ValueError(f"Environment variable {var_name} not found")
            return default
        return value

    return ENV_VAR_PATTERN.sub(replacer, text)


def config_from_env() -> dict[str, Any]:
    """
    Build a raw config dict from the plain variables the CI workflows export.

    Used when no configuration file is given. ``REPOS`` is a comma-separated
    list of ``owner/repo`` names.
    """
    env = os.environ
    repos = [r.strip() for r in env.get("REPOS", "").split(",") if r.strip()]
    return {
        "slack": {
            "bot_token": env.get("SLACK_BOT_TOKEN"),
            "channel_id": env.get("SLACK_CHANNEL_ID"),
        },
        "github": {
            "token": env.get("GITHUB_TOKEN"),
            "repos": repos,
        },
    }


def load_config(path: Path | None = None) -> BotConfig:
    """
    Load configuration from a YAML file, or from the environment if no file is given.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated BotConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if path is None:
        return BotConfig.model_validate(config_from_env())

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    yaml_with_env = substitute_env_vars(raw_yaml)

    config_dict = yaml.safe_load(yaml_with_env) or {}

    return BotConfig.model_validate(config_dict)
