"""Pydantic models for configuration schema."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.reaction import EventType, ReactionMap


def _empty_to_none(v: str | None) -> str | None:
    """Treat blank values (e.g. an unset ``${VAR:-}``) as not configured."""
    if v is None or not v.strip():
        return None
    return v.strip()


class SlackConfig(BaseModel):
    """Slack-specific configuration."""

    bot_token: str | None = None
    channel_id: str | None = None
    history_limit: int = Field(100, ge=1, le=1000)
    reactions: dict[str, str] = {}
    link_title_events: list[EventType] = []

    @field_validator("bot_token", "channel_id", mode="before")
    @classmethod
    def blank_is_unset(cls, v: str | None) -> str | None:
        return _empty_to_none(v)

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str | None) -> str | None:
        """Validate Slack bot token format."""
        if v is not None and not v.startswith("xoxb-"):
            raise ValueError("Bot token must start with xoxb-")
        return v

    @field_validator("reactions")
    @classmethod
    def validate_reactions(cls, v: dict[str, str]) -> dict[str, str]:
        """Reject unknown events and duplicate symbols early."""
        ReactionMap.from_names(v)
        return v

    def reaction_map(self) -> ReactionMap:
        """Return the configured event -> reaction table."""
        return ReactionMap.from_names(self.reactions)


class GitHubConfig(BaseModel):
    """GitHub-specific configuration."""

    token: str | None = None
    repos: list[str] = []
    gh_path: str | None = None
    max_pages: int = Field(10, ge=1, le=100)
    command_timeout: int = Field(30, ge=5, le=300)

    @field_validator("token", mode="before")
    @classmethod
    def blank_is_unset(cls, v: str | None) -> str | None:
        return _empty_to_none(v)

    @field_validator("repos")
    @classmethod
    def validate_repos(cls, v: list[str]) -> list[str]:
        """Validate repository names."""
        from ..utils.security import validate_repo_name

        for repo in v:
            if not validate_repo_name(repo):
                raise ValueError(f"Invalid repository format: {repo}. Expected: owner/repo")
        return v


class AwardsConfig(BaseModel):
    """Weekly awards configuration."""

    window_days: int = Field(7, ge=1, le=90)
    top_reviewers: int = Field(3, ge=1, le=10)
    channel_id: str | None = None
    # GitHub login -> Slack member id; empty ids mean "known but unmapped"
    user_mentions: dict[str, str] = {}

    @field_validator("channel_id", mode="before")
    @classmethod
    def blank_is_unset(cls, v: str | None) -> str | None:
        return _empty_to_none(v)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"


class BotConfig(BaseSettings):
    """Root configuration for the PR review bot."""

    slack: SlackConfig = SlackConfig()
    github: GitHubConfig = GitHubConfig()
    awards: AwardsConfig = AwardsConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
    )

    @property
    def awards_channel_id(self) -> str | None:
        """Channel the awards are posted to."""
        return self.awards.channel_id or self.slack.channel_id
