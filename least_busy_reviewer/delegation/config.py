"""
Configuration for reviewer selection.

Read once from the environment (GitHub Action inputs arrive as INPUT_* variables)
and passed around as an immutable value.
"""

import json
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from least_busy_reviewer.delegation.models import ScoringWeights, TeamRoster
from least_busy_reviewer.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"


class ReviewerConfig(BaseModel):
    """Everything a selection run needs besides the PR author."""
    model_config = ConfigDict(frozen=True)

    github_token: str
    team: TeamRoster
    weights: ScoringWeights = ScoringWeights()
    repo_owner: str
    repo_name: str
    api_url: str = DEFAULT_API_URL
    max_attempts: int = 5
    max_concurrency: int = 4
    dry_run: bool = False

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ReviewerConfig":
        """
        Build the config from environment variables.

        Raises:
            ConfigurationError: if a required value is missing or a number fails to parse
        """
        env = os.environ if env is None else env

        token = env.get("INPUT_GITHUB_TOKEN") or env.get("GITHUB_TOKEN")
        if not token:
            raise ConfigurationError("Missing INPUT_GITHUB_TOKEN")

        raw_team = env.get("INPUT_TEAM_MEMBERS")
        if raw_team is None:
            raise ConfigurationError("Missing INPUT_TEAM_MEMBERS")
        team = TeamRoster.parse(raw_team)
        if not team.members:
            raise ConfigurationError("INPUT_TEAM_MEMBERS does not list any logins")

        repository = env.get("GITHUB_REPOSITORY")
        if not repository:
            raise ConfigurationError("Missing GITHUB_REPOSITORY")
        owner, _, name = repository.partition("/")
        if not owner or not name or "/" in name:
            raise ConfigurationError(f"Invalid GITHUB_REPOSITORY format: {repository!r}")
        owner = env.get("GITHUB_REPOSITORY_OWNER") or owner

        try:
            weights = ScoringWeights(
                open_pr_weight=_number(env, "INPUT_WEIGHT_OPEN_PRS", "10"),
                lines_per_100_weight=_number(env, "INPUT_WEIGHT_LINES_PER_100", "1"),
                recent_review_weight=_number(env, "INPUT_WEIGHT_RECENT_REVIEWS", "3"),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Weights must be non-negative: {e}") from e

        max_attempts = int(_number(env, "INPUT_MAX_ATTEMPTS", "5"))
        max_concurrency = int(_number(env, "INPUT_MAX_CONCURRENCY", "4"))
        if max_attempts < 1 or max_concurrency < 1:
            raise ConfigurationError("INPUT_MAX_ATTEMPTS and INPUT_MAX_CONCURRENCY must be at least 1")

        return cls(
            github_token=token,
            team=team,
            weights=weights,
            repo_owner=owner,
            repo_name=name,
            api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            max_attempts=max_attempts,
            max_concurrency=max_concurrency,
            dry_run=_flag(env.get("INPUT_DRY_RUN", "")),
        )


class PullRequestEvent(BaseModel):
    """The triggering pull_request event payload, reduced to what we use."""
    model_config = ConfigDict(frozen=True)

    number: int
    author: Optional[str] = None

    @classmethod
    def from_file(cls, path: str | Path) -> "PullRequestEvent":
        """Read GITHUB_EVENT_PATH."""
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Could not read event file {path}: {e}") from e
        return cls.from_payload(payload)

    @classmethod
    def from_payload(cls, payload: dict) -> "PullRequestEvent":
        pr = payload.get("pull_request") or {}
        number = pr.get("number")
        if not isinstance(number, int):
            raise ConfigurationError("Could not extract PR number from event")
        author = (pr.get("user") or {}).get("login")
        return cls(number=number, author=author or None)


def _number(env: Mapping[str, str], key: str, default: str) -> float:
    raw = env.get(key) or default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid {key}: {raw!r}") from None


def _flag(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")
