"""
GitHub Action entrypoint.

Usage:
    python -m least_busy_reviewer.action

Reads INPUT_* variables and GITHUB_EVENT_PATH, selects the least busy reviewer
and requests their review on the triggering PR.
"""

import asyncio
import logging
import os
import sys
from typing import Mapping, Optional

from dotenv import load_dotenv

from least_busy_reviewer.delegation.config import PullRequestEvent, ReviewerConfig
from least_busy_reviewer.delegation.models import AssignmentResult
from least_busy_reviewer.delegation.selector import select_reviewer
from least_busy_reviewer.exceptions import ConfigurationError, ReviewerSelectionError
from least_busy_reviewer.tools.github import GitHubGateway

logger = logging.getLogger(__name__)

RANK_MARKERS = {0: "🥇", 1: "🥈", 2: "🥉"}


def log_rankings(result: AssignmentResult):
    """Log every candidate, lowest score first."""
    logger.info("Final rankings (lowest score = least busy):")
    for i, candidate in enumerate(result.ranked()):
        marker = RANK_MARKERS.get(i, "  ")
        snapshot = candidate.snapshot
        logger.info(f"{marker} #{i + 1} @{candidate.login}: {candidate.score:.2f} points")
        logger.info(
            f"       {snapshot.open_pr_count} open PRs, {snapshot.total_lines} lines, "
            f"{snapshot.recent_review_count} recent reviews"
        )


def write_output(reviewer: Optional[str], env: Mapping[str, str]):
    """Append `reviewer=<login>` to $GITHUB_OUTPUT when running inside Actions."""
    path = env.get("GITHUB_OUTPUT")
    if not path:
        return
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"reviewer={reviewer or ''}\n")


async def run(env: Optional[Mapping[str, str]] = None, gateway: Optional[GitHubGateway] = None) -> AssignmentResult:
    """
    Select and assign a reviewer for the PR in GITHUB_EVENT_PATH.

    Raises:
        ReviewerSelectionError: configuration or GitHub failure; nothing is assigned
    """
    env = os.environ if env is None else env
    config = ReviewerConfig.from_env(env)

    event_path = env.get("GITHUB_EVENT_PATH")
    if not event_path:
        raise ConfigurationError("Missing GITHUB_EVENT_PATH")
    event = PullRequestEvent.from_file(event_path)

    logger.info(f"Repository: {config.repository}")
    logger.info(f"PR Number: {event.number}")
    logger.info(f"Team Members: {list(config.team.members)}")
    logger.info(
        f"Weights: open PRs {config.weights.open_pr_weight:g}, "
        f"lines per 100 {config.weights.lines_per_100_weight:g}, "
        f"recent reviews {config.weights.recent_review_weight:g}"
    )

    github = gateway or GitHubGateway.from_config(config)
    try:
        pr_author = event.author
        if not pr_author:
            pr = await github.get_pull_request(event.number)
            pr_author = pr.author
        logger.info(f"Author: @{pr_author}")

        result = await select_reviewer(config, pr_author, gateway=github)
        if result.scores:
            log_rankings(result)

        if not result.is_assigned:
            logger.warning("No eligible reviewer - nothing assigned")
        elif config.dry_run:
            logger.info(f"Dry run: would assign @{result.login} to PR #{event.number}")
        else:
            logger.info(f"Assigning @{result.login} to PR #{event.number}...")
            await github.request_reviewers(event.number, [result.login])
            logger.info(f"Done! PR #{event.number} has been assigned to @{result.login}")
    finally:
        if gateway is None:
            await github.aclose()

    write_output(result.login, env)
    return result


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        asyncio.run(run())
    except ReviewerSelectionError as e:
        logger.error(f"Reviewer assignment failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
