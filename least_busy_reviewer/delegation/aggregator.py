"""
Workload aggregation.

Builds a WorkloadSnapshot for one candidate from:
- open PRs where they are a requested reviewer (count + lines in review)
- reviews they submitted inside the recent window

The gateway is anything with the GitHubGateway read methods
(open_pull_requests, changed_lines, reviews_by).
"""

import logging
from datetime import datetime, timedelta

from least_busy_reviewer.delegation.models import WorkloadSnapshot
from least_busy_reviewer.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)


async def count_open_reviews(gateway, login: str) -> tuple[int, int]:
    """
    Walk every page of open PRs.

    Returns:
        (number of open PRs requesting `login`, total changed lines across them)
    """
    open_prs = 0
    total_lines = 0
    async for page in gateway.open_pull_requests():
        for pr in page:
            if login not in pr.requested_reviewers:
                continue
            lines = pr.changed_lines
            if lines is None:
                lines = await gateway.changed_lines(pr.number)
            open_prs += 1
            total_lines += lines
            logger.debug(f"PR #{pr.number}: @{login} requested ({lines} lines)")
    return open_prs, total_lines


async def count_recent_reviews(gateway, login: str, since: datetime) -> int:
    """Count reviews `login` submitted at or after `since`."""
    count = 0
    async for page in gateway.reviews_by(login, since):
        count += sum(1 for event in page if event.reviewer == login and event.submitted_at >= since)
    return count


async def aggregate_workload(gateway, login: str, since: datetime) -> WorkloadSnapshot:
    """
    Build the workload snapshot for one candidate.

    Either every page of both queries is consumed or an exception propagates;
    a partial snapshot is never returned.

    Raises:
        RateLimited, GatewayUnavailable, NotFound: from the gateway
    """
    if not login:
        raise ConfigurationError("Candidate login must be a non-empty string")

    open_prs, total_lines = await count_open_reviews(gateway, login)
    recent = await count_recent_reviews(gateway, login, since)

    snapshot = WorkloadSnapshot(
        open_pr_count=open_prs,
        total_lines=total_lines,
        recent_review_count=recent,
    )
    logger.info(f"@{login}: {open_prs} open reviews, {total_lines} lines, {recent} reviews since {since:%Y-%m-%d}")
    return snapshot
