"""
Reviewer selection algorithm.

Picks the least busy teammate for a pull request:
1. Drop the PR author from the roster
2. Aggregate every remaining candidate's workload concurrently
3. Score each snapshot and pick the minimum (ties go to roster order)
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from least_busy_reviewer.delegation.aggregator import RECENT_WINDOW, aggregate_workload
from least_busy_reviewer.delegation.config import ReviewerConfig
from least_busy_reviewer.delegation.models import (
    AssignmentResult,
    CandidateScore,
    ScoringWeights,
    TeamRoster,
    score_key,
)
from least_busy_reviewer.policy.scoring import calculate_workload_score, format_score
from least_busy_reviewer.tools.github import GitHubGateway

logger = logging.getLogger(__name__)


def eligible_candidates(team: TeamRoster, pr_author: str) -> TeamRoster:
    """Roster minus the PR author."""
    return team.without(pr_author)


async def score_candidates(
    gateway,
    candidates: TeamRoster,
    weights: ScoringWeights,
    since: datetime,
) -> list[CandidateScore]:
    """
    Aggregate and score every candidate, one task per candidate.

    Waits for all tasks before returning. If any task fails, the rest are
    cancelled and the failure (earliest in roster order) is raised.

    Returns:
        CandidateScore list in roster order
    """
    if not candidates.members:
        return []

    tasks = {
        login: asyncio.create_task(aggregate_workload(gateway, login, since), name=f"workload:{login}")
        for login in candidates.members
    }
    try:
        await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        for login, task in tasks.items():
            if task.done() and not task.cancelled() and task.exception() is not None:
                logger.error(f"Workload aggregation failed for @{login}: {task.exception()}")
                raise task.exception()
    finally:
        pending = [task for task in tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    scores = []
    for login, task in tasks.items():
        snapshot = task.result()
        logger.info(f"  {format_score(login, snapshot, weights)}")
        scores.append(CandidateScore(
            login=login,
            snapshot=snapshot,
            score=calculate_workload_score(snapshot, weights),
        ))
    return scores


def pick_least_busy(scores: list[CandidateScore]) -> Optional[CandidateScore]:
    """Lowest score wins; on a tie the earliest entry (roster order) wins."""
    if not scores:
        return None
    _, best = min(enumerate(scores), key=lambda pair: (score_key(pair[1].score), pair[0]))
    return best


async def select_reviewer(
    config: ReviewerConfig,
    pr_author: str,
    gateway: Optional[GitHubGateway] = None,
    now: Optional[datetime] = None,
) -> AssignmentResult:
    """
    Select the least busy reviewer for a PR.

    Args:
        config: Immutable run configuration (roster, weights, repository)
        pr_author: Login of the PR author, never selected
        gateway: Data source; a GitHubGateway is built from config when omitted
        now: Reference time for the recent-review window

    Returns:
        AssignmentResult with the chosen login (or NONE_AVAILABLE) and every score

    Raises:
        RateLimited, GatewayUnavailable, NotFound: aggregation failed for any candidate
    """
    candidates = eligible_candidates(config.team, pr_author)
    if not candidates.members:
        logger.warning("No eligible reviewers found (is everyone except the author on the team list?)")
        return AssignmentResult.none_available()

    since = (now or datetime.now(timezone.utc)) - RECENT_WINDOW
    logger.info(f"Calculating scores for {len(candidates)} candidates (author @{pr_author} excluded)")

    if gateway is None:
        async with GitHubGateway.from_config(config) as github:
            scores = await score_candidates(github, candidates, config.weights, since)
    else:
        scores = await score_candidates(gateway, candidates, config.weights, since)

    best = pick_least_busy(scores)
    logger.info(f"Best choice: @{best.login} ({best.score:.2f} points)")
    return AssignmentResult.assigned(best.login, scores)
