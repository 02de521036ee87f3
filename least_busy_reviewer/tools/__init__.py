"""GitHub access for least-busy-reviewer."""

from least_busy_reviewer.tools.github import GitHubGateway
from least_busy_reviewer.tools.rate_limit import RateLimitCoordinator

__all__ = [
    "GitHubGateway",
    "RateLimitCoordinator",
]
