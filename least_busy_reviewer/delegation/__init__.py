"""Reviewer assignment - roster, workload models and configuration."""

from least_busy_reviewer.delegation.models import (
    AssignmentResult,
    AssignmentStatus,
    CandidateScore,
    ScoringWeights,
    TeamRoster,
    WorkloadSnapshot,
)
from least_busy_reviewer.delegation.config import ReviewerConfig, PullRequestEvent

__all__ = [
    "AssignmentResult",
    "AssignmentStatus",
    "CandidateScore",
    "ScoringWeights",
    "TeamRoster",
    "WorkloadSnapshot",
    "ReviewerConfig",
    "PullRequestEvent",
]
