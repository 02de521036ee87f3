"""Scoring policy for least-busy-reviewer."""

from least_busy_reviewer.policy.scoring import calculate_workload_score, score_breakdown, format_score

__all__ = [
    "calculate_workload_score",
    "score_breakdown",
    "format_score",
]
