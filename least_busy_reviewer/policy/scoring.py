"""
Workload scoring.

Score = open PRs * open_pr_weight
      + (lines in review / 100) * lines_per_100_weight
      + recent reviews * recent_review_weight

Lower score = less busy = better reviewer candidate.
"""

from least_busy_reviewer.delegation.models import ScoringWeights, WorkloadSnapshot


def score_breakdown(snapshot: WorkloadSnapshot, weights: ScoringWeights) -> dict[str, float]:
    """Weighted contribution of each workload factor."""
    return {
        "open_prs": snapshot.open_pr_count * weights.open_pr_weight,
        # Real division so a 50-line PR still counts for half a hundred
        "lines": (snapshot.total_lines / 100) * weights.lines_per_100_weight,
        "recent_reviews": snapshot.recent_review_count * weights.recent_review_weight,
    }


def calculate_workload_score(snapshot: WorkloadSnapshot, weights: ScoringWeights) -> float:
    """
    Calculate the workload score for one candidate.

    Pure function of its inputs: no I/O, no state, never fails.
    """
    parts = score_breakdown(snapshot, weights)
    return parts["open_prs"] + parts["lines"] + parts["recent_reviews"]


def format_score(login: str, snapshot: WorkloadSnapshot, weights: ScoringWeights) -> str:
    """One-line explanation of a candidate's score, for logs."""
    score = calculate_workload_score(snapshot, weights)
    return (
        f"@{login}: {score:.2f} points "
        f"(Open: {snapshot.open_pr_count} × {weights.open_pr_weight:g}, "
        f"Lines: {snapshot.total_lines} ÷ 100 × {weights.lines_per_100_weight:g}, "
        f"Recent: {snapshot.recent_review_count} × {weights.recent_review_weight:g})"
    )
