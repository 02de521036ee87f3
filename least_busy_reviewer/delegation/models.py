"""Data models for reviewer assignment."""

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Scores equal to this many decimals tie (0.1 * 3 vs 0.3).
SCORE_DIGITS = 9


def score_key(score: float) -> float:
    return round(score, SCORE_DIGITS)


class TeamRoster(BaseModel):
    """Ordered, de-duplicated list of candidate logins."""
    model_config = ConfigDict(frozen=True)

    members: tuple[str, ...] = ()

    @field_validator("members", mode="before")
    @classmethod
    def _dedupe(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        seen = set()
        members = []
        for raw in value or ():
            login = str(raw).strip().lstrip("@")
            if login and login not in seen:
                seen.add(login)
                members.append(login)
        return tuple(members)

    @classmethod
    def parse(cls, raw: str | Iterable[str]) -> "TeamRoster":
        """Build a roster from a comma-separated string or an iterable of logins."""
        return cls(members=raw)

    def without(self, login: str) -> "TeamRoster":
        """Roster with `login` removed (case-sensitive exact match)."""
        return TeamRoster(members=[m for m in self.members if m != login])

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, login: object) -> bool:
        return login in self.members


class ScoringWeights(BaseModel):
    """Coefficients applied to each workload factor."""
    model_config = ConfigDict(frozen=True)

    open_pr_weight: float = Field(default=10.0, ge=0)
    lines_per_100_weight: float = Field(default=1.0, ge=0)
    recent_review_weight: float = Field(default=3.0, ge=0)


class PullRequestRef(BaseModel):
    """An open pull request as seen by the aggregator."""
    model_config = ConfigDict(frozen=True)

    number: int
    author: str
    requested_reviewers: frozenset[str] = frozenset()
    changed_lines: Optional[int] = None  # additions + deletions, None until fetched


class ReviewEvent(BaseModel):
    """A submitted review."""
    model_config = ConfigDict(frozen=True)

    reviewer: str
    submitted_at: datetime
    pr_number: Optional[int] = None
    state: Optional[str] = None  # APPROVED, CHANGES_REQUESTED, COMMENTED


class WorkloadSnapshot(BaseModel):
    """Current review load for one candidate."""
    model_config = ConfigDict(frozen=True)

    open_pr_count: int = Field(default=0, ge=0)
    total_lines: int = Field(default=0, ge=0)
    recent_review_count: int = Field(default=0, ge=0)


class CandidateScore(BaseModel):
    """Scored candidate."""
    model_config = ConfigDict(frozen=True)

    login: str
    snapshot: WorkloadSnapshot
    score: float = Field(ge=0)


class AssignmentStatus(str, Enum):
    """Outcome of a selection run."""
    ASSIGNED = "assigned"
    NONE_AVAILABLE = "none_available"


class AssignmentResult(BaseModel):
    """The chosen reviewer plus every candidate's score for rendering."""
    status: AssignmentStatus
    login: Optional[str] = None
    scores: list[CandidateScore] = []

    @classmethod
    def assigned(cls, login: str, scores: list[CandidateScore]) -> "AssignmentResult":
        return cls(status=AssignmentStatus.ASSIGNED, login=login, scores=scores)

    @classmethod
    def none_available(cls, scores: Optional[list[CandidateScore]] = None) -> "AssignmentResult":
        return cls(status=AssignmentStatus.NONE_AVAILABLE, scores=scores or [])

    @property
    def is_assigned(self) -> bool:
        return self.status == AssignmentStatus.ASSIGNED

    def ranked(self) -> list[CandidateScore]:
        """Scores ordered lowest first; ties keep roster order."""
        return sorted(self.scores, key=lambda s: score_key(s.score))
