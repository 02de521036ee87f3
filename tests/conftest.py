"""Shared test fixtures for least-busy-reviewer."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from least_busy_reviewer.delegation.config import ReviewerConfig
from least_busy_reviewer.delegation.models import PullRequestRef, ReviewEvent, ScoringWeights, TeamRoster

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeGateway:
    """In-memory stand-in for GitHubGateway's read (and assign) methods."""

    def __init__(
        self,
        open_prs: list[PullRequestRef] | None = None,
        lines: dict[int, int] | None = None,
        reviews: list[ReviewEvent] | None = None,
        page_size: int = 2,
        delays: dict[str, float] | None = None,
        errors: dict[str, Exception] | None = None,
    ):
        self.open_prs = open_prs or []
        self.lines = lines or {}
        self.reviews = reviews or []
        self.page_size = page_size
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: list[tuple] = []
        self.requested: list[tuple[int, list[str]]] = []
        self.cancelled: list[str] = []

    def _pages(self, items):
        for i in range(0, len(items), self.page_size):
            yield items[i:i + self.page_size]

    async def open_pull_requests(self):
        self.calls.append(("open_pull_requests",))
        for page in self._pages(self.open_prs):
            await asyncio.sleep(0)
            yield page

    async def changed_lines(self, pr_number: int) -> int:
        self.calls.append(("changed_lines", pr_number))
        return self.lines[pr_number]

    async def reviews_by(self, login: str, since: datetime):
        self.calls.append(("reviews_by", login))
        try:
            await asyncio.sleep(self.delays.get(login, 0))
        except asyncio.CancelledError:
            self.cancelled.append(login)
            raise
        if login in self.errors:
            raise self.errors[login]
        # Deliberately unfiltered by time: the aggregator owns the window check.
        mine = [r for r in self.reviews if r.reviewer == login]
        for page in self._pages(mine):
            yield page

    async def get_pull_request(self, pr_number: int) -> PullRequestRef:
        self.calls.append(("get_pull_request", pr_number))
        return PullRequestRef(number=pr_number, author="dave", changed_lines=self.lines.get(pr_number, 0))

    async def request_reviewers(self, pr_number: int, reviewers):
        self.requested.append((pr_number, list(reviewers)))

    async def aclose(self):
        pass


class FakeClock:
    """Clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float):
        self.sleeps.append(delay)
        self.now += delay
        await asyncio.sleep(0)


def review(login: str, days_ago: float, pr_number: int = 1) -> ReviewEvent:
    return ReviewEvent(reviewer=login, submitted_at=NOW - timedelta(days=days_ago), pr_number=pr_number)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> ReviewerConfig:
    return ReviewerConfig(
        github_token="test-token",
        team=TeamRoster.parse("alice,bob,charlie"),
        weights=ScoringWeights(),
        repo_owner="acme",
        repo_name="widgets",
    )


@pytest.fixture
def busy_team_gateway() -> FakeGateway:
    """
    Alice {1 PR, 300 lines, 2 reviews}, Bob {2, 500, 3}, Charlie {3, 800, 1}.

    Charlie also has reviews outside the 7-day window that must not count.
    """
    return FakeGateway(
        open_prs=[
            PullRequestRef(number=1, author="dave", requested_reviewers=frozenset({"alice", "bob", "charlie"})),
            PullRequestRef(number=2, author="dave", requested_reviewers=frozenset({"bob", "charlie"})),
            PullRequestRef(number=3, author="erin", requested_reviewers=frozenset({"charlie"})),
            PullRequestRef(number=4, author="alice", requested_reviewers=frozenset({"frank"})),
            PullRequestRef(number=5, author="bob"),
        ],
        lines={1: 300, 2: 200, 3: 300, 4: 5000, 5: 10},
        reviews=[
            review("alice", 1), review("alice", 6.5),
            review("bob", 0.5), review("bob", 2), review("bob", 3),
            review("charlie", 4), review("charlie", 8), review("charlie", 30),
        ],
    )
