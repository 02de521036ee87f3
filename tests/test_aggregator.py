"""Tests for workload aggregation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from least_busy_reviewer.delegation.aggregator import (
    RECENT_WINDOW,
    aggregate_workload,
    count_open_reviews,
    count_recent_reviews,
)
from least_busy_reviewer.delegation.models import PullRequestRef, WorkloadSnapshot
from least_busy_reviewer.exceptions import ConfigurationError, RateLimited

from conftest import FakeGateway


def test_recent_window_is_seven_days():
    assert RECENT_WINDOW == timedelta(days=7)


class TestOpenReviews:
    async def test_walks_every_page(self, busy_team_gateway: FakeGateway):
        # page_size=2 and 5 PRs: charlie's third PR sits on the second page
        assert await count_open_reviews(busy_team_gateway, "charlie") == (3, 800)

    async def test_only_prs_requesting_the_candidate(self, busy_team_gateway: FakeGateway):
        assert await count_open_reviews(busy_team_gateway, "alice") == (1, 300)
        fetched = [c[1] for c in busy_team_gateway.calls if c[0] == "changed_lines"]
        assert fetched == [1]

    async def test_uses_known_line_counts(self):
        gateway = FakeGateway(open_prs=[
            PullRequestRef(number=7, author="x", requested_reviewers=frozenset({"alice"}), changed_lines=42),
        ])
        assert await count_open_reviews(gateway, "alice") == (1, 42)
        assert not [c for c in gateway.calls if c[0] == "changed_lines"]

    async def test_no_open_prs(self):
        assert await count_open_reviews(FakeGateway(), "alice") == (0, 0)

    async def test_login_match_is_case_sensitive(self, busy_team_gateway: FakeGateway):
        assert await count_open_reviews(busy_team_gateway, "Alice") == (0, 0)


class TestRecentReviews:
    async def test_counts_reviews_inside_window(self, busy_team_gateway: FakeGateway, now):
        since = now - RECENT_WINDOW
        assert await count_recent_reviews(busy_team_gateway, "bob", since) == 3
        assert await count_recent_reviews(busy_team_gateway, "charlie", since) == 1

    async def test_nobody_reviewed(self, busy_team_gateway: FakeGateway, now):
        assert await count_recent_reviews(busy_team_gateway, "zed", now - RECENT_WINDOW) == 0


class TestAggregateWorkload:
    async def test_snapshot(self, busy_team_gateway: FakeGateway, now):
        snapshot = await aggregate_workload(busy_team_gateway, "bob", now - RECENT_WINDOW)
        assert snapshot == WorkloadSnapshot(open_pr_count=2, total_lines=500, recent_review_count=3)

    async def test_empty_login_rejected(self, busy_team_gateway: FakeGateway, now):
        with pytest.raises(ConfigurationError):
            await aggregate_workload(busy_team_gateway, "", now)

    async def test_gateway_failure_propagates(self, now):
        gateway = FakeGateway(errors={"alice": RateLimited("quota exhausted")})
        with pytest.raises(RateLimited):
            await aggregate_workload(gateway, "alice", now - RECENT_WINDOW)
