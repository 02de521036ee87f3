"""
GitHub REST API gateway.

Wraps an httpx.AsyncClient with:
- lazy pagination (async generators that yield one page at a time)
- rate-limit aware retries through a shared RateLimitCoordinator
- translation of HTTP failures into least_busy_reviewer.exceptions
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import AsyncIterator, Iterable, Optional

import httpx

from least_busy_reviewer.delegation.config import ReviewerConfig, DEFAULT_API_URL
from least_busy_reviewer.delegation.models import PullRequestRef, ReviewEvent
from least_busy_reviewer.exceptions import GatewayUnavailable, NotFound, RateLimited
from least_busy_reviewer.tools.rate_limit import RateLimitCoordinator

logger = logging.getLogger(__name__)

PER_PAGE = 100


def _get_github_headers(token: str) -> dict:
    """Get GitHub API headers with authentication."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28"
    }


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _is_rate_limited(response: httpx.Response) -> bool:
    """Primary (remaining=0) and secondary rate limits both count."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    if "retry-after" in response.headers:
        return True
    return "rate limit" in response.text.lower()


def _reset_time(response: httpx.Response, now: float) -> Optional[float]:
    """
    Epoch seconds at which the quota resets, if GitHub said so.

    x-ratelimit-reset is sent on every response but only applies once the
    primary quota is spent; secondary limits rely on Retry-After or backoff.
    """
    retry_after = response.headers.get("retry-after")
    if retry_after:
        try:
            return now + float(retry_after)
        except ValueError:
            pass
    reset = response.headers.get("x-ratelimit-reset")
    if reset and response.headers.get("x-ratelimit-remaining") == "0":
        try:
            return float(reset)
        except ValueError:
            pass
    return None


class GitHubGateway:
    """Read access to one repository's pull requests and reviews."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        api_url: str = DEFAULT_API_URL,
        limiter: Optional[RateLimitCoordinator] = None,
        client: Optional[httpx.AsyncClient] = None,
        per_page: int = PER_PAGE,
    ):
        self.owner = owner
        self.repo = repo
        self.per_page = per_page
        self.limiter = limiter or RateLimitCoordinator()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=api_url,
            headers=_get_github_headers(token),
            timeout=30.0,
        )
        self._changed_lines: dict[int, int] = {}
        self._line_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    @classmethod
    def from_config(cls, config: ReviewerConfig, **kwargs) -> "GitHubGateway":
        limiter = kwargs.pop("limiter", None) or RateLimitCoordinator(
            max_concurrency=config.max_concurrency,
            max_attempts=config.max_attempts,
        )
        return cls(
            owner=config.repo_owner,
            repo=config.repo_name,
            token=config.github_token,
            api_url=config.api_url,
            limiter=limiter,
            **kwargs,
        )

    async def __aenter__(self) -> "GitHubGateway":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send one request, retrying while the quota is exhausted.

        Raises:
            RateLimited: quota still exhausted after max_attempts tries
            NotFound: 404
            GatewayUnavailable: transport error or any other non-2xx status
        """
        limiter = self.limiter
        for attempt in range(limiter.max_attempts):
            async with limiter.slot():
                try:
                    response = await self._client.request(method, url, **kwargs)
                except httpx.RequestError as e:
                    raise GatewayUnavailable(f"Failed to connect to GitHub: {str(e)}") from e

            if _is_rate_limited(response):
                reset_at = _reset_time(response, limiter.now())
                if attempt + 1 >= limiter.max_attempts:
                    raise RateLimited(
                        f"GitHub rate limit still exhausted after {limiter.max_attempts} attempts ({method} {url})",
                        reset_at=datetime.fromtimestamp(reset_at, tz=timezone.utc) if reset_at is not None else None,
                    )
                if reset_at is not None and reset_at - limiter.now() > limiter.max_reset_wait:
                    raise RateLimited(
                        f"GitHub rate limit resets too far in the future ({method} {url})",
                        reset_at=datetime.fromtimestamp(reset_at, tz=timezone.utc),
                    )
                limiter.report_exhausted(reset_at, attempt)
                continue

            if response.status_code == 404:
                raise NotFound(f"Not found: {method} {url} (check {self.owner}/{self.repo} and token scopes)")
            if response.status_code >= 400:
                raise GatewayUnavailable(
                    f"GitHub API error {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )
            return response

        # Unreachable: the loop either returns or raises on the last attempt.
        raise RateLimited(f"GitHub rate limit exhausted ({method} {url})")

    async def _paginate(self, url: str, params: Optional[dict] = None) -> AsyncIterator[list[dict]]:
        """
        Yield each page of a list (or search) endpoint until the last one.

        A page shorter than per_page, an empty page, or a Link header without
        rel="next" ends the stream. Calling again restarts from page 1.
        """
        page = 1
        while True:
            response = await self._request(
                "GET", url, params={**(params or {}), "per_page": self.per_page, "page": page}
            )
            data = response.json()
            items = data.get("items", []) if isinstance(data, dict) else data
            logger.debug(f"GET {url} page {page}: {len(items)} items")
            if items:
                yield items
            if len(items) < self.per_page:
                return
            if "link" in response.headers and "next" not in response.links:
                return
            page += 1

    async def open_pull_requests(self) -> AsyncIterator[list[PullRequestRef]]:
        """Pages of currently open pull requests. changed_lines is not filled in."""
        async for page in self._paginate(f"{self._repo_path}/pulls", {"state": "open"}):
            yield [
                PullRequestRef(
                    number=pr["number"],
                    author=(pr.get("user") or {}).get("login", ""),
                    requested_reviewers=frozenset(
                        r["login"] for r in pr.get("requested_reviewers") or [] if r and r.get("login")
                    ),
                )
                for pr in page
            ]

    async def get_pull_request(self, pr_number: int) -> PullRequestRef:
        """Get one PR including its size."""
        response = await self._request("GET", f"{self._repo_path}/pulls/{pr_number}")
        pr = response.json()
        lines = (pr.get("additions") or 0) + (pr.get("deletions") or 0)
        self._changed_lines[pr_number] = lines
        return PullRequestRef(
            number=pr["number"],
            author=(pr.get("user") or {}).get("login", ""),
            requested_reviewers=frozenset(
                r["login"] for r in pr.get("requested_reviewers") or [] if r and r.get("login")
            ),
            changed_lines=lines,
        )

    async def changed_lines(self, pr_number: int) -> int:
        """additions + deletions for a PR, fetched once per gateway."""
        async with self._line_locks[pr_number]:
            if pr_number not in self._changed_lines:
                await self.get_pull_request(pr_number)
        return self._changed_lines[pr_number]

    async def reviews_by(self, login: str, since: datetime) -> AsyncIterator[list[ReviewEvent]]:
        """
        Pages of reviews submitted by `login` at or after `since`.

        Finds PRs the user reviewed that were updated inside the window via the
        search API, then walks each PR's reviews.
        """
        query = f"repo:{self.owner}/{self.repo} is:pr reviewed-by:{login} updated:>={since.strftime('%Y-%m-%d')}"
        async for results in self._paginate("/search/issues", {"q": query}):
            for item in results:
                async for page in self._paginate(f"{self._repo_path}/pulls/{item['number']}/reviews"):
                    events = []
                    for review in page:
                        user = (review.get("user") or {}).get("login")
                        submitted = review.get("submitted_at")
                        if user != login or not submitted:
                            continue
                        submitted_at = _parse_timestamp(submitted)
                        if submitted_at < since:
                            continue
                        events.append(ReviewEvent(
                            reviewer=user,
                            submitted_at=submitted_at,
                            pr_number=item["number"],
                            state=review.get("state"),
                        ))
                    if events:
                        yield events

    async def request_reviewers(self, pr_number: int, reviewers: Iterable[str]) -> None:
        """Request reviews on a PR. The only write the project makes."""
        await self._request(
            "POST",
            f"{self._repo_path}/pulls/{pr_number}/requested_reviewers",
            json={"reviewers": list(reviewers)},
        )
