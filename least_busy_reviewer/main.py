import os

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from least_busy_reviewer import __version__
from least_busy_reviewer.delegation.models import AssignmentResult, ScoringWeights, TeamRoster
from least_busy_reviewer.exceptions import ConfigurationError, NotFound, RateLimited, GatewayUnavailable

load_dotenv()

app = FastAPI(
    title="least-busy-reviewer",
    description="Pick the pull request reviewer with the lightest current workload",
    version=__version__
)


class SelectReviewerRequest(BaseModel):
    """Body for POST /reviewers/select."""
    owner: str
    repo: str
    team_members: list[str] | str
    pr_author: str
    weights: ScoringWeights = ScoringWeights()


def get_gateway():
    """Data source override hook; None means build a GitHubGateway from the request."""
    return None


@app.get("/")
async def root():
    """API root - shows available endpoints."""
    return {
        "service": "least-busy-reviewer",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "select_reviewer": "/reviewers/select"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "least-busy-reviewer"}


@app.post("/reviewers/select", response_model=AssignmentResult)
async def select_reviewer_endpoint(body: SelectReviewerRequest, gateway=Depends(get_gateway)):
    """Score the team and return the least busy reviewer. Does not assign anything."""
    from least_busy_reviewer.delegation.config import ReviewerConfig
    from least_busy_reviewer.delegation.selector import select_reviewer

    token = os.getenv("GITHUB_TOKEN")
    if not token:
        raise HTTPException(
            status_code=500,
            detail="GitHub token not configured. Set GITHUB_TOKEN in .env"
        )

    team = TeamRoster.parse(body.team_members)
    if not team.members:
        raise HTTPException(status_code=422, detail="team_members does not list any logins")

    config = ReviewerConfig(
        github_token=token,
        team=team,
        weights=body.weights,
        repo_owner=body.owner,
        repo_name=body.repo,
        api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
    )

    try:
        return await select_reviewer(config, body.pr_author, gateway=gateway)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RateLimited as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GatewayUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
