"""Custom exceptions for least-busy-reviewer."""

from datetime import datetime
from typing import Optional


class ReviewerSelectionError(Exception):
    """Base exception for all reviewer selection errors."""


class ConfigurationError(ReviewerSelectionError):
    """Missing or invalid roster, weights or repository coordinates."""


class GatewayError(ReviewerSelectionError):
    """GitHub API errors."""


class GatewayUnavailable(GatewayError):
    """Transport, authentication or unexpected server failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(GatewayError):
    """The repository or pull request does not exist (or is not visible)."""


class RateLimited(GatewayError):
    """The retry budget ran out while the API quota was exhausted."""

    def __init__(self, message: str, reset_at: Optional[datetime] = None):
        super().__init__(message)
        self.reset_at = reset_at
