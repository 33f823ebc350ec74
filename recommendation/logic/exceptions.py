"""
Recommendation Errors

Only retrieval of the profile or the catalog is fatal to a request.
Sparse or missing domain data is resolved by scoring defaults, never raised.
"""

from typing import Optional


class RecommendationError(Exception):
    """Base class for errors surfaced by the recommendation pipeline."""


class UpstreamError(RecommendationError):
    """The directory service could not deliver something the request needs."""

    def __init__(self, source: str, cause: Optional[BaseException] = None):
        self.source = source
        self.cause = cause
        message = f"failed to fetch {source}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConfigurationError(RecommendationError):
    """A rule or identity table exists but cannot be parsed."""


class UnknownPresetError(RecommendationError, ValueError):
    """A request named a scoring or optimizer preset that does not exist."""
