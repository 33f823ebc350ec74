"""
Engine Runner

Wires the recommendation engine to its production collaborators:
1. Builds the directory client from configuration
2. Loads the curriculum rule and identity tables
3. Runs the engine for one request

This is a pure orchestration layer - NO scoring, NO payload decoding.
"""

import logging
from typing import Optional

import config

from .client import DirectoryClient
from .contracts import RecommendationRequest, RecommendationSet
from .engine import RecommendationEngine
from .exceptions import ConfigurationError
from .rules import PolicyTables, load_policy_tables

logger = logging.getLogger(__name__)


def build_directory_client(token: Optional[str] = None) -> DirectoryClient:
    return DirectoryClient(
        base_url=config.DIRECTORY_BASE_URL,
        token=token,
        timeout=config.DIRECTORY_TIMEOUT,
    )


def load_default_policy_tables() -> PolicyTables:
    """
    Rule and identity tables from the configured paths.

    A malformed table is reported and the request proceeds without tables.
    """
    try:
        return load_policy_tables(config.CURRICULUM_RULES_PATH, config.COURSE_IDENTITIES_PATH)
    except ConfigurationError as e:
        logger.error("Policy tables unusable, continuing without them: %s", e)
        return PolicyTables()


def run_recommendations(
    request: RecommendationRequest,
    provider=None,
    token: Optional[str] = None,
) -> RecommendationSet:
    """
    Main entry point: run the full recommendation pipeline.

    Args:
        request: Recommendation request
        provider: Directory provider; the configured HTTP client when None
        token: Session token forwarded to the default client

    Returns:
        RecommendationSet
    """
    provider = provider or build_directory_client(token)

    engine = RecommendationEngine(
        provider,
        policy_tables=load_default_policy_tables(),
        logger=logger,
        history_workers=config.HISTORY_MAX_WORKERS,
        default_max_credit_load=config.DEFAULT_MAX_CREDIT_LOAD,
        excluded_prefixes=config.EXCLUDED_CODE_PREFIXES,
    )
    return engine.recommend(request)
