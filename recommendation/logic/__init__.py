"""
Recommendation Logic Module

Provides the deterministic course recommendation engine and the offline
evaluation over historical data.
"""

from .contracts import (
    RecommendationRequest,
    RecommendationFilters,
    StudentProfile,
    Course,
    CurriculumRequirements,
    ScoredCourse,
    EvaluationMetrics,
    RecommendationSet,
)
from .engine import RecommendationEngine, build_requirements, get_recommendations
from .exceptions import RecommendationError, UpstreamError, ConfigurationError, UnknownPresetError
from .policy import SCORING_PRESETS, OPTIMIZER_PRESETS

__all__ = [
    # Main engine
    "RecommendationEngine",
    "build_requirements",
    "get_recommendations",

    # Contracts
    "RecommendationRequest",
    "RecommendationFilters",
    "StudentProfile",
    "Course",
    "CurriculumRequirements",
    "ScoredCourse",
    "EvaluationMetrics",
    "RecommendationSet",

    # Errors
    "RecommendationError",
    "UpstreamError",
    "ConfigurationError",
    "UnknownPresetError",

    # Presets
    "SCORING_PRESETS",
    "OPTIMIZER_PRESETS",
]
