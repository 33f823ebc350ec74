"""
Output Assembler

Transforms the selected courses and their metrics into the final
RecommendationSet contract.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .contracts import (
    EvaluationMetrics,
    RecommendationMetadata,
    RecommendationSet,
    ScoredCourse,
)
from .constants import ALGORITHM_VERSION, LOW_RECOMMENDATION_COUNT, TARGET_CREDIT_CAP


def total_credits(selected: Sequence[ScoredCourse]) -> float:
    return sum(scored.course.credit_hours for scored in selected)


def distribution_coverage(selected: Sequence[ScoredCourse]) -> Dict[str, float]:
    """subdomain -> credit hours of the selected courses"""
    coverage: Dict[str, float] = {}
    for scored in selected:
        subdomain = scored.course.subdomain_id
        coverage[subdomain] = coverage.get(subdomain, 0.0) + scored.course.credit_hours
    return coverage


def assemble_output(
    student_id: str,
    term: str,
    selected: List[ScoredCourse],
    metrics: EvaluationMetrics,
    max_credit_load: float,
    total_candidates: int,
    processing_time_ms: float,
    scoring_preset: str = "",
    optimizer_preset: str = "",
    logger: Optional[logging.Logger] = None,
) -> RecommendationSet:
    """
    Assemble the final RecommendationSet.

    Args:
        student_id: Student the set is for
        term: Target term
        selected: Courses in selection order
        metrics: Quality metrics of the selection
        max_credit_load: Effective credit ceiling of the request
        total_candidates: Eligible candidates before optimization
        processing_time_ms: Wall time of the pipeline
        scoring_preset: Name of the weight preset applied
        optimizer_preset: Name of the optimizer preset applied
        logger: Request logger

    Returns:
        Complete RecommendationSet
    """
    logger = logger or logging.getLogger(__name__)
    warnings = _generate_warnings(max_credit_load, total_candidates)

    if total_candidates and len(selected) < LOW_RECOMMENDATION_COUNT:
        warning_msg = f"Low recommendation count: {len(selected)} courses selected from {total_candidates} candidates."
        logger.warning(warning_msg)
        warnings.append(warning_msg)

    return RecommendationSet(
        student_id=student_id,
        term=term,
        recommended_set=list(selected),
        total_credits=total_credits(selected),
        distribution_coverage=distribution_coverage(selected),
        metrics=metrics,
        metadata=RecommendationMetadata(
            generation_timestamp=datetime.now(timezone.utc),
            algorithm_version=ALGORITHM_VERSION,
            processing_time_ms=processing_time_ms,
            scoring_preset=scoring_preset,
            optimizer_preset=optimizer_preset,
        ),
        status="success",
        warnings=warnings,
    )


def _generate_warnings(max_credit_load: float, total_candidates: int) -> List[str]:
    warnings = []

    if max_credit_load > TARGET_CREDIT_CAP:
        warnings.append(
            "The student is requesting a credit overload; confirm the load with academic staff."
        )

    if total_candidates == 0:
        warnings.append("No eligible courses found for this term.")

    return warnings
