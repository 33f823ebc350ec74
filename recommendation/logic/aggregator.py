"""
Score Aggregator

Combines the dimension scores of a candidate into its fit score using one
weight preset for the whole batch.
"""

from typing import List, Sequence

from .contracts import (
    Course,
    CurriculumRequirements,
    ScoredCourse,
    StudentProfile,
)
from .dimension_scorers import (
    build_reason,
    clamp,
    competency_lists,
    score_competency_match,
    score_interest,
    score_program_progress,
)
from .policy import BALANCED, ScoringWeights


def score_course(
    course: Course,
    profile: StudentProfile,
    requirements: CurriculumRequirements,
    weights: ScoringWeights = BALANCED,
    rank_index: int = 0,
) -> ScoredCourse:
    """
    Compute all dimension scores and aggregate into the fit score.

    Args:
        course: Candidate to score
        profile: Student profile (interest weights already inferred)
        requirements: Curriculum requirements for the request
        weights: Sub-score weights
        rank_index: Catalog position, kept for deterministic tie-breaks

    Returns:
        ScoredCourse
    """
    competency = score_competency_match(course, profile)
    interest = score_interest(course, profile)
    progress = score_program_progress(course, profile, requirements)

    fit = clamp(
        weights.competency * competency
        + weights.interest * interest
        + weights.progress * progress
    )
    matched, missing = competency_lists(course, profile)

    return ScoredCourse(
        course=course,
        fit_score=fit,
        competency_match_score=competency,
        interest_alignment_score=interest,
        program_progress_score=progress,
        matched_competencies=matched,
        missing_competencies=missing,
        reason=build_reason(course, fit, progress, interest),
        rank_index=rank_index,
    )


def score_candidates(
    candidates: Sequence[Course],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
    weights: ScoringWeights = BALANCED,
) -> List[ScoredCourse]:
    """Score a batch of candidates, in catalog order."""
    return [
        score_course(course, profile, requirements, weights, rank_index=i)
        for i, course in enumerate(candidates)
    ]
