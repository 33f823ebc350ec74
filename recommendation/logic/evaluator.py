"""
Quality Evaluator

Scores a finished selection against coverage, compliance and progress
criteria. Pure and total: identical inputs give identical metrics.
"""

from typing import Dict, List, Optional, Sequence, Set

from .contracts import (
    CurriculumRequirements,
    EvaluationMetrics,
    ScoredCourse,
    StudentProfile,
)
from .constants import (
    GOODNESS_COMPLIANCE_WEIGHT,
    GOODNESS_PROGRESS_FIT_WEIGHT,
    GOODNESS_SKILL_COVERAGE_WEIGHT,
    PROGRESS_FIT_COMPETENCY_WEIGHT,
    PROGRESS_FIT_DISTRIBUTION_WEIGHT,
)
from .dimension_scorers import clamp, missing_required_competencies
from .eligibility import check_prerequisites


def _taught(selected: Sequence[ScoredCourse]) -> Set[str]:
    taught: Set[str] = set()
    for scored in selected:
        taught |= scored.course.teaches_competencies
    return taught


def skill_coverage(
    selected: Sequence[ScoredCourse],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
) -> float:
    missing = missing_required_competencies(profile, requirements)
    if not missing:
        return 1.0
    return len(missing & _taught(selected)) / len(missing)


def prerequisite_compliance(
    selected: Sequence[ScoredCourse],
    profile: StudentProfile,
    completed_markers: Optional[Set[str]] = None,
    identity_map: Optional[Dict[str, str]] = None,
) -> float:
    if not selected:
        return 1.0
    compliant = sum(
        1 for scored in selected
        if check_prerequisites(scored.course, profile, completed_markers, identity_map)
    )
    return compliant / len(selected)


def distribution_progress(
    selected: Sequence[ScoredCourse],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
) -> float:
    coverage: Dict[str, float] = {}
    for scored in selected:
        subdomain = scored.course.subdomain_id
        coverage[subdomain] = coverage.get(subdomain, 0.0) + scored.course.credit_hours

    scores: List[float] = []
    for subdomain in sorted(requirements.distribution_requirements):
        required = requirements.distribution_requirements[subdomain]
        if required <= 0:
            continue
        status = profile.distribution_credits.get(subdomain)
        earned = status.earned if status else 0.0
        gap = max(0.0, required - earned)
        if gap <= 0:
            scores.append(1.0)
        else:
            scores.append(min(1.0, coverage.get(subdomain, 0.0) / gap))

    if not scores:
        return 1.0
    return sum(scores) / len(scores)


def program_progress_fit(
    selected: Sequence[ScoredCourse],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
) -> float:
    # Competency progress is the same ratio as skill coverage
    competency_progress = skill_coverage(selected, profile, requirements)
    return (
        PROGRESS_FIT_COMPETENCY_WEIGHT * competency_progress
        + PROGRESS_FIT_DISTRIBUTION_WEIGHT * distribution_progress(selected, profile, requirements)
    )


def evaluate(
    selected: Sequence[ScoredCourse],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
    completed_markers: Optional[Set[str]] = None,
    identity_map: Optional[Dict[str, str]] = None,
) -> EvaluationMetrics:
    """
    Compute quality metrics for a recommendation set.

    Args:
        completed_markers: Completed markers used for prerequisite
            compliance; built from profile.completed_courses when omitted
        identity_map: normalized code -> identity code

    Returns:
        EvaluationMetrics with every value in [0, 1]
    """
    coverage = clamp(skill_coverage(selected, profile, requirements))
    compliance = clamp(prerequisite_compliance(selected, profile, completed_markers, identity_map))
    progress_fit = clamp(program_progress_fit(selected, profile, requirements))

    goodness = clamp(
        GOODNESS_SKILL_COVERAGE_WEIGHT * coverage
        + GOODNESS_COMPLIANCE_WEIGHT * compliance
        + GOODNESS_PROGRESS_FIT_WEIGHT * progress_fit
    )

    return EvaluationMetrics(
        skill_coverage=coverage,
        prerequisite_compliance=compliance,
        program_progress_fit=progress_fit,
        goodness_score=goodness,
    )
