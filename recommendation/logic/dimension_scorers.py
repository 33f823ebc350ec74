"""
Dimension Scorers

Individual scoring functions for each fit dimension.
Each scorer produces a normalized score between 0.0 and 1.0.
All logic is deterministic - absent data falls back to documented defaults.
"""

from typing import List, Set, Tuple

from .contracts import Course, StudentProfile, CurriculumRequirements
from .constants import (
    PREREQ_SATISFACTION_WEIGHT,
    GRADE_MATCH_WEIGHT,
    SKILL_GAP_FILL_WEIGHT,
    DEFAULT_INTEREST,
    REQUIRED_COMPETENCY_WEIGHT,
    DISTRIBUTION_WEIGHT,
    REMAINING_DEGREE_WEIGHT,
    SATISFIED_AREA_SCORE,
    ELECTIVE_AREA_SCORE,
    URGENCY_BANDS,
    REASON_PROGRESS_THRESHOLD,
    REASON_INTEREST_THRESHOLD,
    REASON_FIT_THRESHOLD,
)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def missing_required_competencies(
    profile: StudentProfile,
    requirements: CurriculumRequirements,
) -> Set[str]:
    """Required competencies the student does not hold yet."""
    return {c for c in requirements.required_competencies if c not in profile.competencies}


# =============================================================================
# COMPETENCY MATCH
# =============================================================================

def prereq_satisfaction(course: Course, profile: StudentProfile) -> float:
    required = course.required_competencies
    if not required:
        return 1.0
    matched = sum(1 for c in required if c in profile.competencies)
    return matched / len(required)


def grade_match(course: Course, profile: StudentProfile) -> float:
    matched = [c for c in course.required_competencies if c in profile.competencies]
    if not matched:
        return 1.0

    total = 0.0
    for competency in matched:
        required_grade = course.required_competencies[competency]
        student_grade = profile.competencies[competency]
        if student_grade >= required_grade or required_grade <= 0:
            total += 1.0
        else:
            total += max(0.0, student_grade) / required_grade
    return total / len(matched)


def skill_gap_fill(course: Course, profile: StudentProfile) -> float:
    taught = course.teaches_competencies
    if not taught:
        return 0.0
    new_skills = [c for c in taught if c not in profile.competencies]
    return len(new_skills) / len(taught)


def score_competency_match(course: Course, profile: StudentProfile) -> float:
    """
    How well the student's competencies line up with the course.

    0.4 * share of required competencies held
    + 0.3 * grade adequacy on those held
    + 0.3 * share of taught competencies that are new to the student
    """
    raw = (
        PREREQ_SATISFACTION_WEIGHT * prereq_satisfaction(course, profile)
        + GRADE_MATCH_WEIGHT * grade_match(course, profile)
        + SKILL_GAP_FILL_WEIGHT * skill_gap_fill(course, profile)
    )
    return clamp(raw)


def competency_lists(course: Course, profile: StudentProfile) -> Tuple[List[str], List[str]]:
    """(matched, missing) required competencies, sorted."""
    matched = sorted(c for c in course.required_competencies if c in profile.competencies)
    missing = sorted(c for c in course.required_competencies if c not in profile.competencies)
    return matched, missing


# =============================================================================
# INTEREST
# =============================================================================

def score_interest(course: Course, profile: StudentProfile) -> float:
    weight = profile.interest_weights.get(course.subdomain_id)
    if weight is None:
        return DEFAULT_INTEREST
    return clamp(weight)


# =============================================================================
# PROGRAM PROGRESS
# =============================================================================

def distribution_gap_score(credit_hours: float, required: float, earned: float) -> float:
    """
    Contribution of `credit_hours` towards a subdomain requirement.

    Open gap: share of the gap filled, scaled by how much of the
    requirement is still open. Closed gap: small reward for depth.
    No requirement (elective): constant.
    """
    if required <= 0:
        return ELECTIVE_AREA_SCORE
    gap = max(0.0, required - earned)
    if gap <= 0:
        return SATISFIED_AREA_SCORE
    return min(1.0, credit_hours / gap) * (gap / required)


def degree_progress(profile: StudentProfile, requirements: CurriculumRequirements) -> float:
    if requirements.total_credits_required <= 0:
        return 1.0
    return clamp(profile.total_credits.earned / requirements.total_credits_required)


def urgency_multiplier(progress: float) -> float:
    for upper, multiplier in URGENCY_BANDS:
        if progress < upper:
            return multiplier
    return 1.0


def score_program_progress(
    course: Course,
    profile: StudentProfile,
    requirements: CurriculumRequirements,
) -> float:
    """
    How much the course advances degree completion.

    Combines required-competency coverage, distribution-credit gap relief
    and remaining degree progress, boosted for students early in the degree.
    """
    missing = missing_required_competencies(profile, requirements)
    if missing:
        required_score = len(missing & course.teaches_competencies) / len(missing)
    else:
        required_score = 0.0

    subdomain = course.subdomain_id
    required_credits = requirements.distribution_requirements.get(subdomain, 0.0)
    credit_status = profile.distribution_credits.get(subdomain)
    earned = credit_status.earned if credit_status else 0.0
    distribution_score = distribution_gap_score(course.credit_hours, required_credits, earned)

    progress = degree_progress(profile, requirements)
    raw = (
        REQUIRED_COMPETENCY_WEIGHT * required_score
        + DISTRIBUTION_WEIGHT * distribution_score
        + REMAINING_DEGREE_WEIGHT * (1.0 - progress)
    ) * urgency_multiplier(progress)

    return clamp(raw)


# =============================================================================
# EXPLANATION
# =============================================================================

def build_reason(course: Course, fit: float, progress: float, interest: float) -> str:
    area = course.subdomain_name or course.subdomain_id or "your program"
    if progress > REASON_PROGRESS_THRESHOLD:
        return f"Advances graduation requirements in {area}"
    if interest > REASON_INTEREST_THRESHOLD:
        return f"Matches demonstrated interest in {area}"
    if fit > REASON_FIT_THRESHOLD:
        return "Excellent overall fit with your competencies and goals"
    return f"Advances progress in {area}"
