"""
Eligibility Filter

Removes courses a student cannot or should not take this term:
already completed (under any alias), prerequisites unmet, excluded by the
caller, not offered this term, or a duplicate of an earlier catalog entry.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set

from .contracts import Course, StudentProfile
from .identity import (
    build_completed_markers,
    canonical_key,
    is_completed,
    normalize_code,
)


def check_prerequisites(
    course: Course,
    profile: StudentProfile,
    completed_markers: Optional[Set[str]] = None,
    identity_map: Optional[Dict[str, str]] = None,
) -> bool:
    """
    Conjunctive prerequisite check.

    Every prerequisite course must be completed, and every required
    competency must be held at or above its minimum grade. A competency the
    student does not hold at all fails the check.

    A prerequisite counts as completed when its normalized code, or the
    identity code it maps to, is among the completed markers. Markers are
    built from profile.completed_courses when omitted.
    """
    if course.prerequisites:
        identity_map = identity_map or {}
        if completed_markers is None:
            completed_markers = build_completed_markers(profile.completed_courses, identity_map)
        for prereq_id in course.prerequisites:
            key = normalize_code(prereq_id)
            mapped = normalize_code(identity_map.get(key))
            if key in completed_markers or (mapped and mapped in completed_markers):
                continue
            return False

    for competency, min_grade in course.required_competencies.items():
        grade = profile.competencies.get(competency)
        if grade is None or grade < min_grade:
            return False

    return True


def filter_candidates(
    catalog: Sequence[Course],
    profile: StudentProfile,
    exclude_list: Optional[Iterable[str]] = None,
    *,
    completed_markers: Optional[Set[str]] = None,
    identity_map: Optional[Dict[str, str]] = None,
    term: Optional[str] = None,
    excluded_prefixes: Sequence[str] = (),
) -> List[Course]:
    """
    Filter a catalog down to eligible candidates, preserving catalog order.

    Args:
        catalog: Courses offered for the term
        profile: Student profile
        exclude_list: Course ids/codes the caller does not want suggested
        completed_markers: Pre-built completed markers (e.g. from history
            aggregation); built from profile.completed_courses when omitted
        identity_map: normalized code -> identity code, used when building
            markers here
        term: Requested term; courses tagged for another term are dropped
        excluded_prefixes: Course code prefixes never recommended

    Returns:
        Eligible courses in catalog order
    """
    if completed_markers is None:
        completed_markers = build_completed_markers(profile.completed_courses, identity_map)
    excluded = {normalize_code(c) for c in (exclude_list or [])}
    excluded.discard("")
    requested_term = (term or "").strip().lower()

    candidates: List[Course] = []
    seen_keys: Set[str] = set()

    for course in catalog:
        if is_completed(course, completed_markers):
            continue

        if not check_prerequisites(course, profile, completed_markers, identity_map):
            continue

        if normalize_code(course.course_id) in excluded or normalize_code(course.course_code) in excluded:
            continue

        if requested_term and course.term_offered and course.term_offered.strip().lower() != requested_term:
            continue

        if any(course.course_code.startswith(prefix) for prefix in excluded_prefixes):
            continue

        key = canonical_key(course)
        if key and key in seen_keys:
            continue
        seen_keys.add(key)

        candidates.append(course)

    return candidates
