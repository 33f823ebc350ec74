"""
Interest Inference

Derives a student's subdomain interest distribution. Two signals exist:
the full completed-course history (concentration and performance per
subdomain) and the courses passed in one reference term ("recent success").
Both return an empty mapping when there is nothing to learn from.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .contracts import Course, TermRecord
from .constants import (
    CONCENTRATION_WEIGHT,
    DEFAULT_PERFORMANCE,
    MAX_GRADE,
    PERFORMANCE_WEIGHT,
    PREFERRED_SUBDOMAIN_SHARE,
    RECENT_SUCCESS_BOOST,
    RECENT_SUCCESS_GRADE,
)
from .identity import canonical_key, course_aliases, normalize_code


def _normalize(weights: Dict[str, float]) -> Dict[str, float]:
    total = sum(weights.values())
    if total <= 0:
        return {}
    return {subdomain: weight / total for subdomain, weight in weights.items()}


def _alias_index(catalog: Sequence[Course]) -> Dict[str, Course]:
    index: Dict[str, Course] = {}
    for course in catalog:
        for alias in course_aliases(course):
            index.setdefault(alias, course)
    return index


def infer_interests(
    completed_course_ids: Iterable[str],
    catalog: Sequence[Course],
    competency_grades: Mapping[str, float],
) -> Dict[str, float]:
    """
    Infer interest weights from completed-course history.

    Per subdomain: weight = 0.6 * concentration + 0.4 * performance, where
    concentration is the subdomain's share of completed courses and
    performance is the mean grade / 4 (0.5 when no grade is recorded).
    Weights are normalized to sum to 1.

    Returns:
        subdomain -> weight; empty when no courses were completed
    """
    index = _alias_index(catalog)
    grades = {normalize_code(code): grade for code, grade in competency_grades.items()}

    # Aliases of one course count once
    distinct: Dict[str, Optional[Course]] = {}
    for course_id in completed_course_ids:
        key = normalize_code(course_id)
        if not key:
            continue
        course = index.get(key)
        distinct.setdefault(canonical_key(course) if course else key, course)

    total = len(distinct)
    if total == 0:
        return {}

    counts: Dict[str, int] = defaultdict(int)
    performance: Dict[str, List[float]] = defaultdict(list)
    for course in distinct.values():
        if course is None:
            continue
        counts[course.subdomain_id] += 1
        for alias in sorted(course_aliases(course)):
            if alias in grades:
                performance[course.subdomain_id].append(grades[alias])
                break

    weights: Dict[str, float] = {}
    for subdomain, count in counts.items():
        concentration = count / total
        scores = performance.get(subdomain)
        perf = (sum(scores) / len(scores)) / MAX_GRADE if scores else DEFAULT_PERFORMANCE
        weights[subdomain] = CONCENTRATION_WEIGHT * concentration + PERFORMANCE_WEIGHT * perf

    return _normalize(weights)


def successful_codes(
    records: Iterable[TermRecord],
    threshold: float = RECENT_SUCCESS_GRADE,
) -> List[str]:
    """Codes of records graded strictly above the success threshold."""
    return [r.competency_code for r in records if r.competency_code and r.grade > threshold]


def successful_competencies(
    competencies: Mapping[str, float],
    threshold: float = RECENT_SUCCESS_GRADE,
) -> List[str]:
    return sorted(code for code, grade in competencies.items() if grade > threshold)


def recent_success_interests(
    success_codes: Iterable[str],
    catalog: Sequence[Course],
) -> Dict[str, float]:
    """
    Interest weights seeded from courses passed in a reference term.

    Each successful code contributes to every catalog course sharing its
    family prefix (the part before the first "-").
    """
    weights: Dict[str, float] = defaultdict(float)
    for code in success_codes:
        prefix = code.split("-")[0].strip()
        if not prefix:
            continue
        for course in catalog:
            if course.course_code.startswith(prefix):
                weights[course.subdomain_id] += RECENT_SUCCESS_BOOST
    return _normalize(dict(weights))


def blend_preferred(
    weights: Mapping[str, float],
    preferred_subdomains: Optional[Sequence[str]],
) -> Dict[str, float]:
    """Mix caller-stated subdomain preferences into inferred weights."""
    preferred = [s for s in dict.fromkeys(preferred_subdomains or []) if s]
    if not preferred:
        return dict(weights)

    share = 1.0 / len(preferred)
    if not weights:
        return {s: share for s in preferred}

    blended: Dict[str, float] = defaultdict(float)
    for subdomain, weight in weights.items():
        blended[subdomain] += (1.0 - PREFERRED_SUBDOMAIN_SHARE) * weight
    for subdomain in preferred:
        blended[subdomain] += PREFERRED_SUBDOMAIN_SHARE * share
    return _normalize(dict(blended))
