"""
Set Optimizer

Greedy, explainable selection of a course set for one term:

1. Graduation priority - a few courses that close outstanding requirements.
2. Diversity-capped fill - courses whose marginal value clears a threshold
   that relaxes as the credit target is approached.
3. Credit floor - if still below the floor, top up in rank order.

The optimizer never rescores; it only selects and orders.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set

from .contracts import CurriculumRequirements, ScoredCourse, StudentProfile
from .constants import (
    MARGINAL_DISTRIBUTION_WEIGHT,
    MARGINAL_FIT_WEIGHT,
    MARGINAL_NEW_SKILL_WEIGHT,
)
from .dimension_scorers import distribution_gap_score, missing_required_competencies
from .identity import canonical_key, normalize_code
from .policy import DIVERSE, OptimizerPolicy


class _Selection:
    """Running state of one optimization pass."""

    def __init__(self, profile: StudentProfile):
        self.picked: List[ScoredCourse] = []
        self.keys: Set[str] = set()
        self.credits = 0.0
        self.covered: Set[str] = set(profile.competencies)
        self.subdomain_credits: Dict[str, float] = {
            subdomain: status.earned for subdomain, status in profile.distribution_credits.items()
        }
        self.subdomain_count: Dict[str, int] = defaultdict(int)

    def contains(self, scored: ScoredCourse) -> bool:
        return canonical_key(scored.course) in self.keys

    def add(self, scored: ScoredCourse) -> None:
        course = scored.course
        self.picked.append(scored)
        self.keys.add(canonical_key(course))
        self.credits += course.credit_hours
        self.covered |= course.teaches_competencies
        self.subdomain_credits[course.subdomain_id] = (
            self.subdomain_credits.get(course.subdomain_id, 0.0) + course.credit_hours
        )
        self.subdomain_count[course.subdomain_id] += 1


def satisfies_requirement(scored: ScoredCourse, missing_required: Set[str]) -> bool:
    """True if the course closes an outstanding graduation requirement."""
    course = scored.course
    if course.is_required:
        return True
    if not missing_required:
        return False
    for identifier in (course.course_code, course.course_id, course.identity_code):
        if identifier and normalize_code(identifier) in missing_required:
            return True
    return any(normalize_code(c) in missing_required for c in course.teaches_competencies)


def marginal_value(
    scored: ScoredCourse,
    selection: _Selection,
    requirements: CurriculumRequirements,
    policy: OptimizerPolicy,
) -> float:
    course = scored.course
    new_skills = len(course.teaches_competencies - selection.covered)
    skill_value = min(new_skills, policy.new_skill_cap) / policy.new_skill_cap

    required = requirements.distribution_requirements.get(course.subdomain_id, 0.0)
    current = selection.subdomain_credits.get(course.subdomain_id, 0.0)
    gap_relief = distribution_gap_score(course.credit_hours, required, current)

    return (
        MARGINAL_NEW_SKILL_WEIGHT * skill_value
        + MARGINAL_DISTRIBUTION_WEIGHT * gap_relief
        + MARGINAL_FIT_WEIGHT * scored.fit_score
    )


def acceptance_threshold(credits: float, target: float, policy: OptimizerPolicy) -> float:
    if target <= 0:
        return 0.0
    return max(0.0, policy.threshold_base * (1.0 - credits / target))


def optimize(
    scored_candidates: List[ScoredCourse],
    profile: StudentProfile,
    requirements: CurriculumRequirements,
    target_credit_load: float,
    hard_max_credit_load: float,
    policy: Optional[OptimizerPolicy] = None,
) -> List[ScoredCourse]:
    """
    Select a course set from ranked candidates.

    Args:
        scored_candidates: Candidates ranked by fit (see ranker.rank_candidates)
        profile: Student profile
        requirements: Curriculum requirements
        target_credit_load: Credits the greedy phases aim for
        hard_max_credit_load: Ceiling never exceeded, including the fallback
        policy: Optimizer knobs (defaults to the "diverse" preset)

    Returns:
        Selected courses in selection order (priority picks, then fill)
    """
    policy = policy or DIVERSE
    hard_max = max(0.0, hard_max_credit_load)
    target = min(max(0.0, target_credit_load), hard_max)

    selection = _Selection(profile)
    missing_required = {
        normalize_code(c) for c in missing_required_competencies(profile, requirements)
    }

    # Phase 1: graduation priority
    priority_picks = 0
    for scored in scored_candidates:
        if priority_picks >= policy.priority_limit:
            break
        if selection.contains(scored):
            continue
        if not satisfies_requirement(scored, missing_required):
            continue
        if selection.credits + scored.course.credit_hours > target:
            continue
        selection.add(scored)
        priority_picks += 1

    # Phase 2: diversity-capped greedy fill
    for scored in scored_candidates:
        if selection.credits >= target:
            break
        if selection.contains(scored):
            continue
        course = scored.course
        if selection.credits + course.credit_hours > target:
            continue
        if selection.subdomain_count[course.subdomain_id] >= policy.diversity_cap:
            continue
        threshold = acceptance_threshold(selection.credits, target, policy)
        if marginal_value(scored, selection, requirements, policy) >= threshold:
            selection.add(scored)

    # Fallback: credit floor, diversity cap ignored
    if selection.credits < policy.credit_floor:
        for scored in scored_candidates:
            if selection.credits >= policy.credit_floor:
                break
            if selection.contains(scored):
                continue
            if selection.credits + scored.course.credit_hours <= hard_max:
                selection.add(scored)

    return selection.picked
