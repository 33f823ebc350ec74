"""
Recommendation Engine

Main orchestrator that combines all pipeline stages into a single request.
This is the primary entry point for generating recommendations.
"""

import logging
import time
from typing import Dict, List, Optional, Sequence

from .aggregator import score_candidates
from .constants import (
    DEFAULT_DISTRIBUTION_REQUIREMENTS,
    DEFAULT_TOTAL_CREDITS_REQUIRED,
    TARGET_CREDIT_CAP,
)
from .contracts import (
    Course,
    CurriculumRequirements,
    RecommendationRequest,
    RecommendationSet,
    StudentProfile,
)
from .eligibility import filter_candidates
from .evaluator import evaluate
from .exceptions import UpstreamError
from .history import aggregate_completed_history
from .identity import augment_catalog, build_completed_markers
from .interests import (
    blend_preferred,
    infer_interests,
    recent_success_interests,
    successful_codes,
    successful_competencies,
)
from .optimizer import optimize
from .output_assembler import assemble_output
from .policy import (
    DEFAULT_OPTIMIZER_PRESET,
    DEFAULT_SCORING_PRESET,
    INTEREST_LED,
    get_optimizer_policy,
    get_scoring_weights,
)
from .ranker import rank_candidates
from .rules import PolicyTables

ALL_TERMS = "ALL"


def build_requirements(profile: StudentProfile) -> CurriculumRequirements:
    """
    Curriculum requirements for the student's curriculum version.

    Distribution targets come from the graduation status when it reports
    any; otherwise the static program distribution applies.
    """
    distribution = {
        subdomain: status.required
        for subdomain, status in profile.distribution_credits.items()
        if status.required > 0
    }
    if not distribution:
        distribution = dict(DEFAULT_DISTRIBUTION_REQUIREMENTS)

    total = profile.total_credits.required
    if total <= 0:
        total = DEFAULT_TOTAL_CREDITS_REQUIRED

    return CurriculumRequirements(
        curriculum_version=profile.curriculum_version,
        required_competencies=set(profile.required_competencies),
        distribution_requirements=distribution,
        total_credits_required=total,
    )


class RecommendationEngine:
    """
    Orchestrates one recommendation request.

    Pipeline flow:
    1. Profile + catalog retrieval (provider)
    2. Catalog augmentation (identity map, rule table)
    3. History aggregation (completed markers across terms)
    4. Interest inference
    5. Eligibility filter
    6. Scoring + ranking
    7. Set optimization
    8. Evaluation + output assembly

    The provider needs get_student_profile(student_id) and
    get_course_catalog(term, curriculum_version); get_term_records(student_id,
    term) is used when present.
    """

    def __init__(
        self,
        provider,
        policy_tables: Optional[PolicyTables] = None,
        logger: Optional[logging.Logger] = None,
        history_workers: int = 4,
        default_max_credit_load: float = TARGET_CREDIT_CAP,
        excluded_prefixes: Sequence[str] = (),
    ):
        self.provider = provider
        self.policy_tables = policy_tables or PolicyTables()
        self.logger = logger or logging.getLogger(__name__)
        self.history_workers = history_workers
        self.default_max_credit_load = default_max_credit_load
        self.excluded_prefixes = tuple(excluded_prefixes)

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    def _fetch_profile(self, student_id: str) -> StudentProfile:
        try:
            return self.provider.get_student_profile(student_id)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError("student profile", e) from e

    def _fetch_catalog(self, term: str, curriculum_version: int) -> List[Course]:
        try:
            return self.provider.get_course_catalog(term, curriculum_version)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError("course catalog", e) from e

    def _completed_markers(self, profile: StudentProfile) -> set:
        identity_map = self.policy_tables.identity_map
        base = build_completed_markers(profile.completed_courses, identity_map)
        fetch_records = getattr(self.provider, "get_term_records", None)
        if fetch_records is None:
            return base
        return aggregate_completed_history(
            fetch_records,
            profile.student_id,
            profile.course_terms.values(),
            base_markers=base,
            identity_map=identity_map,
            max_workers=self.history_workers,
            logger=self.logger,
        )

    # -------------------------------------------------------------------------
    # Interests
    # -------------------------------------------------------------------------

    def _recent_success_codes(self, profile: StudentProfile, previous_term: str) -> List[str]:
        if previous_term.upper() == ALL_TERMS:
            return successful_competencies(profile.competencies)

        fetch_records = getattr(self.provider, "get_term_records", None)
        if fetch_records is not None:
            try:
                return successful_codes(fetch_records(profile.student_id, previous_term))
            except Exception as e:
                self.logger.warning(
                    "Term %r unavailable for interest seeding: %s", previous_term, e
                )

        term_grades = {
            code: grade
            for code, grade in profile.competencies.items()
            if profile.course_terms.get(code) == previous_term
        }
        return successful_competencies(term_grades)

    def _interest_weights(
        self,
        profile: StudentProfile,
        catalog: List[Course],
        request: RecommendationRequest,
    ) -> Dict[str, float]:
        weights: Dict[str, float] = dict(profile.interest_weights)

        if not weights and request.previous_term:
            codes = self._recent_success_codes(profile, request.previous_term)
            weights = recent_success_interests(codes, catalog)
            self.logger.info(
                "Seeded interests from %d successful courses in %s", len(codes), request.previous_term
            )

        if not weights:
            weights = infer_interests(profile.completed_courses, catalog, profile.competencies)

        preferred = request.constraints.preferred_subdomains if request.constraints else []
        return blend_preferred(weights, preferred)

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def recommend(self, request: RecommendationRequest) -> RecommendationSet:
        """
        Generate one recommendation set.

        Args:
            request: Student, term and optional overrides

        Returns:
            RecommendationSet; never partial

        Raises:
            UpstreamError: profile or catalog retrieval failed
            UnknownPresetError: unknown scoring or optimizer preset
        """
        start_time = time.perf_counter()

        scoring_name = request.scoring_preset or (
            INTEREST_LED.name if request.previous_term else DEFAULT_SCORING_PRESET
        )
        optimizer_name = request.optimizer_preset or DEFAULT_OPTIMIZER_PRESET
        weights = get_scoring_weights(scoring_name)
        policy = get_optimizer_policy(optimizer_name)

        self.logger.info("Starting recommendation for %s (%s)", request.student_id, request.term)

        # Step 1: Profile
        profile = self._fetch_profile(request.student_id)
        max_load = (
            request.max_credit_load
            or profile.max_credit_load
            or self.default_max_credit_load
        )

        # Step 2: Catalog
        catalog = self._fetch_catalog(request.term, profile.curriculum_version)
        catalog = augment_catalog(
            catalog,
            self.policy_tables.identity_map,
            self.policy_tables.required_codes,
        )
        self.logger.info("Catalog size: %d", len(catalog))

        # Step 3: History
        completed_markers = self._completed_markers(profile)

        # Step 4: Interests
        profile = profile.model_copy(update={
            "interest_weights": self._interest_weights(profile, catalog, request),
            "max_credit_load": max_load,
            "term": request.term,
        })

        # Step 5: Eligibility
        requirements = build_requirements(profile)
        exclude = request.constraints.exclude_courses if request.constraints else []
        candidates = filter_candidates(
            catalog,
            profile,
            exclude,
            completed_markers=completed_markers,
            identity_map=self.policy_tables.identity_map,
            term=request.term,
            excluded_prefixes=self.excluded_prefixes,
        )
        self.logger.info("Eligible candidates: %d", len(candidates))

        # Step 6: Score + rank
        ranked = rank_candidates(score_candidates(candidates, profile, requirements, weights))

        # Step 7: Optimize
        target = min(max_load, TARGET_CREDIT_CAP)
        selected = optimize(ranked, profile, requirements, target, max_load, policy)

        # Step 8: Evaluate + assemble
        metrics = evaluate(
            selected,
            profile,
            requirements,
            completed_markers=completed_markers,
            identity_map=self.policy_tables.identity_map,
        )
        processing_time = (time.perf_counter() - start_time) * 1000

        output = assemble_output(
            student_id=profile.student_id,
            term=request.term,
            selected=selected,
            metrics=metrics,
            max_credit_load=max_load,
            total_candidates=len(candidates),
            processing_time_ms=round(processing_time, 2),
            scoring_preset=weights.name,
            optimizer_preset=policy.name,
            logger=self.logger,
        )

        self.logger.info(
            "Recommended %d courses (%.1f credits) in %.2fms",
            len(selected), output.total_credits, processing_time,
        )
        return output


def get_recommendations(provider, request: RecommendationRequest, **kwargs) -> RecommendationSet:
    """
    Convenience function for one-off requests.

    Args:
        provider: Directory provider
        request: Recommendation request
        **kwargs: Passed to RecommendationEngine

    Returns:
        RecommendationSet
    """
    return RecommendationEngine(provider, **kwargs).recommend(request)
