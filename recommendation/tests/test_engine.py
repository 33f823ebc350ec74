"""
End-to-end tests for the recommendation engine with in-memory providers.
"""

import logging

import pytest

from recommendation.logic.contracts import (
    CreditStatus,
    RecommendationFilters,
    RecommendationRequest,
    StudentProfile,
    TermRecord,
)
from recommendation.logic.engine import RecommendationEngine, build_requirements
from recommendation.logic.exceptions import UnknownPresetError, UpstreamError
from recommendation.logic.rules import PolicyTables


def _ids(output):
    return [s.course.course_id for s in output.recommended_set]


class BrokenProvider:
    def __init__(self, fail_profile=True, profile=None):
        self.fail_profile = fail_profile
        self.profile = profile

    def get_student_profile(self, student_id):
        if self.fail_profile:
            raise ConnectionError("directory down")
        return self.profile

    def get_course_catalog(self, term, curriculum_version):
        raise TimeoutError("catalog timed out")


def test_scenario_end_to_end(fake_provider_cls, scenario_profile, scenario_catalog):
    engine = RecommendationEngine(fake_provider_cls(scenario_profile, scenario_catalog))
    output = engine.recommend(RecommendationRequest(student_id="S1", term="Fall 2025"))

    assert _ids(output) == ["C2", "C3"]
    assert output.status == "success"
    assert output.total_credits == 6.0
    assert output.metadata.scoring_preset == "balanced"
    assert output.metadata.optimizer_preset == "diverse"
    assert output.metrics.skill_coverage == 1.0
    assert any("Low recommendation count" in w for w in output.warnings)


def test_profile_failure_is_upstream_error():
    engine = RecommendationEngine(BrokenProvider())
    with pytest.raises(UpstreamError) as exc:
        engine.recommend(RecommendationRequest(student_id="S1", term="T"))
    assert exc.value.source == "student profile"
    assert "directory down" in str(exc.value)


def test_catalog_failure_is_upstream_error(scenario_profile):
    engine = RecommendationEngine(BrokenProvider(fail_profile=False, profile=scenario_profile))
    with pytest.raises(UpstreamError) as exc:
        engine.recommend(RecommendationRequest(student_id="S1", term="T"))
    assert exc.value.source == "course catalog"


def test_unknown_preset_rejected(fake_provider_cls, scenario_profile, scenario_catalog):
    engine = RecommendationEngine(fake_provider_cls(scenario_profile, scenario_catalog))
    with pytest.raises(UnknownPresetError):
        engine.recommend(RecommendationRequest(student_id="S1", term="T", scoring_preset="nope"))


def test_previous_term_defaults_to_interest_led(fake_provider_cls, course_factory):
    profile = StudentProfile(student_id="S", competencies={"AI-100": 3.0, "SE-100": 0.5})
    catalog = [
        course_factory("SE1", course_code="SE-200", subdomain_id="SE"),
        course_factory("AI1", course_code="AI-200", subdomain_id="AI"),
    ]
    engine = RecommendationEngine(fake_provider_cls(profile, catalog))

    output = engine.recommend(
        RecommendationRequest(student_id="S", term="T", previous_term="ALL", max_credit_load=3)
    )

    assert output.metadata.scoring_preset == "interest_led"
    assert _ids(output) == ["AI1"]
    assert output.recommended_set[0].interest_alignment_score == pytest.approx(1.0)


def test_previous_term_records_from_provider(history_provider_cls, course_factory):
    profile = StudentProfile(student_id="S")
    catalog = [
        course_factory("AI1", course_code="AI-200", subdomain_id="AI"),
        course_factory("SE1", course_code="SE-200", subdomain_id="SE"),
    ]
    records = {"Spring 2025": [TermRecord(competency_code="SE-101", grade=3.0)]}
    engine = RecommendationEngine(history_provider_cls(profile, catalog, records))

    output = engine.recommend(
        RecommendationRequest(student_id="S", term="T", previous_term="Spring 2025", max_credit_load=3)
    )

    assert _ids(output) == ["SE1"]


def test_failed_history_term_is_skipped(history_provider_cls, course_factory, caplog):
    profile = StudentProfile(
        student_id="S",
        competencies={"X": 2.0, "Y": 3.0},
        course_terms={"X": "2024-1", "Y": "2024-2"},
    )
    catalog = [course_factory("H1"), course_factory("H2"), course_factory("H3")]
    records = {"2024-2": [TermRecord(competency_code="H2", grade=3.0, status="recorded")]}
    provider = history_provider_cls(profile, catalog, records, failing={"2024-1"})

    with caplog.at_level(logging.WARNING):
        output = RecommendationEngine(provider).recommend(RecommendationRequest(student_id="S", term="T"))

    assert _ids(output) == ["H1", "H3"]
    assert "2024-1" in caplog.text


def test_policy_tables_and_constraints(fake_provider_cls, course_factory):
    profile = StudentProfile(student_id="S", completed_courses={"OLD-1"})
    catalog = [
        course_factory("P1", course_code="NEW-1"),
        course_factory("P2", course_code="CORE-9"),
        course_factory("P3"),
        course_factory("SOF-1"),
        course_factory("P4", subdomain_id="Math"),
    ]
    tables = PolicyTables(required_codes={"CORE9"}, identity_map={"OLD1": "IDN-1", "NEW1": "IDN-1"})
    engine = RecommendationEngine(
        fake_provider_cls(profile, catalog),
        policy_tables=tables,
        excluded_prefixes=("SOF-",),
    )

    output = engine.recommend(RecommendationRequest(
        student_id="S",
        term="T",
        constraints=RecommendationFilters(exclude_courses=["P3"], preferred_subdomains=["Math"]),
    ))

    ids = _ids(output)
    assert ids[0] == "P2"
    assert set(ids) == {"P2", "P4"}
    assert output.recommended_set[0].course.is_required
    by_id = {s.course.course_id: s for s in output.recommended_set}
    assert by_id["P4"].interest_alignment_score == pytest.approx(1.0)


def test_overload_warning_and_profile_load(fake_provider_cls, scenario_profile, scenario_catalog):
    heavy = scenario_profile.model_copy(update={"max_credit_load": 72.0})
    output = RecommendationEngine(fake_provider_cls(heavy, scenario_catalog)).recommend(
        RecommendationRequest(student_id="S1", term="T")
    )
    assert any("overload" in w for w in output.warnings)

    light = RecommendationEngine(fake_provider_cls(scenario_profile, scenario_catalog)).recommend(
        RecommendationRequest(student_id="S1", term="T", max_credit_load=3)
    )
    assert _ids(light) == ["C2"]
    assert not any("overload" in w for w in light.warnings)


def test_empty_catalog(fake_provider_cls, scenario_profile):
    output = RecommendationEngine(fake_provider_cls(scenario_profile, [])).recommend(
        RecommendationRequest(student_id="S1", term="T")
    )
    assert output.recommended_set == []
    assert output.metrics.prerequisite_compliance == 1.0
    assert output.metrics.skill_coverage == 0.0
    assert "No eligible courses found for this term." in output.warnings


def test_build_requirements_defaults():
    defaults = build_requirements(StudentProfile(student_id="S", required_competencies={"R"}))
    assert defaults.distribution_requirements == {"AI": 36.0, "SE": 24.0, "Math": 12.0}
    assert defaults.total_credits_required == 120.0
    assert defaults.required_competencies == {"R"}

    profile = StudentProfile(
        student_id="S",
        distribution_credits={"AI": CreditStatus(required=30.0), "Free": CreditStatus(earned=3.0)},
        total_credits=CreditStatus(required=132.0),
    )
    reported = build_requirements(profile)
    assert reported.distribution_requirements == {"AI": 30.0}
    assert reported.total_credits_required == 132.0


def test_prerequisite_listed_under_identity_alias(fake_provider_cls, course_factory):
    profile = StudentProfile(student_id="S", completed_courses={"OLD-101"})
    catalog = [course_factory("ADV", prerequisites={"IDN-ML"})]
    tables = PolicyTables(identity_map={"OLD101": "IDN-ML"})
    engine = RecommendationEngine(fake_provider_cls(profile, catalog), policy_tables=tables)

    output = engine.recommend(RecommendationRequest(student_id="S", term="T"))

    assert _ids(output) == ["ADV"]
    assert output.metrics.prerequisite_compliance == 1.0
    assert "No eligible courses found for this term." not in output.warnings
