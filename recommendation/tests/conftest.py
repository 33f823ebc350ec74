"""Shared fixtures for the recommendation tests."""

from typing import Dict, List, Optional

import pytest

from recommendation.logic.contracts import (
    Course,
    CreditStatus,
    CurriculumRequirements,
    StudentProfile,
    TermRecord,
)


def make_course(course_id: str, **kwargs) -> Course:
    kwargs.setdefault("course_code", course_id)
    kwargs.setdefault("course_name", f"Course {course_id}")
    kwargs.setdefault("credit_hours", 3.0)
    return Course(course_id=course_id, **kwargs)


class FakeProvider:
    """In-memory directory provider."""

    def __init__(self, profile: StudentProfile, catalog: List[Course]):
        self.profile = profile
        self.catalog = catalog
        self.catalog_calls = []

    def get_student_profile(self, student_id: str) -> StudentProfile:
        return self.profile

    def get_course_catalog(self, term: str, curriculum_version: int) -> List[Course]:
        self.catalog_calls.append((term, curriculum_version))
        return list(self.catalog)


class HistoryProvider(FakeProvider):
    """Provider that also serves per-term records; terms in `failing` raise."""

    def __init__(
        self,
        profile: StudentProfile,
        catalog: List[Course],
        records: Dict[str, List[TermRecord]],
        failing: Optional[set] = None,
    ):
        super().__init__(profile, catalog)
        self.records = records
        self.failing = failing or set()

    def get_term_records(self, student_id: str, term: str) -> List[TermRecord]:
        if term in self.failing:
            raise ConnectionError(f"term {term} unavailable")
        return self.records.get(term, [])


@pytest.fixture
def scenario_profile() -> StudentProfile:
    return StudentProfile(
        student_id="S1",
        competencies={"A": 3.0},
        completed_courses={"C1"},
        required_competencies={"B"},
    )


@pytest.fixture
def scenario_requirements() -> CurriculumRequirements:
    return CurriculumRequirements(required_competencies={"B"})


@pytest.fixture
def scenario_catalog() -> List[Course]:
    return [
        make_course("C1"),
        make_course("C2", required_competencies={"A": 2.0}, teaches_competencies={"B"}),
        make_course("C3"),
    ]


@pytest.fixture
def progress_profile() -> StudentProfile:
    return StudentProfile(
        student_id="S2",
        competencies={"PY": 3.5, "ML1": 2.0, "DB": 1.0},
        completed_courses={"CS101", "AI201"},
        distribution_credits={
            "AI": CreditStatus(earned=12.0, required=36.0),
            "SE": CreditStatus(earned=24.0, required=24.0),
        },
        required_competencies={"ML2", "SEC"},
        total_credits=CreditStatus(earned=40.0, required=120.0),
        interest_weights={"AI": 0.7, "SE": 0.3},
    )


@pytest.fixture
def progress_requirements() -> CurriculumRequirements:
    return CurriculumRequirements(
        required_competencies={"ML2", "SEC"},
        distribution_requirements={"AI": 36.0, "SE": 24.0, "Math": 12.0},
        total_credits_required=120.0,
    )


@pytest.fixture
def mixed_catalog() -> List[Course]:
    return [
        make_course("AI301", subdomain_id="AI", subdomain_name="Artificial Intelligence",
                    required_competencies={"ML1": 2.0}, teaches_competencies={"ML2"}, credit_hours=6.0),
        make_course("AI302", subdomain_id="AI", required_competencies={"ML1": 3.0},
                    teaches_competencies={"DL"}, credit_hours=6.0),
        make_course("AI303", subdomain_id="AI", teaches_competencies={"NLP"}, credit_hours=3.0),
        make_course("AI304", subdomain_id="AI", teaches_competencies={"CV"}, credit_hours=3.0),
        make_course("AI305", subdomain_id="AI", teaches_competencies={"RL"}, credit_hours=3.0),
        make_course("SE210", subdomain_id="SE", teaches_competencies={"SEC"}, credit_hours=3.0),
        make_course("SE220", subdomain_id="SE", teaches_competencies={"OPS"}, credit_hours=3.0),
        make_course("MA110", subdomain_id="Math", required_competencies={"PY": 1.0},
                    teaches_competencies={"STATS"}, credit_hours=4.0),
        make_course("MA120", subdomain_id="Math", teaches_competencies={"LINALG"}, credit_hours=4.0),
    ]


@pytest.fixture
def course_factory():
    return make_course


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def history_provider_cls():
    return HistoryProvider
