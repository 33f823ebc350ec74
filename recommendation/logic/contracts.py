"""
Data Contracts for the Course Recommendation Engine

Defines Pydantic models for the request, the student profile and catalog
(inputs), the scored candidates (intermediate) and the RecommendationSet
(output). These contracts are the API boundary for the engine.
"""

from datetime import datetime
from typing import List, Optional, Dict, Set
from pydantic import AliasChoices, BaseModel, Field


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class RecommendationFilters(BaseModel):
    """Caller-supplied narrowing of the candidate pool."""
    exclude_courses: List[str] = Field(default_factory=list)
    preferred_subdomains: List[str] = Field(default_factory=list)


class RecommendationRequest(BaseModel):
    """One recommendation request for one student and one term."""
    student_id: str
    term: str = Field(validation_alias=AliasChoices("term", "semester"))
    max_credit_load: Optional[float] = Field(default=None, gt=0)
    max_sets: Optional[int] = Field(default=None, ge=1)
    constraints: Optional[RecommendationFilters] = None
    # "ALL" seeds interests from every recorded competency
    previous_term: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("previous_term", "previous_semester"),
    )
    scoring_preset: Optional[str] = None
    optimizer_preset: Optional[str] = None


class CreditStatus(BaseModel):
    """Earned / required / in-progress credit counts."""
    earned: float = 0.0
    required: float = 0.0
    working: float = 0.0


class StudentProfile(BaseModel):
    """
    A student's academic record as reconstructed from the directory service.
    Rebuilt for every request; never persisted.
    """
    student_id: str
    university_code: str = ""
    curriculum_version: int = 0

    # competency code -> grade (0-4)
    competencies: Dict[str, float] = Field(default_factory=dict)
    # competency code -> term name it was recorded in
    course_terms: Dict[str, str] = Field(default_factory=dict)
    completed_courses: Set[str] = Field(default_factory=set)

    distribution_credits: Dict[str, CreditStatus] = Field(default_factory=dict)
    required_competencies: Set[str] = Field(default_factory=set)
    total_credits: CreditStatus = Field(default_factory=CreditStatus)

    # subdomain -> weight, sums to 1 when present
    interest_weights: Dict[str, float] = Field(default_factory=dict)
    max_credit_load: float = 0.0
    term: str = ""


class Course(BaseModel):
    """A catalog entry. Immutable for the duration of one request."""
    course_id: str
    course_code: str = ""
    identity_code: str = ""  # alias shared across catalog snapshots
    course_name: str = ""
    description: str = ""
    credit_hours: float = Field(default=0.0, ge=0.0)
    subdomain_id: str = ""
    subdomain_name: str = ""
    required_competencies: Dict[str, float] = Field(default_factory=dict)
    teaches_competencies: Set[str] = Field(default_factory=set)
    prerequisites: Set[str] = Field(default_factory=set)
    term_offered: str = ""
    is_core: bool = False
    is_required: bool = False

    class Config:
        frozen = True


class CurriculumRequirements(BaseModel):
    """Degree requirements for one curriculum version. Read-only."""
    curriculum_version: int = 0
    required_competencies: Set[str] = Field(default_factory=set)
    distribution_requirements: Dict[str, float] = Field(default_factory=dict)
    total_credits_required: float = 0.0


class TermRecord(BaseModel):
    """One competency card recorded for a student in a given term."""
    competency_id: str = ""
    template_id: str = ""
    competency_code: str = ""
    title: str = ""
    grade: float = 0.0
    status: str = ""
    term: str = ""


# =============================================================================
# INTERMEDIATE DATA STRUCTURES
# =============================================================================

class ScoredCourse(BaseModel):
    """
    A candidate with computed scores.
    Produced once by the scoring stage; the optimizer only selects/reorders.
    """
    course: Course
    fit_score: float = Field(ge=0.0, le=1.0)
    competency_match_score: float = Field(ge=0.0, le=1.0)
    interest_alignment_score: float = Field(ge=0.0, le=1.0)
    program_progress_score: float = Field(ge=0.0, le=1.0)
    matched_competencies: List[str] = Field(default_factory=list)
    missing_competencies: List[str] = Field(default_factory=list)
    reason: str = ""
    rank_index: int = 0  # catalog position, tie-break for equal fit

    class Config:
        frozen = True


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class EvaluationMetrics(BaseModel):
    """Quality of a finished recommendation set."""
    skill_coverage: float = Field(ge=0.0, le=1.0)
    prerequisite_compliance: float = Field(ge=0.0, le=1.0)
    program_progress_fit: float = Field(ge=0.0, le=1.0)
    goodness_score: float = Field(ge=0.0, le=1.0)


class RecommendationMetadata(BaseModel):
    generation_timestamp: datetime
    algorithm_version: str
    processing_time_ms: float = 0.0
    scoring_preset: str = ""
    optimizer_preset: str = ""


class RecommendationSet(BaseModel):
    """
    Output contract for the engine.
    Selected courses in selection order plus totals and quality metrics.
    """
    student_id: str
    term: str
    recommended_set: List[ScoredCourse] = Field(default_factory=list)
    total_credits: float = 0.0
    distribution_coverage: Dict[str, float] = Field(default_factory=dict)
    metrics: EvaluationMetrics
    metadata: RecommendationMetadata
    status: str = "success"
    warnings: List[str] = Field(default_factory=list)
