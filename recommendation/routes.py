"""
Recommendation API Routes

Exposes the recommendation engine and its directory lookups via REST API.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse

from .logic.constants import ALGORITHM_VERSION
from .logic.contracts import RecommendationRequest, RecommendationSet, ScoredCourse
from .logic.exceptions import UnknownPresetError, UpstreamError
from .logic.identity import augment_catalog
from .logic.rules import PolicyTables
from .logic.runner import build_directory_client, load_default_policy_tables, run_recommendations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["recommendations"])


# =============================================================================
# DEPENDENCIES
# =============================================================================

def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) == 2:
        return parts[1]
    return None


def get_provider(token: Optional[str] = Depends(bearer_token)):
    return build_directory_client(token)


def get_policy_tables() -> PolicyTables:
    return load_default_policy_tables()


def _error(status_code: int, error_code: str, message: str, details: str = "") -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "error_code": error_code,
            "message": message,
            "details": details,
        },
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/recommendations", summary="Get course recommendations")
def get_recommendations(
    request: RecommendationRequest,
    provider=Depends(get_provider),
):
    """
    Generate a course set for one student and term.

    **Request Body:**
    - `student_id`, `term` (or `semester`): who and when
    - `max_credit_load`: credit ceiling (defaults to the profile, then 60)
    - `constraints`: courses to exclude, preferred subdomains
    - `previous_term` (or `previous_semester`): seed interests from courses passed in that term ("ALL" for every term)
    - `scoring_preset`, `optimizer_preset`: named weight/optimizer presets

    **Response:**
    - Selected courses in selection order with fit and sub-scores
    - Total credits, per-subdomain coverage, quality metrics, warnings
    """
    try:
        output = run_recommendations(request, provider=provider)
    except UpstreamError as e:
        logger.error("Recommendation failed for %s: %s", request.student_id, e)
        return _error(502, "UPSTREAM_ERROR", "Failed to generate recommendations", str(e))
    except UnknownPresetError as e:
        return _error(400, "INVALID_REQUEST", "Invalid recommendation request", str(e))

    return _serialize_recommendation_set(output)


@router.get("/student-data", summary="Get a student's academic profile")
def get_student_data(
    student_id: Optional[str] = Query(default=None),
    provider=Depends(get_provider),
):
    if not student_id:
        return _error(400, "MISSING_PARAM", "student_id is required")
    try:
        profile = provider.get_student_profile(student_id)
    except UpstreamError as e:
        return _error(502, "UPSTREAM_ERROR", "Failed to fetch student data", str(e))
    return profile.model_dump(mode="json")


@router.get("/course-catalog", summary="Get the course catalog for a term")
def get_course_catalog(
    semester: Optional[str] = Query(default=None),
    curriculum_version: Optional[int] = Query(default=None),
    provider=Depends(get_provider),
    tables: PolicyTables = Depends(get_policy_tables),
):
    if not semester or curriculum_version is None:
        return _error(400, "MISSING_REQUIRED_FIELD", "semester and curriculum_version are required")
    try:
        catalog = provider.get_course_catalog(semester, curriculum_version)
    except UpstreamError as e:
        return _error(502, "UPSTREAM_ERROR", "Failed to fetch catalog", str(e))

    catalog = augment_catalog(catalog, tables.identity_map, tables.required_codes)
    return {
        "term": semester,
        "curriculum_version": curriculum_version,
        "count": len(catalog),
        "courses": [course.model_dump(mode="json") for course in catalog],
    }


def _serialize_course(scored: ScoredCourse) -> Dict[str, Any]:
    """Convert ScoredCourse to JSON-serializable dict."""
    course = scored.course
    return {
        "course_id": course.course_id,
        "course_code": course.course_code,
        "course_name": course.course_name,
        "credit_hours": course.credit_hours,
        "subdomain_id": course.subdomain_id,
        "subdomain_name": course.subdomain_name,
        "is_required": course.is_required,
        "fit_score": round(scored.fit_score, 3),
        "competency_match_score": round(scored.competency_match_score, 3),
        "interest_alignment_score": round(scored.interest_alignment_score, 3),
        "program_progress_score": round(scored.program_progress_score, 3),
        "matched_competencies": scored.matched_competencies,
        "missing_competencies": scored.missing_competencies,
        "reason": scored.reason,
    }


def _serialize_recommendation_set(output: RecommendationSet) -> Dict[str, Any]:
    metrics = output.metrics
    return {
        "status": output.status,
        "student_id": output.student_id,
        "term": output.term,
        "recommended_set": [_serialize_course(s) for s in output.recommended_set],
        "total_credits": output.total_credits,
        "distribution_coverage": output.distribution_coverage,
        "metrics": {
            "skill_coverage": round(metrics.skill_coverage, 3),
            "prerequisite_compliance": round(metrics.prerequisite_compliance, 3),
            "program_progress_fit": round(metrics.program_progress_fit, 3),
            "goodness_score": round(metrics.goodness_score, 3),
        },
        "metadata": output.metadata.model_dump(mode="json"),
        "warnings": output.warnings,
    }


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/recommendations/health", summary="Recommendation engine health check")
def health_check():
    """Check if recommendation engine is operational."""
    return {"status": "healthy", "engine": "recommendation", "version": ALGORITHM_VERSION}
