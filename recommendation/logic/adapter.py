"""
Data Adapter for Recommendation Engine

Transforms raw directory-service payloads into the engine's contracts.

This is a pure READ + TRANSFORM layer:
- NO scoring logic
- NO network calls
- Heterogeneous payload shapes are resolved here and never reach the core
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .contracts import Course, CreditStatus, StudentProfile, TermRecord

RECORDED_STATUS = "recorded"


def _safe_get(data: Optional[Dict], *keys, default=None):
    """Safely traverse nested dicts."""
    if data is None:
        return default
    result = data
    for key in keys:
        if isinstance(result, dict):
            result = result.get(key)
        else:
            return default
        if result is None:
            return default
    return result


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _item_code(item: Any) -> str:
    """Code of a competency reference given as a string or an object."""
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        for key in ("competency_code", "code", "course_code", "id"):
            value = _as_str(item.get(key))
            if value:
                return value
    return ""


# =============================================================================
# COMPETENCY REFERENCES
# =============================================================================

def decode_required_competencies(raw: Any) -> Set[str]:
    """
    Decode a set of competency codes.

    Accepts a list of strings, a list of objects carrying a code, a mapping
    keyed by code, or a single code string.
    """
    if raw is None:
        return set()
    if isinstance(raw, str):
        return {raw.strip()} if raw.strip() else set()
    if isinstance(raw, dict):
        items: Iterable[Any] = raw.keys()
    elif isinstance(raw, (list, tuple, set)):
        items = raw
    else:
        return set()
    codes = {_item_code(item) for item in items}
    codes.discard("")
    return codes


def decode_minimum_grades(raw: Any) -> Dict[str, float]:
    """
    Decode competency -> minimum grade.

    A bare code (string) carries no minimum and is stored as 0.0.
    """
    if not raw:
        return {}
    if isinstance(raw, dict):
        return {str(k).strip(): _as_float(v) for k, v in raw.items() if str(k).strip()}
    grades: Dict[str, float] = {}
    if isinstance(raw, (list, tuple)):
        for item in raw:
            code = _item_code(item)
            if not code:
                continue
            if isinstance(item, dict):
                grades[code] = _as_float(item.get("min_grade", item.get("grade")))
            else:
                grades[code] = 0.0
    return grades


def decode_credit_status(raw: Optional[Dict[str, Any]]) -> CreditStatus:
    return CreditStatus(
        earned=_as_float(_safe_get(raw, "total_earned_credits", default=_safe_get(raw, "earned"))),
        required=_as_float(_safe_get(raw, "total_required_credits", default=_safe_get(raw, "required"))),
        working=_as_float(_safe_get(raw, "total_working_credits", default=_safe_get(raw, "working"))),
    )


# =============================================================================
# STUDENT PAYLOADS
# =============================================================================

def decode_identity(payload: Dict[str, Any]) -> Dict[str, Any]:
    student = _safe_get(payload, "student", default={}) or {}
    return {
        "student_id": _as_str(student.get("id")),
        "university_code": _as_str(student.get("university_code")),
        "curriculum_version": int(_as_float(student.get("curriculum_version"))),
    }


def decode_cards(payload: Dict[str, Any], term: str = "") -> List[TermRecord]:
    """Competency cards from `card_info.cards`."""
    cards = _safe_get(payload, "card_info", "cards", default=[]) or []
    records = []
    for card in cards:
        if not isinstance(card, dict):
            continue
        records.append(TermRecord(
            competency_id=_as_str(card.get("id")),
            template_id=_as_str(card.get("template_id")),
            competency_code=_as_str(card.get("competency_code")),
            title=_as_str(card.get("title")),
            grade=_as_float(card.get("mastery_level")),
            status=_as_str(card.get("status")),
            term=_as_str(card.get("semester_name")) or term,
        ))
    return records


def decode_graduation_status(
    payload: Dict[str, Any],
) -> Tuple[Set[str], Dict[str, CreditStatus], CreditStatus]:
    """(outstanding required codes, per-subdomain credits, overall credits)."""
    status = _safe_get(payload, "graduationstatus", default={}) or {}
    required = decode_required_competencies(status.get("required_course_not_taken"))
    distribution = {
        str(subdomain): decode_credit_status(raw)
        for subdomain, raw in (status.get("distribution_area_credit") or {}).items()
        if isinstance(raw, dict)
    }
    total = decode_credit_status(status.get("overall_credit"))
    return required, distribution, total


def build_profile(
    student_id: str,
    identity: Dict[str, Any],
    cards: List[TermRecord],
    graduation: Optional[Tuple[Set[str], Dict[str, CreditStatus], CreditStatus]] = None,
) -> StudentProfile:
    """Assemble a StudentProfile from the decoded directory payloads."""
    competencies: Dict[str, float] = {}
    course_terms: Dict[str, str] = {}
    completed: Set[str] = set()

    for card in cards:
        if not card.competency_code:
            continue
        competencies[card.competency_code] = card.grade
        if card.term:
            course_terms[card.competency_code] = card.term
        if card.status.lower() == RECORDED_STATUS:
            completed.add(card.competency_code)

    required, distribution, total = graduation or (set(), {}, CreditStatus())

    return StudentProfile(
        student_id=identity.get("student_id") or student_id,
        university_code=identity.get("university_code", ""),
        curriculum_version=identity.get("curriculum_version", 0),
        competencies=competencies,
        course_terms=course_terms,
        completed_courses=completed,
        distribution_credits=distribution,
        required_competencies=required,
        total_credits=total,
    )


# =============================================================================
# CATALOG PAYLOADS
# =============================================================================

def decode_subdomains(payload: Dict[str, Any]) -> List[str]:
    subdomains = []
    for pillar in _safe_get(payload, "pillars", default=[]) or []:
        for subdomain in _safe_get(pillar, "subdomains", default=[]) or []:
            subdomain_id = _as_str(_safe_get(subdomain, "id"))
            if subdomain_id:
                subdomains.append(subdomain_id)
    return subdomains


def course_from_dict(raw: Dict[str, Any], subdomain_id: str = "") -> Course:
    """
    Build a Course from one catalog entry.

    The id falls back to the code when the service leaves it blank.
    """
    code = _as_str(raw.get("competency_code") or raw.get("course_code"))
    course_id = _as_str(raw.get("id") or raw.get("course_id")) or code
    return Course(
        course_id=course_id,
        course_code=code,
        identity_code=_as_str(raw.get("identity_code") or raw.get("template_id")),
        course_name=_as_str(raw.get("title") or raw.get("course_name")),
        description=_as_str(raw.get("description")),
        credit_hours=max(0.0, _as_float(raw.get("credits", raw.get("credit_hours")))),
        subdomain_id=_as_str(raw.get("subdomain_id")) or subdomain_id,
        subdomain_name=_as_str(raw.get("subdomain_name")),
        required_competencies=decode_minimum_grades(raw.get("required_competencies")),
        teaches_competencies=decode_required_competencies(raw.get("teaches_competencies")),
        prerequisites=decode_required_competencies(raw.get("prerequisites")),
        term_offered=_as_str(raw.get("semester_offered") or raw.get("term_offered")),
        is_core=bool(raw.get("is_core", False)),
        is_required=bool(raw.get("is_required", False)),
    )


def decode_courses(payload: Dict[str, Any], subdomain_id: str) -> List[Course]:
    entries = _safe_get(payload, "competencies", default=[]) or []
    return [course_from_dict(e, subdomain_id) for e in entries if isinstance(e, dict)]
