"""
Course Identity Resolution

The same course can appear under its code, its internal id, an identity
(template) code shared across catalog snapshots, or its title. Everything
that compares courses goes through this module so that aliases collapse to
the same markers.
"""

import re
from typing import Dict, Iterable, List, Optional, Set

from .contracts import Course, TermRecord

NAME_PREFIX = "NAME:"

_NAME_NOISE = (
    "basic ",
    "fundamentals of ",
    "introduction to ",
    "advanced ",
    "principles of ",
)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_code(value: Optional[str]) -> str:
    """Case, whitespace and separator insensitive form of an identifier."""
    if not value:
        return ""
    return value.upper().replace(" ", "").replace("-", "").strip()


def clean_name(value: Optional[str]) -> str:
    """Strip level words and punctuation from a course title."""
    if not value:
        return ""
    text = value.lower()
    for noise in _NAME_NOISE:
        text = text.replace(noise, "")
    return _NON_ALNUM.sub("", text)


def name_marker(value: Optional[str]) -> str:
    cleaned = clean_name(value)
    return f"{NAME_PREFIX}{cleaned}" if cleaned else ""


def course_aliases(course: Course) -> Set[str]:
    """Every marker under which this course may have been recorded."""
    aliases = {
        normalize_code(course.course_id),
        normalize_code(course.course_code),
        normalize_code(course.identity_code),
        name_marker(course.course_name),
    }
    aliases.discard("")
    return aliases


def canonical_key(course: Course) -> str:
    """One key per underlying course, preferring the identity code."""
    for candidate in (course.identity_code, course.course_code, course.course_id):
        key = normalize_code(candidate)
        if key:
            return key
    return ""


def normalize_identity_map(raw: Dict[str, str]) -> Dict[str, str]:
    return {normalize_code(k): v for k, v in raw.items() if normalize_code(k)}


def build_completed_markers(
    course_ids: Iterable[str],
    identity_map: Optional[Dict[str, str]] = None,
) -> Set[str]:
    """Normalized completed ids plus the identity codes they map to."""
    identity_map = identity_map or {}
    markers: Set[str] = set()
    for course_id in course_ids:
        key = normalize_code(course_id)
        if not key:
            continue
        markers.add(key)
        mapped = identity_map.get(key)
        if mapped:
            markers.add(normalize_code(mapped))
    return markers


def record_markers(
    record: TermRecord,
    identity_map: Optional[Dict[str, str]] = None,
) -> Set[str]:
    """Markers contributed by one recorded competency card."""
    identity_map = identity_map or {}
    markers = {
        normalize_code(record.competency_code),
        normalize_code(record.competency_id),
        normalize_code(record.template_id),
        name_marker(record.title),
    }
    mapped = identity_map.get(normalize_code(record.competency_code))
    if mapped:
        markers.add(normalize_code(mapped))
    markers.discard("")
    return markers


def is_completed(course: Course, completed_markers: Set[str]) -> bool:
    return not course_aliases(course).isdisjoint(completed_markers)


def augment_catalog(
    catalog: List[Course],
    identity_map: Optional[Dict[str, str]] = None,
    required_codes: Optional[Set[str]] = None,
) -> List[Course]:
    """
    Inject identity codes and rule-table required flags into catalog entries.

    Args:
        catalog: Courses as fetched
        identity_map: normalized course code -> identity code
        required_codes: normalized codes the rule table marks as required

    Returns:
        New Course objects; the input list is left untouched
    """
    identity_map = identity_map or {}
    required_codes = required_codes or set()
    augmented = []
    for course in catalog:
        update = {}
        code_key = normalize_code(course.course_code)
        mapped = identity_map.get(code_key)
        if mapped and not course.identity_code:
            update["identity_code"] = mapped
        if code_key in required_codes or normalize_code(course.course_id) in required_codes:
            update["is_required"] = True
            update["is_core"] = True
        augmented.append(course.model_copy(update=update) if update else course)
    return augmented
