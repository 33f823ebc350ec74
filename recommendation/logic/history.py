"""
History Aggregation

Builds the "already completed" marker set from per-term academic records.
Terms are fetched in parallel (one task per term, bounded pool). Each task
returns its own markers; only the calling thread merges them, so no shared
structure is written concurrently. A term that fails to load is logged and
skipped.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Set

from .contracts import TermRecord
from .identity import record_markers

FetchTermRecords = Callable[[str, str], List[TermRecord]]


def _term_markers(
    fetch_records: FetchTermRecords,
    student_id: str,
    term: str,
    identity_map: Dict[str, str],
) -> Set[str]:
    markers: Set[str] = set()
    for record in fetch_records(student_id, term):
        markers |= record_markers(record, identity_map)
    return markers


def aggregate_completed_history(
    fetch_records: FetchTermRecords,
    student_id: str,
    terms: Iterable[str],
    base_markers: Optional[Set[str]] = None,
    identity_map: Optional[Dict[str, str]] = None,
    max_workers: int = 4,
    logger: Optional[logging.Logger] = None,
) -> Set[str]:
    """
    Merge completed-course markers from every term a student has records in.

    Args:
        fetch_records: (student_id, term) -> records, usually the provider's
            get_term_records
        student_id: Student to scan
        terms: Term names; duplicates and blanks are ignored
        base_markers: Markers already known from the profile
        identity_map: normalized code -> identity code
        max_workers: Upper bound on concurrent fetches
        logger: Where to report progress and skipped terms

    Returns:
        New set containing base markers plus every term's markers
    """
    logger = logger or logging.getLogger(__name__)
    identity_map = identity_map or {}
    completed: Set[str] = set(base_markers or ())
    unique_terms = sorted({t for t in terms if t})

    if not unique_terms:
        return completed

    logger.info("Scanning %d terms for completed course markers", len(unique_terms))

    workers = max(1, min(max_workers, len(unique_terms)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(_term_markers, fetch_records, student_id, term, identity_map): term
            for term in unique_terms
        }
        for future in as_completed(futures):
            term = futures[future]
            try:
                markers = future.result()
            except Exception as e:
                logger.warning("Skipping term %r for student %s: %s", term, student_id, e)
                continue
            completed |= markers

    logger.info("History scan complete. Total unique markers: %d", len(completed))
    return completed
