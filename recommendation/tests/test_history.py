"""
Tests for the parallel history scan.
"""

import threading

from recommendation.logic.contracts import TermRecord
from recommendation.logic.history import aggregate_completed_history


def test_merges_every_term_and_base_markers():
    records = {
        "2024-1": [TermRecord(competency_code="AI-101", template_id="T-1")],
        "2024-2": [TermRecord(competency_code="SE-200", title="Introduction to Testing")],
    }
    seen = []
    lock = threading.Lock()

    def fetch(student_id, term):
        with lock:
            seen.append((student_id, term))
        return records[term]

    markers = aggregate_completed_history(
        fetch,
        "S1",
        ["2024-1", "2024-2", "2024-1", ""],
        base_markers={"OLD1"},
        identity_map={"AI101": "IDN-AI"},
    )

    assert markers == {"OLD1", "AI101", "T1", "IDNAI", "SE200", "NAME:testing"}
    assert sorted(seen) == [("S1", "2024-1"), ("S1", "2024-2")]


def test_failed_term_skipped():
    def fetch(student_id, term):
        if term == "bad":
            raise RuntimeError("boom")
        return [TermRecord(competency_code="OK-1")]

    markers = aggregate_completed_history(fetch, "S1", ["bad", "good"], max_workers=2)
    assert markers == {"OK1"}


def test_no_terms_returns_copy_of_base():
    base = {"A"}

    def fetch(student_id, term):
        raise AssertionError("should not be called")

    markers = aggregate_completed_history(fetch, "S1", [], base_markers=base)
    assert markers == {"A"}
    assert markers is not base
