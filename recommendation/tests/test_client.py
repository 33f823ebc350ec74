"""
Tests for the directory client against a stubbed requests session.
"""

import pytest
import requests

from recommendation.logic.client import DirectoryClient
from recommendation.logic.exceptions import UpstreamError

BASE = "https://directory.test/api"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = str(payload)

    def json(self):
        return self._payload


class FakeSession:
    """Routes GETs by path; a value of an int is returned as that status code."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, cookies=None, timeout=None):
        path = url[len(BASE):]
        self.calls.append((path, dict(params or {}), cookies, timeout))
        route = self.routes.get(path)
        if callable(route):
            route = route(params or {})
        if route is None:
            raise requests.ConnectionError(f"no route for {path}")
        if isinstance(route, int):
            return FakeResponse(status_code=route, payload={"error": "nope"})
        return FakeResponse(payload=route)


IDENTITY = {"student": {"id": "S1", "university_code": "CMKL", "curriculum_version": 3}}
CARDS = {"card_info": {"cards": [
    {"competency_code": "AI-101", "mastery_level": 3.0, "status": "recorded", "semester_name": "2024-1"},
]}}
GRADUATION = {"graduationstatus": {
    "required_course_not_taken": ["ML-2"],
    "overall_credit": {"total_earned_credits": 30, "total_required_credits": 120},
}}


def _client(routes, token="tok"):
    session = FakeSession(routes)
    return DirectoryClient(BASE + "/", token=token, timeout=5, session=session), session


def test_student_profile():
    client, session = _client({
        "/student/identity": IDENTITY,
        "/student/cards": CARDS,
        "/student/graduation/status": GRADUATION,
    })
    profile = client.get_student_profile("S1")

    assert profile.university_code == "CMKL"
    assert profile.curriculum_version == 3
    assert profile.completed_courses == {"AI-101"}
    assert profile.required_competencies == {"ML-2"}
    assert profile.total_credits.earned == 30.0
    assert session.calls[0][2] == {"jwt": "tok"}
    assert session.calls[0][3] == 5


def test_identity_failure_is_fatal():
    client, _ = _client({"/student/identity": 500})
    with pytest.raises(UpstreamError) as exc:
        client.get_student_profile("S1")
    assert exc.value.source == "student profile"


def test_cards_and_graduation_degrade(caplog):
    client, _ = _client({"/student/identity": IDENTITY, "/student/cards": 503})
    profile = client.get_student_profile("S1")
    assert profile.competencies == {}
    assert profile.required_competencies == set()
    assert "Competency cards unavailable" in caplog.text


def test_term_records():
    client, session = _client({"/student/cards/semester": CARDS}, token=None)
    records = client.get_term_records("S1", "2024-1")
    assert [r.competency_code for r in records] == ["AI-101"]
    assert session.calls[0][1] == {"student_id": "S1", "semester_name": "2024-1"}
    assert session.calls[0][2] is None


def test_term_records_failure():
    client, _ = _client({"/student/cards/semester": 404})
    with pytest.raises(UpstreamError):
        client.get_term_records("S1", "2024-1")


def test_course_catalog_skips_failed_subdomain():
    def competencies(params):
        if params["subdomain_id"] == "SE":
            return 500
        return {"competencies": [{"competency_code": "AI-301", "credits": 6}]}

    client, session = _client({
        "/subdomain": {"pillars": [{"subdomains": [{"id": "AI"}, {"id": "SE"}]}]},
        "/competency": competencies,
    })
    courses = client.get_course_catalog("Fall 2025", 3)

    assert [c.course_code for c in courses] == ["AI-301"]
    assert courses[0].subdomain_id == "AI"
    assert session.calls[1][1]["semester_name"] == "Fall 2025"


def test_course_catalog_subdomain_list_failure():
    client, _ = _client({"/subdomain": 502})
    with pytest.raises(UpstreamError) as exc:
        client.get_course_catalog("Fall 2025", 3)
    assert exc.value.source == "course catalog"
