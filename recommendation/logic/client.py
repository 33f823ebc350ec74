"""
Directory Service Client

Fetches student records and course catalogs from the academic directory
service over HTTP. Responses are decoded by the adapter; this module only
moves bytes and decides which failures are fatal.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from .adapter import (
    build_profile,
    decode_cards,
    decode_courses,
    decode_graduation_status,
    decode_identity,
    decode_subdomains,
)
from .contracts import Course, StudentProfile, TermRecord
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)


class DirectoryClient:
    """
    Read-only client for the directory service.

    Profile identity and the subdomain list are required; competency cards,
    graduation status and individual subdomain catalogs degrade to empty
    data with a warning.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.university_code = ""

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        cookies = {"jwt": self.token} if self.token else None
        response = self.session.get(
            f"{self.base_url}{path}",
            params=params,
            cookies=cookies,
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise requests.HTTPError(
                f"status {response.status_code}: {response.text[:200]}",
                response=response,
            )
        return response.json()

    # -------------------------------------------------------------------------
    # Provider interface
    # -------------------------------------------------------------------------

    def get_student_profile(self, student_id: str) -> StudentProfile:
        try:
            identity = decode_identity(
                self._get("/student/identity", {"student_id": student_id})
            )
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError("student profile", e) from e

        self.university_code = identity["university_code"]

        cards: List[TermRecord] = []
        try:
            cards = decode_cards(self._get("/student/cards", {"student_id": student_id}))
        except (requests.RequestException, ValueError) as e:
            logger.warning("Competency cards unavailable for %s: %s", student_id, e)

        graduation = None
        try:
            graduation = decode_graduation_status(
                self._get("/student/graduation/status", {"student_id": student_id})
            )
        except (requests.RequestException, ValueError) as e:
            logger.warning("Graduation status unavailable for %s: %s", student_id, e)

        return build_profile(student_id, identity, cards, graduation)

    def get_term_records(self, student_id: str, term: str) -> List[TermRecord]:
        try:
            payload = self._get(
                "/student/cards/semester",
                {"student_id": student_id, "semester_name": term},
            )
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError(f"term records for {term}", e) from e
        return decode_cards(payload, term=term)

    def get_course_catalog(self, term: str, curriculum_version: int) -> List[Course]:
        params: Dict[str, Any] = {"curriculum_version": curriculum_version}
        if self.university_code:
            params["university_code"] = self.university_code
        try:
            subdomains = decode_subdomains(self._get("/subdomain", params))
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError("course catalog", e) from e

        courses: List[Course] = []
        for subdomain_id in subdomains:
            query = dict(params, subdomain_id=subdomain_id, semester_name=term)
            try:
                courses.extend(decode_courses(self._get("/competency", query), subdomain_id))
            except (requests.RequestException, ValueError) as e:
                logger.warning("Failed to fetch subdomain %s: %s", subdomain_id, e)
                continue

        logger.info("Fetched %d catalog courses across %d subdomains", len(courses), len(subdomains))
        return courses
