"""Filtered list queries for contacts and enrollments."""

import re
from typing import Any, Dict, Iterable, List, Optional

from database import get_documents
from schemas import CONTACTS, ENROLLMENTS

CONTACT_SEARCH_FIELDS = ("name", "email", "course", "contactId")
ENROLLMENT_SEARCH_FIELDS = ("studentInfo.name", "studentInfo.email", "courseInfo.title", "enrollmentId")

CONTACT_SORT = [("submittedAt", -1)]
ENROLLMENT_SORT = [("invoiceInfo.enrollmentDate", -1)]

ALL_COURSES = "all"


def _search_clause(search: str, fields: Iterable[str]) -> List[Dict[str, Any]]:
    # literal substring, not a user-supplied pattern
    pattern = re.escape(search)
    return [{field: {"$regex": pattern, "$options": "i"}} for field in fields]


def contact_filter(search: Optional[str] = None) -> Dict[str, Any]:
    search = (search or "").strip()
    if not search:
        return {}
    return {"$or": _search_clause(search, CONTACT_SEARCH_FIELDS)}


def enrollment_filter(search: Optional[str] = None, course: Optional[str] = None) -> Dict[str, Any]:
    filt: Dict[str, Any] = {}
    search = (search or "").strip()
    if search:
        filt["$or"] = _search_clause(search, ENROLLMENT_SEARCH_FIELDS)
    if course and course != ALL_COURSES:
        filt["courseInfo.title"] = course
    return filt


def find_contacts(database, search: Optional[str] = None) -> List[Dict[str, Any]]:
    return get_documents(CONTACTS, contact_filter(search), sort=CONTACT_SORT, database=database)


def find_enrollments(database, search: Optional[str] = None, course: Optional[str] = None) -> List[Dict[str, Any]]:
    return get_documents(ENROLLMENTS, enrollment_filter(search, course), sort=ENROLLMENT_SORT, database=database)


def course_titles(enrollments: Iterable[Dict[str, Any]]) -> List[str]:
    """Distinct course titles in order of first appearance."""
    seen = []
    for enrollment in enrollments:
        title = (enrollment.get("courseInfo") or {}).get("title")
        if title and title not in seen:
            seen.append(title)
    return seen
