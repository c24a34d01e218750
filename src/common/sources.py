# ABOUTME: Declares the enrollment, session, and course-catalog source interfaces.
# ABOUTME: Provides in-memory implementations and a JSON dataset loader behind them.

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

import pandas as pd

from .errors import InvalidInputError, NotFoundError
from .schemas import (
    CATEGORIES,
    ENROLLMENT_STATUSES,
    GOAL_CATEGORIES,
    GOAL_STATUSES,
    SESSION_LOCATIONS,
    SESSION_TYPES,
    Course,
    Enrollment,
    LearningGoal,
    StudySession,
)

logger = logging.getLogger(__name__)


class EnrollmentSource(Protocol):
    def has_student(self, student_id: str) -> bool:
        ...

    def get_enrollments(
        self,
        student_id: str,
        academic_years: Optional[Sequence[int]] = None,
        semesters: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        categories: Optional[Sequence[str]] = None,
    ) -> List[Enrollment]:
        ...


class SessionSource(Protocol):
    def get_sessions(self, student_id: str) -> List[StudySession]:
        ...


class CourseCatalog(Protocol):
    def get_course(self, course_id: str) -> Optional[Course]:
        ...


class InMemoryEnrollmentSource:
    """Enrollment store backed by a list; a student is known once registered or enrolled."""

    def __init__(self, enrollments: Iterable[Enrollment] = (), students: Iterable[str] = ()):
        self._enrollments: List[Enrollment] = list(enrollments)
        self._students = set(students) | {e.student_id for e in self._enrollments}

    def has_student(self, student_id: str) -> bool:
        return student_id in self._students

    def get_enrollments(
        self,
        student_id: str,
        academic_years: Optional[Sequence[int]] = None,
        semesters: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        categories: Optional[Sequence[str]] = None,
    ) -> List[Enrollment]:
        if not self.has_student(student_id):
            raise NotFoundError(f"Unknown student '{student_id}'")
        results = []
        for enrollment in self._enrollments:
            if enrollment.student_id != student_id:
                continue
            if academic_years and enrollment.academic_year not in academic_years:
                continue
            if semesters and enrollment.semester not in semesters:
                continue
            if statuses and enrollment.status not in statuses:
                continue
            if categories and enrollment.category not in categories:
                continue
            results.append(enrollment)
        return results


class InMemoryCourseCatalog:
    def __init__(self, courses: Iterable[Course] = ()):
        self._courses: Dict[str, Course] = {course.course_id: course for course in courses}

    def get_course(self, course_id: str) -> Optional[Course]:
        return self._courses.get(course_id)

    def __len__(self) -> int:
        return len(self._courses)


class InMemorySessionSource:
    """
    Session log holding derived sessions plus manually logged ones.

    Only manual sessions may be updated or deleted; derived sessions are
    regenerated from upstream data instead.
    """

    def __init__(self, sessions: Optional[Mapping[str, Iterable[StudySession]]] = None):
        self._sessions: Dict[str, List[StudySession]] = {
            student_id: list(student_sessions) for student_id, student_sessions in (sessions or {}).items()
        }

    def get_sessions(self, student_id: str) -> List[StudySession]:
        return list(self._sessions.get(student_id, []))

    def add_session(self, student_id: str, session: StudySession) -> StudySession:
        if session.duration <= 0:
            raise InvalidInputError(f"Session duration must be positive, got {session.duration}")
        session_id = session.id or f"session_{uuid.uuid4().hex[:12]}"
        stored = replace(session, id=session_id, manual=True)
        self._sessions.setdefault(student_id, []).append(stored)
        return stored

    def update_session(self, student_id: str, session_id: str, **updates: Any) -> StudySession:
        sessions = self._sessions.get(student_id, [])
        for index, session in enumerate(sessions):
            if session.id != session_id:
                continue
            if not session.manual:
                raise InvalidInputError(f"Session '{session_id}' is derived and cannot be edited")
            updated = replace(session, **updates)
            sessions[index] = updated
            return updated
        raise NotFoundError(f"Unknown session '{session_id}' for student '{student_id}'")

    def delete_session(self, student_id: str, session_id: str) -> None:
        sessions = self._sessions.get(student_id, [])
        for index, session in enumerate(sessions):
            if session.id != session_id:
                continue
            if not session.manual:
                raise InvalidInputError(f"Session '{session_id}' is derived and cannot be deleted")
            del sessions[index]
            return
        raise NotFoundError(f"Unknown session '{session_id}' for student '{student_id}'")


@dataclass
class Dataset:
    """Bundle of sources loaded together, e.g. from a JSON export."""

    enrollments: InMemoryEnrollmentSource
    sessions: SessionSource
    catalog: InMemoryCourseCatalog
    goals: Dict[str, List[LearningGoal]] = field(default_factory=dict)


def load_json_dataset(path: Path) -> Dataset:
    """
    Load a dataset JSON file with ``students``, ``courses``, ``enrollments`` and
    ``sessions`` arrays, plus an optional ``goals`` array. Sessions and goals
    carry a ``student_id`` field.
    """

    if not path.exists():
        raise NotFoundError(f"Dataset not found: {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    return dataset_from_dict(payload)


def dataset_from_dict(payload: Mapping[str, Any]) -> Dataset:
    courses = [Course(**row) for row in payload.get("courses", [])]
    enrollments = [enrollment_from_dict(row) for row in payload.get("enrollments", [])]
    sessions: Dict[str, List[StudySession]] = {}
    for row in payload.get("sessions", []):
        row = dict(row)
        student_id = str(row.pop("student_id"))
        sessions.setdefault(student_id, []).append(session_from_dict(row))
    goals: Dict[str, List[LearningGoal]] = {}
    for row in payload.get("goals", []):
        row = dict(row)
        student_id = str(row.pop("student_id"))
        goals.setdefault(student_id, []).append(goal_from_dict(row))
    students = [str(s) for s in payload.get("students", [])]
    logger.info(
        "Loaded dataset: %d courses, %d enrollments, %d sessions",
        len(courses),
        len(enrollments),
        sum(len(rows) for rows in sessions.values()),
    )
    return Dataset(
        enrollments=InMemoryEnrollmentSource(enrollments, students=students),
        sessions=InMemorySessionSource(sessions),
        catalog=InMemoryCourseCatalog(courses),
        goals=goals,
    )


def enrollment_from_dict(row: Mapping[str, Any]) -> Enrollment:
    data = dict(row)
    if data.get("status") not in ENROLLMENT_STATUSES:
        raise InvalidInputError(f"Enrollment {data.get('id')}: unknown status {data.get('status')!r}")
    if data.get("category") not in CATEGORIES:
        logger.warning("Enrollment %s has unknown category %r", data.get("id"), data.get("category"))
    for key in ("registration_date", "drop_date", "completion_date"):
        data[key] = _parse_date(data.get(key))
    data["credits"] = int(data.get("credits", 0))
    data["academic_year"] = int(data["academic_year"])
    return Enrollment(**data)


def session_from_dict(row: Mapping[str, Any]) -> StudySession:
    data = dict(row)
    if data.get("type") not in SESSION_TYPES:
        logger.warning("Session %s has unknown type %r", data.get("id"), data.get("type"))
    if data.get("location") not in SESSION_LOCATIONS:
        logger.warning("Session %s has unknown location %r", data.get("id"), data.get("location"))
    data["timestamp"] = _parse_timestamp(data["timestamp"])
    data["duration"] = float(data["duration"])
    data["efficiency"] = float(data["efficiency"])
    return StudySession(**data)


def goal_from_dict(row: Mapping[str, Any]) -> LearningGoal:
    data = dict(row)
    if data.get("category") not in GOAL_CATEGORIES:
        raise InvalidInputError(f"Goal {data.get('id')}: unknown category {data.get('category')!r}")
    data.setdefault("status", GOAL_STATUSES[0])
    if data["status"] not in GOAL_STATUSES:
        raise InvalidInputError(f"Goal {data.get('id')}: unknown status {data['status']!r}")
    data["deadline"] = _parse_timestamp(data["deadline"])
    if data.get("created_at") is not None:
        data["created_at"] = _parse_timestamp(data["created_at"])
    data["target_value"] = float(data["target_value"])
    data["current_value"] = float(data.get("current_value", 0.0))
    return LearningGoal(**data)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def _parse_timestamp(value: Any) -> datetime:
    """Parse to a naive datetime; offsets are converted to UTC first so all loaded values compare."""

    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()
