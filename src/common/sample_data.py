# ABOUTME: Generates deterministic sample students, enrollments, and study sessions.
# ABOUTME: Exposes them through the same in-memory sources a real store would back.

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from .grades import GRADE_POINTS, resolve_now
from .schemas import Course, Enrollment, LearningGoal, StudySession
from .sources import Dataset, InMemoryCourseCatalog, InMemoryEnrollmentSource, InMemorySessionSource

SAMPLE_STUDENT = "student-1"
NEW_STUDENT = "student-2"

SAMPLE_COURSES = [
    Course("cs101", "CS101", "Introduction to Programming", 2, "required"),
    Course("cs201", "CS201", "Data Structures", 2, "required"),
    Course("db301", "CS301", "Database Systems", 2, "required"),
    Course("se310", "CS310", "Software Engineering", 2, "required_elective"),
    Course("math201", "MA201", "Linear Algebra", 2, "required_elective"),
    Course("stat210", "ST210", "Statistics", 2, "elective"),
    Course("phys101", "PH101", "Physics Fundamentals", 2, "elective"),
    Course("eng150", "EN150", "English Communication", 1, "free"),
    Course("hist120", "HI120", "Introduction to History", 2, "free"),
]

# (course id, academic year, semester, status, final grade)
SAMPLE_HISTORY = [
    ("cs101", 2023, "spring", "completed", "A"),
    ("math201", 2023, "spring", "completed", "B+"),
    ("eng150", 2023, "spring", "completed", "A-"),
    ("hist120", 2023, "spring", "completed", "C"),
    ("cs201", 2023, "fall", "completed", "A-"),
    ("phys101", 2023, "fall", "completed", "B+"),
    ("stat210", 2023, "fall", "failed", "F"),
    ("se310", 2023, "fall", "dropped", None),
    ("db301", 2024, "spring", "registered", None),
    ("stat210", 2024, "spring", "registered", None),
]

# Weekly timetable: (subject id, weekday with Monday=0, hour, base efficiency)
SAMPLE_TIMETABLE = [
    ("db301", 0, 9, 4.2),
    ("stat210", 1, 13, 3.5),
    ("db301", 2, 10, 4.2),
    ("stat210", 3, 15, 3.5),
    ("eng150", 4, 11, 4.0),
]
LECTURE_MINUTES = 90
FOLLOW_UP_PROBABILITY = 0.7
FOLLOW_UP_LOCATIONS = ("library", "home", "classroom")


@dataclass(frozen=True)
class SampleSettings:
    seed: int = 42
    weeks: int = 8


def sample_courses() -> List[Course]:
    return list(SAMPLE_COURSES)


def sample_enrollments(student_id: str = SAMPLE_STUDENT) -> List[Enrollment]:
    courses = {course.course_id: course for course in SAMPLE_COURSES}
    enrollments = []
    for index, (course_id, year, semester, status, grade) in enumerate(SAMPLE_HISTORY, start=1):
        course = courses[course_id]
        registered_on = date(year, 4 if semester == "spring" else 9, 10)
        enrollments.append(
            Enrollment(
                id=f"reg-{index:03d}",
                student_id=student_id,
                course_id=course_id,
                course_code=course.code,
                course_name=course.name,
                credits=course.credits,
                category=course.category,
                status=status,
                academic_year=year,
                semester=semester,
                final_grade=grade,
                grade_points=GRADE_POINTS.get(grade) if grade else None,
                registration_date=registered_on,
                drop_date=registered_on + timedelta(days=20) if status == "dropped" else None,
                completion_date=registered_on + timedelta(days=120) if grade else None,
            )
        )
    return enrollments


def sample_sessions(
    student_id: str = SAMPLE_STUDENT,
    now: Optional[datetime] = None,
    settings: SampleSettings = SampleSettings(),
) -> List[StudySession]:
    """
    Derive lecture sessions from the weekly timetable for the past N weeks,
    with a follow-up self-study session after most lectures.
    """

    rng = random.Random(settings.seed)
    now = resolve_now(now)
    names = {course.course_id: course.name for course in SAMPLE_COURSES}
    sessions: List[StudySession] = []
    for week in range(settings.weeks):
        week_start = (now - timedelta(days=now.weekday() + 7 * week)).replace(
            minute=0, second=0, microsecond=0
        )
        for slot, (subject_id, weekday, hour, base_efficiency) in enumerate(SAMPLE_TIMETABLE):
            lecture_at = (week_start + timedelta(days=weekday)).replace(hour=hour)
            if lecture_at > now:
                continue
            efficiency = _clamp_rating(base_efficiency + rng.uniform(-1.0, 1.0))
            sessions.append(
                StudySession(
                    id=f"lecture_{week}_{slot}",
                    subject_id=subject_id,
                    subject_name=names[subject_id],
                    timestamp=lecture_at,
                    duration=LECTURE_MINUTES,
                    type="lecture",
                    location="classroom",
                    efficiency=efficiency,
                )
            )
            if rng.random() >= FOLLOW_UP_PROBABILITY:
                continue
            study_at = lecture_at + timedelta(days=rng.randint(1, 3), hours=rng.randint(1, 6))
            if study_at > now:
                continue
            sessions.append(
                StudySession(
                    id=f"study_{week}_{slot}",
                    subject_id=subject_id,
                    subject_name=names[subject_id],
                    timestamp=study_at,
                    duration=60 + rng.randint(0, 120),
                    type="study",
                    location=rng.choice(FOLLOW_UP_LOCATIONS),
                    efficiency=_clamp_rating(base_efficiency + rng.uniform(-0.75, 0.75)),
                )
            )
    return sorted(sessions, key=lambda s: s.timestamp, reverse=True)


def sample_goals(now: Optional[datetime] = None) -> List[LearningGoal]:
    now = resolve_now(now)
    return [
        LearningGoal(
            id="goal-gpa",
            title="Reach a 3.5 cumulative GPA",
            target_value=3.5,
            current_value=3.3,
            unit="GPA",
            deadline=now + timedelta(days=120),
            category="gpa",
            created_at=now - timedelta(days=60),
        ),
        LearningGoal(
            id="goal-study-hours",
            title="Log 40 study hours this month",
            target_value=40.0,
            current_value=26.5,
            unit="hours",
            deadline=now + timedelta(days=14),
            category="study_hours",
            created_at=now - timedelta(days=16),
        ),
    ]


def build_sample_dataset(now: Optional[datetime] = None, settings: SampleSettings = SampleSettings()) -> Dataset:
    """Sample data for one student with history and one newly admitted student with none."""

    sessions: Dict[str, List[StudySession]] = {SAMPLE_STUDENT: sample_sessions(SAMPLE_STUDENT, now, settings)}
    return Dataset(
        enrollments=InMemoryEnrollmentSource(sample_enrollments(SAMPLE_STUDENT), students=[NEW_STUDENT]),
        sessions=InMemorySessionSource(sessions),
        catalog=InMemoryCourseCatalog(sample_courses()),
        goals={SAMPLE_STUDENT: sample_goals(now)},
    )


def _clamp_rating(value: float) -> float:
    return round(max(1.0, min(5.0, value)), 1)
