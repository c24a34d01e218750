# ABOUTME: Aggregates enrollment history into GPA, credit totals, and semester records.
# ABOUTME: Applies the earned-only GPA policy and flags honors and probations per semester.

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from src.common.errors import InvalidInputError
from src.common.grades import (
    FAILING_GRADE,
    GRADE_POINTS,
    is_known_grade,
    normalize_grade,
    round_half_up,
    semester_date_range,
    semester_sort_key,
)
from src.common.schemas import (
    STATUS_DROPPED,
    STATUS_FAILED,
    AcademicRecord,
    Enrollment,
    GpaHistoryEntry,
    Honor,
    Probation,
    SemesterRecord,
    TranscriptLine,
)

logger = logging.getLogger(__name__)


class HonorThresholds:
    DEANS_LIST_GPA = 3.7
    HONOR_ROLL_GPA = 3.5
    ACADEMIC_WARNING_GPA = 2.0


PROBATION_REQUIREMENTS = (
    "Raise next semester GPA to 2.5 or higher",
    "Submit a study plan to your academic advisor",
)


@dataclass(frozen=True)
class CumulativeStats:
    total_credits_earned: int
    total_credits_attempted: int
    cumulative_gpa: float


def grade_points_for(enrollment: Enrollment) -> Optional[float]:
    """Grade points of a graded enrollment; None until a final grade is posted."""

    if not enrollment.is_graded:
        return None
    if enrollment.grade_points is not None:
        return float(enrollment.grade_points)
    return GRADE_POINTS.get(normalize_grade(enrollment.final_grade), 0.0)


def is_failing(enrollment: Enrollment) -> bool:
    return normalize_grade(enrollment.final_grade) == FAILING_GRADE or enrollment.status == STATUS_FAILED


def earned_credits(enrollment: Enrollment) -> int:
    """Credits counted toward graduation: graded, not failing, not dropped."""

    if not enrollment.is_graded or enrollment.status == STATUS_DROPPED or is_failing(enrollment):
        return 0
    return max(int(enrollment.credits), 0)


def attempted_credits(enrollment: Enrollment) -> int:
    if not enrollment.is_graded or enrollment.status == STATUS_DROPPED:
        return 0
    return max(int(enrollment.credits), 0)


def validate_enrollments(enrollments: Iterable[Enrollment]) -> List[str]:
    """
    Collect data-quality warnings without rejecting any record.

    Malformed fields are zero-defaulted by the aggregation functions; the
    warnings let callers see which records were affected.
    """

    warnings: List[str] = []
    for enrollment in enrollments:
        if enrollment.credits < 0:
            warnings.append(f"{enrollment.id}: negative credits ({enrollment.credits}) treated as 0")
        if enrollment.is_graded and enrollment.grade_points is None:
            if not is_known_grade(enrollment.final_grade):
                warnings.append(
                    f"{enrollment.id}: unrecognized grade '{enrollment.final_grade}' treated as 0.0 grade points"
                )
        if enrollment.grade_points is not None and not 0.0 <= enrollment.grade_points <= 4.0:
            warnings.append(f"{enrollment.id}: grade points {enrollment.grade_points} outside 0.0-4.0")
    for message in warnings:
        logger.warning(message)
    return warnings


def _weighted_points(enrollments: Iterable[Enrollment]) -> Tuple[float, int]:
    total_points = 0.0
    total_credits = 0
    for enrollment in enrollments:
        points = grade_points_for(enrollment)
        credits = earned_credits(enrollment)
        if points is None or credits == 0:
            continue
        total_points += points * credits
        total_credits += credits
    return total_points, total_credits


def semester_gpa(enrollments: Iterable[Enrollment]) -> float:
    """
    Credit-weighted GPA over graded enrollments, rounded to 2 decimals.

    Returns 0.0 rather than None when nothing is graded yet.
    """

    total_points, total_credits = _weighted_points(enrollments)
    if total_credits == 0:
        return 0.0
    return round_half_up(total_points / total_credits)


def semester_credits(enrollments: Iterable[Enrollment]) -> int:
    return sum(earned_credits(e) for e in enrollments)


def cumulative_stats(enrollments: Iterable[Enrollment]) -> CumulativeStats:
    """
    Earned-only GPA: failing grades add to attempted credits but are excluded
    from both earned credits and the GPA denominator.
    """

    enrollments = list(enrollments)
    total_points, total_earned = _weighted_points(enrollments)
    total_attempted = sum(attempted_credits(e) for e in enrollments)
    gpa = round_half_up(total_points / total_earned) if total_earned else 0.0
    return CumulativeStats(
        total_credits_earned=total_earned,
        total_credits_attempted=total_attempted,
        cumulative_gpa=gpa,
    )


def group_by_semester(enrollments: Iterable[Enrollment]) -> Dict[Tuple[int, str], List[Enrollment]]:
    """Group enrollments by (academic year, semester) in chronological order."""

    groups: Dict[Tuple[int, str], List[Enrollment]] = {}
    for enrollment in enrollments:
        groups.setdefault((enrollment.academic_year, enrollment.semester), []).append(enrollment)
    ordered = sorted(groups, key=lambda key: semester_sort_key(*key))
    return OrderedDict((key, groups[key]) for key in ordered)


def build_semester_record(academic_year: int, semester: str, enrollments: Sequence[Enrollment]) -> SemesterRecord:
    try:
        start, end = semester_date_range(academic_year, semester)
    except InvalidInputError:
        logger.warning("No calendar for semester '%s' in %s; leaving dates empty", semester, academic_year)
        start, end = None, None
    return SemesterRecord(
        academic_year=academic_year,
        semester=semester,
        enrollments=tuple(enrollments),
        semester_gpa=semester_gpa(enrollments),
        semester_credits=semester_credits(enrollments),
        start_date=start,
        end_date=end,
    )


def build_semester_records(enrollments: Iterable[Enrollment]) -> List[SemesterRecord]:
    return [
        build_semester_record(year, semester, group)
        for (year, semester), group in group_by_semester(enrollments).items()
    ]


def gpa_history_frame(enrollments: Iterable[Enrollment]) -> pd.DataFrame:
    """
    Per-semester GPA alongside the running cumulative GPA.

    Cumulative values come from running point and credit totals, not from
    averaging already-rounded semester GPAs.
    """

    columns = ["academic_year", "semester", "semester_gpa", "cumulative_gpa", "credits"]
    rows = []
    for (year, semester), group in group_by_semester(enrollments).items():
        points, credits = _weighted_points(group)
        rows.append(
            {
                "academic_year": year,
                "semester": semester,
                "semester_gpa": semester_gpa(group),
                "points": points,
                "credits": credits,
            }
        )
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows)
    running_points = df["points"].cumsum()
    running_credits = df["credits"].cumsum()
    df["cumulative_gpa"] = [
        round_half_up(p / c) if c else 0.0 for p, c in zip(running_points, running_credits)
    ]
    return df[columns]


def gpa_history(enrollments: Iterable[Enrollment]) -> List[GpaHistoryEntry]:
    df = gpa_history_frame(enrollments)
    return [
        GpaHistoryEntry(
            academic_year=int(row.academic_year),
            semester=str(row.semester),
            semester_gpa=float(row.semester_gpa),
            cumulative_gpa=float(row.cumulative_gpa),
            credits=int(row.credits),
        )
        for row in df.itertuples(index=False)
    ]


def calculate_honors(semester_records: Iterable[SemesterRecord]) -> List[Honor]:
    honors: List[Honor] = []
    for record in semester_records:
        gpa = record.semester_gpa
        if gpa >= HonorThresholds.DEANS_LIST_GPA:
            honors.append(Honor("dean-list", "Dean's List", record.academic_year, record.semester, gpa))
        elif gpa >= HonorThresholds.HONOR_ROLL_GPA:
            honors.append(Honor("honor-roll", "Honor Roll", record.academic_year, record.semester, gpa))
    return honors


def calculate_probations(semester_records: Iterable[SemesterRecord]) -> List[Probation]:
    probations: List[Probation] = []
    for record in semester_records:
        # A 0.0 semester GPA means nothing was graded, not a failing term.
        if 0 < record.semester_gpa < HonorThresholds.ACADEMIC_WARNING_GPA:
            probations.append(
                Probation(
                    type="academic-warning",
                    academic_year=record.academic_year,
                    semester=record.semester,
                    reason=f"Semester GPA {record.semester_gpa:.2f} fell below {HonorThresholds.ACADEMIC_WARNING_GPA:.1f}",
                    requirements=PROBATION_REQUIREMENTS,
                )
            )
    return probations


def flatten_course_grades(enrollments: Iterable[Enrollment]) -> List[TranscriptLine]:
    lines = []
    for enrollment in enrollments:
        points = grade_points_for(enrollment)
        if points is None:
            continue
        lines.append(
            TranscriptLine(
                course_code=enrollment.course_code or enrollment.course_id,
                course_name=enrollment.course_name,
                credits=max(int(enrollment.credits), 0),
                academic_year=enrollment.academic_year,
                semester=enrollment.semester,
                final_grade=normalize_grade(enrollment.final_grade) or "",
                grade_points=points,
                category=enrollment.category,
            )
        )
    return sorted(lines, key=lambda line: (*semester_sort_key(line.academic_year, line.semester), line.course_code))


def build_academic_record(student_id: str, enrollments: Iterable[Enrollment]) -> AcademicRecord:
    """Assemble the full derived record; an empty history yields a zeroed record."""

    enrollments = list(enrollments)
    warnings = validate_enrollments(enrollments)
    semester_records = build_semester_records(enrollments)
    stats = cumulative_stats(enrollments)
    return AcademicRecord(
        student_id=student_id,
        semester_records=tuple(semester_records),
        total_credits_earned=stats.total_credits_earned,
        total_credits_attempted=stats.total_credits_attempted,
        cumulative_gpa=stats.cumulative_gpa,
        honors=tuple(calculate_honors(semester_records)),
        probations=tuple(calculate_probations(semester_records)),
        course_grades=tuple(flatten_course_grades(enrollments)),
        warnings=tuple(warnings),
    )
