# ABOUTME: Derives subject performance snapshots and per-semester progress from enrollments.
# ABOUTME: Applies the study-load, difficulty, and satisfaction heuristics from EstimationWeights.

from __future__ import annotations

from typing import Iterable, List

from src.common.config import EstimationWeights
from src.common.grades import grade_to_score, normalize_grade, round_half_up
from src.common.schemas import AcademicProgress, Enrollment, STATUS_DROPPED, SubjectPerformance
from src.records.aggregation import grade_points_for, group_by_semester, is_failing, semester_credits, semester_gpa

MIN_RATING = 1.0
MAX_RATING = 5.0


def _clamp_rating(value: float) -> float:
    return max(MIN_RATING, min(MAX_RATING, round_half_up(value, 1)))


def estimate_study_hours(credits: int, category: str, weights: EstimationWeights = EstimationWeights()) -> float:
    multiplier = weights.category_multipliers.get(category, 1.0)
    return float(round_half_up(credits * weights.hours_per_credit * multiplier, 0))


def estimate_difficulty(category: str, grade_points: float, weights: EstimationWeights = EstimationWeights()) -> float:
    """Harder categories and weaker grades both push difficulty up, on a 1-5 scale."""

    difficulty = weights.base_difficulty + weights.category_difficulty.get(category, 0.0)
    for minimum, adjustment in weights.gpa_difficulty:
        if grade_points >= minimum:
            difficulty += adjustment
            break
    else:
        difficulty += weights.low_gpa_difficulty
    return _clamp_rating(difficulty)


def estimate_satisfaction(grade_points: float, credits: int, weights: EstimationWeights = EstimationWeights()) -> float:
    satisfaction = MIN_RATING
    for minimum, value in weights.gpa_satisfaction:
        if grade_points >= minimum:
            satisfaction = value
            break
    if credits >= weights.heavy_course_credits:
        satisfaction -= weights.heavy_course_penalty
    return _clamp_rating(satisfaction)


def performance_from_enrollment(
    enrollment: Enrollment, weights: EstimationWeights = EstimationWeights()
) -> SubjectPerformance:
    points = grade_points_for(enrollment) or 0.0
    score = float(grade_to_score(enrollment.final_grade))
    return SubjectPerformance(
        subject_id=enrollment.course_id,
        subject_name=enrollment.course_name or enrollment.course_code or enrollment.course_id,
        category=enrollment.category,
        semester=enrollment.semester,
        year=enrollment.academic_year,
        current_grade=normalize_grade(enrollment.final_grade),
        midterm_score=score,
        final_score=score,
        assignment_scores=(score, weights.default_attendance, score),
        attendance_rate=weights.default_attendance,
        study_hours=estimate_study_hours(enrollment.credits, enrollment.category, weights),
        difficulty=estimate_difficulty(enrollment.category, points, weights),
        satisfaction=estimate_satisfaction(points, enrollment.credits, weights),
    )


def performances_from_enrollments(
    enrollments: Iterable[Enrollment], weights: EstimationWeights = EstimationWeights()
) -> List[SubjectPerformance]:
    """One snapshot per graded enrollment; registered and dropped courses are skipped."""

    return [
        performance_from_enrollment(e, weights)
        for e in enrollments
        if e.is_graded and e.status != STATUS_DROPPED
    ]


def academic_progress_from_enrollments(enrollments: Iterable[Enrollment]) -> List[AcademicProgress]:
    """
    Per-semester progress rows, chronological.

    GPA and credits come from the records engine so the analytics view agrees
    with the transcript; ungraded enrollments are left out.
    """

    graded = [e for e in enrollments if e.is_graded and e.status != STATUS_DROPPED]
    progress = []
    for (year, semester), group in group_by_semester(graded).items():
        failed = sum(1 for e in group if is_failing(e))
        average_score = sum(grade_to_score(e.final_grade) for e in group) / len(group)
        progress.append(
            AcademicProgress(
                semester=semester,
                year=year,
                gpa=semester_gpa(group),
                credits=semester_credits(group),
                total_subjects=len(group),
                passed_subjects=len(group) - failed,
                failed_subjects=failed,
                average_grade=int(round_half_up(average_score, 0)),
            )
        )
    return progress
