# ABOUTME: Tests deriving subject performance and semester progress from enrollments.
# ABOUTME: Pins the study-hour, difficulty, and satisfaction heuristics to known values.

from src.common.config import EstimationWeights
from src.common.schemas import Enrollment
from src.learning.integration import (
    academic_progress_from_enrollments,
    estimate_difficulty,
    estimate_satisfaction,
    estimate_study_hours,
    performances_from_enrollments,
)


def _enrollment(course_id, grade, status="completed", credits=2, category="required", semester="spring", year=2024):
    return Enrollment(
        id=f"e-{course_id}",
        student_id="s1",
        course_id=course_id,
        course_name=f"Course {course_id}",
        credits=credits,
        category=category,
        status=status,
        academic_year=year,
        semester=semester,
        final_grade=grade,
    )


def test_study_hours_scale_with_credits_and_category():
    assert estimate_study_hours(2, "required") == 36.0
    assert estimate_study_hours(2, "free") == 24.0
    assert estimate_study_hours(2, "unlisted") == 30.0
    weights = EstimationWeights(hours_per_credit=10)
    assert estimate_study_hours(3, "elective", weights) == 30.0


def test_difficulty_rises_for_required_courses_and_low_grades():
    assert estimate_difficulty("required", 4.0) == 2.5
    assert estimate_difficulty("required_elective", 3.7) == 2.8
    assert estimate_difficulty("elective", 3.0) == 3.0
    assert estimate_difficulty("required", 1.0) == 4.5


def test_satisfaction_follows_grade_with_heavy_course_penalty():
    assert estimate_satisfaction(4.0, 2) == 5.0
    assert estimate_satisfaction(4.0, 3) == 4.7
    assert estimate_satisfaction(3.0, 3) == 2.7
    assert estimate_satisfaction(1.0, 4) == 1.0


def test_performances_skip_ungraded_and_dropped():
    enrollments = [
        _enrollment("cs101", "A"),
        _enrollment("db301", None, status="registered"),
        _enrollment("se310", None, status="dropped"),
    ]
    performances = performances_from_enrollments(enrollments)
    assert [p.subject_id for p in performances] == ["cs101"]
    perf = performances[0]
    assert perf.subject_name == "Course cs101"
    assert perf.current_grade == "A"
    assert perf.final_score == 90.0
    assert perf.attendance_rate == 90.0
    assert perf.study_hours == 36.0


def test_academic_progress_per_semester():
    enrollments = [
        _enrollment("cs101", "A"),
        _enrollment("stat210", "F", status="failed"),
        _enrollment("cs201", "B", semester="fall"),
        _enrollment("db301", None, status="registered", year=2025),
    ]
    progress = academic_progress_from_enrollments(enrollments)
    assert [(p.year, p.semester) for p in progress] == [(2024, "spring"), (2024, "fall")]
    spring = progress[0]
    assert spring.gpa == 4.0
    assert spring.credits == 2
    assert spring.total_subjects == 2
    assert spring.passed_subjects == 1
    assert spring.failed_subjects == 1
    assert spring.average_grade == 45
