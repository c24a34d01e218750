# ABOUTME: Tests study recommendation rules and their priority ordering.
# ABOUTME: Also covers strongest-subject and improvement-area selection by letter grade.

from src.common.schemas import (
    CategoryDifficulty,
    LearningPattern,
    LocationEfficiency,
    StudyEfficiencyMetrics,
    SubjectPerformance,
    TimeSlotEfficiency,
    WeekdayPattern,
)
from src.learning.patterns import analyze_learning_patterns
from src.learning.recommendation import (
    generate_recommendations,
    identify_improvement_areas,
    identify_strong_subjects,
)

EMPTY_WEEK = tuple(WeekdayPattern(day, 0.0, 0.0) for day in range(7))


def _performance(name, grade, category="required"):
    return SubjectPerformance(
        subject_id=name.lower(),
        subject_name=name,
        category=category,
        semester="spring",
        year=2024,
        current_grade=grade,
    )


def _pattern(slots=(), locations=(), difficulty=()):
    return LearningPattern(
        preferred_time_slots=tuple(slots),
        preferred_locations=tuple(locations),
        subject_difficulty=tuple(difficulty),
        weekly_pattern=EMPTY_WEEK,
    )


def _metrics(burnout="low"):
    return StudyEfficiencyMetrics(
        total_study_hours=50.0,
        effective_study_hours=20.0,
        average_session_duration=90.0,
        longest_streak=3,
        current_streak=1,
        focus_score=55,
        productivity_trend="stable",
        burnout_risk=burnout,
    )


PERFORMANCES = [
    _performance("Algorithms", "A"),
    _performance("History", "C"),
    _performance("Physics", "F"),
    _performance("Statistics", "D"),
    _performance("Databases", "A+"),
    _performance("Networks", None),
]


def test_strong_subjects_best_grade_first():
    assert identify_strong_subjects(PERFORMANCES) == ["Databases", "Algorithms", "History"]


def test_improvement_areas_worst_grade_first():
    assert identify_improvement_areas(PERFORMANCES) == ["Physics", "Statistics", "History"]
    assert identify_improvement_areas(PERFORMANCES, limit=2) == ["Physics", "Statistics"]
    assert identify_improvement_areas([_performance("Algorithms", "B")]) == []


def test_schedule_recommendation_names_best_hour():
    pattern = _pattern(slots=[TimeSlotEfficiency(9, 4.8, 3), TimeSlotEfficiency(21, 3.0, 2)])
    recs = generate_recommendations([], pattern)
    assert [rec.id for rec in recs] == ["schedule-optimization"]
    assert "9:00" in recs[0].description
    assert recs[0].priority == "high"


def test_subject_recommendation_names_two_worst_subjects():
    recs = generate_recommendations(PERFORMANCES, _pattern())
    assert [rec.id for rec in recs] == ["subject-improvement"]
    assert "Physics, Statistics" in recs[0].description
    assert "History" not in recs[0].description


def test_no_data_means_no_recommendations():
    assert generate_recommendations([], analyze_learning_patterns([])) == []


def test_location_recommendation_needs_a_clear_gap():
    close = _pattern(locations=[LocationEfficiency("library", 4, 4.2), LocationEfficiency("home", 5, 4.0)])
    assert generate_recommendations([], close) == []

    clear = _pattern(locations=[LocationEfficiency("library", 4, 4.6), LocationEfficiency("home", 5, 3.1)])
    recs = generate_recommendations([], clear)
    assert [rec.id for rec in recs] == ["location-optimization"]
    assert "library" in recs[0].description


def test_recommendations_sorted_by_priority():
    pattern = _pattern(
        slots=[TimeSlotEfficiency(9, 4.8, 3)],
        locations=[LocationEfficiency("library", 4, 4.6), LocationEfficiency("home", 5, 3.1)],
        difficulty=[CategoryDifficulty("free", 1.5, 20.0)],
    )
    recs = generate_recommendations(PERFORMANCES, pattern, _metrics(burnout="medium"))
    assert [rec.id for rec in recs] == [
        "schedule-optimization",
        "subject-improvement",
        "location-optimization",
        "rest-recovery",
        "skill-development",
    ]
    assert [rec.priority for rec in recs] == ["high", "high", "medium", "medium", "low"]


def test_high_burnout_rest_recommendation_is_high_priority():
    recs = generate_recommendations([], _pattern(), _metrics(burnout="high"))
    assert [(rec.id, rec.priority) for rec in recs] == [("rest-recovery", "high")]


def test_recommendations_are_built_from_pattern_performance_and_metrics():
    recs = generate_recommendations(
        performances=PERFORMANCES,
        pattern=_pattern(slots=[TimeSlotEfficiency(20, 4.5, 2)]),
        metrics=_metrics(),
    )
    assert [rec.id for rec in recs] == ["schedule-optimization", "subject-improvement"]
    assert "20:00" in recs[0].description
