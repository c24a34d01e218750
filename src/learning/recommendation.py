# ABOUTME: Turns learning patterns, grades, and efficiency metrics into study recommendations.
# ABOUTME: Rules are deterministic; output is ordered high to medium to low priority.

from __future__ import annotations

from typing import Iterable, List, Optional

from src.common.grades import GRADE_ORDER, NEEDS_IMPROVEMENT_GRADES, grade_rank, normalize_grade
from src.common.schemas import (
    LearningPattern,
    LearningRecommendation,
    StudyEfficiencyMetrics,
    SubjectPerformance,
)

from .efficiency import RISK_HIGH, RISK_MEDIUM

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


class RecommendationThresholds:
    IMPROVEMENT_SUBJECTS = 2
    LOCATION_EFFICIENCY_GAP = 0.5
    MIN_LOCATION_SESSIONS = 2
    WEAK_CATEGORY_GRADE = 3.0


def identify_strong_subjects(performances: Iterable[SubjectPerformance], limit: int = 3) -> List[str]:
    """Subject names with the best letter grades first."""

    graded = [p for p in performances if normalize_grade(p.current_grade)]
    graded = sorted(graded, key=lambda p: grade_rank(p.current_grade))
    return [p.subject_name for p in graded[:limit]]


def identify_improvement_areas(performances: Iterable[SubjectPerformance], limit: int = 3) -> List[str]:
    """Subjects graded C or below, worst grade first."""

    worst_first = list(reversed(GRADE_ORDER))
    weak = [p for p in performances if normalize_grade(p.current_grade) in NEEDS_IMPROVEMENT_GRADES]
    weak = sorted(weak, key=lambda p: worst_first.index(normalize_grade(p.current_grade)))
    return [p.subject_name for p in weak[:limit]]


def _schedule_recommendation(pattern: LearningPattern) -> Optional[LearningRecommendation]:
    if not pattern.preferred_time_slots:
        return None
    best = pattern.preferred_time_slots[0]
    return LearningRecommendation(
        id="schedule-optimization",
        type="study_schedule",
        priority="high",
        title="Make the most of your peak study hour",
        description=(
            f"Your most efficient study time is around {best.hour}:00. "
            "Schedule your most important work in that slot."
        ),
        action_items=(
            f"Move your hardest subject to around {best.hour}:00",
            "Reserve this slot for tasks that need deep focus",
            "Prepare your study space before this hour",
        ),
        expected_impact="Study efficiency may improve by 15-25%",
        time_to_complete="1 week",
        difficulty="easy",
        tags=("time management", "efficiency", "habits"),
    )


def _subject_recommendation(performances: List[SubjectPerformance]) -> Optional[LearningRecommendation]:
    subjects = identify_improvement_areas(performances, RecommendationThresholds.IMPROVEMENT_SUBJECTS)
    if not subjects:
        return None
    return LearningRecommendation(
        id="subject-improvement",
        type="subject_focus",
        priority="high",
        title="Focus on subjects that need improvement",
        description=f"Build a study plan centered on raising your grades in {', '.join(subjects)}.",
        action_items=(
            "Allocate 30% of weekly study time to these subjects",
            "Take short self-check quizzes every week",
            "Book office hours with the instructor or TA",
        ),
        expected_impact="Grades in these subjects may rise by one step",
        time_to_complete="1 semester",
        difficulty="medium",
        tags=("grades", "focused study", "planning"),
    )


def _location_recommendation(pattern: LearningPattern) -> Optional[LearningRecommendation]:
    locations = [
        loc for loc in pattern.preferred_locations if loc.frequency >= RecommendationThresholds.MIN_LOCATION_SESSIONS
    ]
    if len(locations) < 2:
        return None
    best, worst = locations[0], locations[-1]
    if best.efficiency - worst.efficiency < RecommendationThresholds.LOCATION_EFFICIENCY_GAP:
        return None
    return LearningRecommendation(
        id="location-optimization",
        type="strategy",
        priority="medium",
        title="Study where you focus best",
        description=(
            f"Sessions at the {best.location} average {best.efficiency:.1f} efficiency "
            f"versus {worst.efficiency:.1f} at the {worst.location}."
        ),
        action_items=(
            f"Move demanding sessions to the {best.location}",
            f"Keep {worst.location} time for light review",
        ),
        expected_impact="Fewer low-efficiency sessions",
        time_to_complete="2 weeks",
        difficulty="easy",
        tags=("environment", "efficiency"),
    )


def _rest_recommendation(metrics: Optional[StudyEfficiencyMetrics]) -> Optional[LearningRecommendation]:
    if metrics is None or metrics.burnout_risk not in (RISK_MEDIUM, RISK_HIGH):
        return None
    return LearningRecommendation(
        id="rest-recovery",
        type="strategy",
        priority="high" if metrics.burnout_risk == RISK_HIGH else "medium",
        title="Plan time to recover",
        description=(
            f"Long study days with a focus score of {metrics.focus_score} point to a "
            f"{metrics.burnout_risk} burnout risk."
        ),
        action_items=(
            "Cap study days at six hours for the next week",
            "Take a 10-minute break every 50 minutes",
            "Keep at least one day a week free of study",
        ),
        expected_impact="Focus score should recover within two weeks",
        time_to_complete="2 weeks",
        difficulty="medium",
        tags=("wellbeing", "burnout"),
    )


def _category_recommendation(pattern: LearningPattern) -> Optional[LearningRecommendation]:
    if not pattern.subject_difficulty:
        return None
    weakest = pattern.subject_difficulty[0]
    if weakest.average_grade >= RecommendationThresholds.WEAK_CATEGORY_GRADE:
        return None
    return LearningRecommendation(
        id="skill-development",
        type="skill_development",
        priority="low",
        title=f"Strengthen {weakest.category} coursework",
        description=(
            f"{weakest.category} courses average {weakest.average_grade:.2f} grade points "
            f"with about {weakest.study_hours_needed:.0f} study hours each."
        ),
        action_items=(
            "Review the fundamentals these courses build on",
            "Join or form a study group for this category",
        ),
        expected_impact="More consistent grades across the category",
        time_to_complete="1 semester",
        difficulty="hard",
        tags=("skills", "coursework"),
    )


def generate_recommendations(
    performances: Optional[Iterable[SubjectPerformance]],
    pattern: LearningPattern,
    metrics: Optional[StudyEfficiencyMetrics] = None,
) -> List[LearningRecommendation]:
    """
    Apply every recommendation rule and order the results by priority.

    Session-driven rules read `pattern` and `metrics`, which are already
    derived from the student's sessions.
    """

    performances = list(performances or ())
    candidates = [
        _schedule_recommendation(pattern),
        _subject_recommendation(performances),
        _location_recommendation(pattern),
        _rest_recommendation(metrics),
        _category_recommendation(pattern),
    ]
    recommendations = [rec for rec in candidates if rec is not None]
    return sorted(recommendations, key=lambda rec: PRIORITY_ORDER.get(rec.priority, len(PRIORITY_ORDER)))
