# ABOUTME: Builds the analytics dashboard summary, class comparisons, and learning goal tracking.
# ABOUTME: Goal status changes go through transition_goal so terminal goals stay terminal.

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import numpy as np

from src.common.errors import InvalidInputError
from src.common.grades import GRADE_POINTS, normalize_grade, resolve_now, round_half_up, semester_sort_key
from src.common.schemas import (
    GOAL_STATUSES,
    AcademicProgress,
    Achievement,
    AnalyticsSummary,
    ComparisonMetrics,
    LearningGoal,
    StudySession,
    SubjectPerformance,
)

from .recommendation import identify_improvement_areas, identify_strong_subjects
from .sessions import study_streak, total_study_hours

logger = logging.getLogger(__name__)

GOAL_ACTIVE = "active"
GOAL_COMPLETED = "completed"
GOAL_PAUSED = "paused"
GOAL_FAILED = "failed"

GOAL_TRANSITIONS = {
    GOAL_ACTIVE: {GOAL_COMPLETED, GOAL_PAUSED, GOAL_FAILED},
    GOAL_PAUSED: {GOAL_ACTIVE, GOAL_FAILED},
    GOAL_COMPLETED: set(),
    GOAL_FAILED: set(),
}


class AchievementThresholds:
    STREAK_DAYS = 7
    HIGH_GPA = 3.5


def calculate_gpa(performances: Iterable[SubjectPerformance]) -> float:
    """Unweighted mean of letter-grade points; subjects without a known grade are ignored."""

    points = [
        GRADE_POINTS[normalize_grade(p.current_grade)]
        for p in performances
        if normalize_grade(p.current_grade) in GRADE_POINTS
    ]
    if not points:
        return 0.0
    return round_half_up(sum(points) / len(points))


def calculate_gpa_trend(progress: Iterable[AcademicProgress]) -> float:
    """GPA change between the two most recent semesters; 0.0 with fewer than two."""

    ordered = sorted(progress, key=lambda p: semester_sort_key(p.year, p.semester))
    if len(ordered) < 2:
        return 0.0
    return round_half_up(ordered[-1].gpa - ordered[-2].gpa)


def detect_achievements(
    sessions: Sequence[StudySession],
    progress: Sequence[AcademicProgress],
    now: Optional[datetime] = None,
) -> List[Achievement]:
    achievements = []
    now = resolve_now(now, (s.timestamp for s in sessions))
    streak = study_streak(sessions, now)
    if streak.current >= AchievementThresholds.STREAK_DAYS:
        achievements.append(
            Achievement(
                title="Study streak",
                description=f"Studied {streak.current} days in a row",
                achieved_at=now,
                type="study_habit",
            )
        )
    ordered = sorted(progress, key=lambda p: semester_sort_key(p.year, p.semester))
    if ordered and ordered[-1].gpa >= AchievementThresholds.HIGH_GPA:
        latest = ordered[-1]
        achievements.append(
            Achievement(
                title="High GPA semester",
                description=f"Semester GPA of {latest.gpa:.2f} in {latest.year} {latest.semester}",
                achieved_at=now,
                type="academic",
            )
        )
    return achievements


def build_analytics_summary(
    performances: Optional[Iterable[SubjectPerformance]],
    progress: Optional[Iterable[AcademicProgress]],
    sessions: Optional[Iterable[StudySession]],
    now: Optional[datetime] = None,
) -> AnalyticsSummary:
    performances = list(performances or ())
    progress = list(progress or ())
    sessions = list(sessions or ())
    attendance = [p.attendance_rate for p in performances]
    average_attendance = round_half_up(sum(attendance) / len(attendance), 1) if attendance else 0.0
    return AnalyticsSummary(
        current_gpa=calculate_gpa(performances),
        gpa_change=calculate_gpa_trend(progress),
        total_study_hours=round_half_up(total_study_hours(sessions), 1),
        average_attendance=average_attendance,
        completed_credits=sum(p.credits for p in progress),
        strongest_subjects=tuple(identify_strong_subjects(performances)),
        improvement_areas=tuple(identify_improvement_areas(performances)),
        achievements=tuple(detect_achievements(sessions, progress, now)),
    )


def calculate_comparison_metrics(my_score: float, class_scores: Iterable[float]) -> ComparisonMetrics:
    """
    Place one score within a class distribution.

    Rank is 1 + the number of classmates scoring strictly higher; a score
    below everyone ranks after the whole class. An empty class yields zeros.
    """

    scores = np.asarray([float(v) for v in class_scores], dtype=float)
    total = int(scores.size)
    if total == 0:
        return ComparisonMetrics(
            my_score=my_score, class_average=0.0, class_median=0.0, percentile=0, rank=0, total_students=0
        )
    rank = int(np.sum(scores > my_score)) + 1
    percentile = int(round_half_up(max(total - rank + 1, 0) / total * 100, 0))
    return ComparisonMetrics(
        my_score=my_score,
        class_average=round_half_up(float(np.mean(scores))),
        class_median=round_half_up(float(np.median(scores))),
        percentile=percentile,
        rank=rank,
        total_students=total,
    )


def goal_progress(goal: LearningGoal) -> float:
    """Percent of target reached, clamped to 0-100 and rounded to one decimal."""

    if goal.target_value <= 0:
        logger.warning("Goal %s has non-positive target %r; reporting 0%% progress", goal.id, goal.target_value)
        return 0.0
    percent = goal.current_value / goal.target_value * 100
    return round_half_up(max(0.0, min(100.0, percent)), 1)


def transition_goal(goal: LearningGoal, status: str) -> LearningGoal:
    if status not in GOAL_STATUSES:
        raise InvalidInputError(f"Unknown goal status '{status}'. Expected one of: {', '.join(GOAL_STATUSES)}.")
    if status == goal.status:
        return goal
    allowed = GOAL_TRANSITIONS.get(goal.status, set())
    if status not in allowed:
        raise InvalidInputError(f"Goal {goal.id} cannot move from '{goal.status}' to '{status}'")
    return replace(goal, status=status)


def refresh_goal_status(goal: LearningGoal, now: Optional[datetime] = None) -> LearningGoal:
    """Complete active goals that hit their target; fail active goals past their deadline."""

    if goal.status != GOAL_ACTIVE:
        return goal
    if goal.target_value > 0 and goal.current_value >= goal.target_value:
        return transition_goal(goal, GOAL_COMPLETED)
    now = resolve_now(now, [goal.deadline])
    if now > goal.deadline:
        return transition_goal(goal, GOAL_FAILED)
    return goal
