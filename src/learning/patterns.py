# ABOUTME: Mines preferred study hours, locations, and weekday rhythms from sessions.
# ABOUTME: Ranks requirement categories by difficulty using subject performance snapshots.

from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from src.common.grades import GRADE_POINTS, normalize_grade
from src.common.schemas import (
    CategoryDifficulty,
    LearningPattern,
    LocationEfficiency,
    StudySession,
    SubjectPerformance,
    TimeSlotEfficiency,
    WeekdayPattern,
)

from .sessions import session_frame

DAYS_IN_WEEK = 7


def preferred_time_slots(frame: pd.DataFrame) -> List[TimeSlotEfficiency]:
    """Hours of day ranked by mean efficiency, best first; ties go to the earlier hour."""

    if frame.empty:
        return []
    grouped = (
        frame.groupby("hour")
        .agg(efficiency=("efficiency", "mean"), sessions=("efficiency", "count"))
        .reset_index()
        .sort_values(["efficiency", "hour"], ascending=[False, True], kind="mergesort")
    )
    return [
        TimeSlotEfficiency(hour=int(row.hour), efficiency=float(row.efficiency), sessions=int(row.sessions))
        for row in grouped.itertuples(index=False)
    ]


def preferred_locations(frame: pd.DataFrame) -> List[LocationEfficiency]:
    if frame.empty:
        return []
    grouped = (
        frame.groupby("location")
        .agg(frequency=("efficiency", "count"), efficiency=("efficiency", "mean"))
        .reset_index()
        .sort_values(["efficiency", "location"], ascending=[False, True], kind="mergesort")
    )
    return [
        LocationEfficiency(location=str(row.location), frequency=int(row.frequency), efficiency=float(row.efficiency))
        for row in grouped.itertuples(index=False)
    ]


def weekly_pattern(frame: pd.DataFrame) -> List[WeekdayPattern]:
    """Exactly seven entries, Sunday (0) to Saturday (6); idle days report zeros."""

    pattern = []
    for day in range(DAYS_IN_WEEK):
        day_rows = frame[frame["day_of_week"] == day] if not frame.empty else frame
        if day_rows.empty:
            pattern.append(WeekdayPattern(day_of_week=day, study_hours=0.0, efficiency=0.0))
            continue
        pattern.append(
            WeekdayPattern(
                day_of_week=day,
                study_hours=float(day_rows["hours"].sum()),
                efficiency=float(day_rows["efficiency"].mean()),
            )
        )
    return pattern


def subject_difficulty(performances: Optional[Iterable[SubjectPerformance]]) -> List[CategoryDifficulty]:
    """
    Mean grade points and study hours per category, weakest category first.

    Subjects without a recognized letter grade are ignored.
    """

    rows = []
    for performance in performances or ():
        grade = normalize_grade(performance.current_grade)
        if grade not in GRADE_POINTS:
            continue
        rows.append(
            {
                "category": performance.category,
                "grade_points": GRADE_POINTS[grade],
                "study_hours": float(performance.study_hours),
            }
        )
    if not rows:
        return []
    grouped = (
        pd.DataFrame(rows)
        .groupby("category")
        .agg(average_grade=("grade_points", "mean"), study_hours_needed=("study_hours", "mean"))
        .reset_index()
        .sort_values(["average_grade", "category"], ascending=[True, True], kind="mergesort")
    )
    return [
        CategoryDifficulty(
            category=str(row.category),
            average_grade=round(float(row.average_grade), 2),
            study_hours_needed=round(float(row.study_hours_needed), 1),
        )
        for row in grouped.itertuples(index=False)
    ]


def analyze_learning_patterns(
    sessions: Optional[Iterable[StudySession]],
    performances: Optional[Iterable[SubjectPerformance]] = None,
) -> LearningPattern:
    frame = session_frame(sessions)
    return LearningPattern(
        preferred_time_slots=tuple(preferred_time_slots(frame)),
        preferred_locations=tuple(preferred_locations(frame)),
        subject_difficulty=tuple(subject_difficulty(performances)),
        weekly_pattern=tuple(weekly_pattern(frame)),
    )
