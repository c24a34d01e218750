# ABOUTME: Shapes progress, session, and category data into named chart series.
# ABOUTME: Empty input always yields one empty series so renderers never receive nothing.

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from src.common.grades import semester_label, semester_sort_key
from src.common.schemas import (
    AcademicProgress,
    ChartPoint,
    ChartSeries,
    GpaHistoryEntry,
    LearningPattern,
    StudySession,
    SubjectPerformance,
)

from .sessions import filter_sessions, session_frame, timeframe_window

GPA_SERIES = "GPA"
STUDY_HOURS_SERIES = "Study hours"
SUBJECT_HOURS_SERIES = "Study hours by category"
WEEKLY_SERIES = "Weekly study hours"
SEMESTER_GPA_SERIES = "Semester GPA"
CUMULATIVE_GPA_SERIES = "Cumulative GPA"

SERIES_COLORS = {
    GPA_SERIES: "#3B82F6",
    STUDY_HOURS_SERIES: "#10B981",
    SUBJECT_HOURS_SERIES: "#F59E0B",
    WEEKLY_SERIES: "#8B5CF6",
    SEMESTER_GPA_SERIES: "#3B82F6",
    CUMULATIVE_GPA_SERIES: "#EF4444",
}

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _is_plottable(value: Any) -> bool:
    if value is None:
        return False
    try:
        return bool(np.isfinite(float(value)))
    except (TypeError, ValueError):
        return False


def _series(name: str, points: Iterable[ChartPoint], chart_type: str) -> ChartSeries:
    return ChartSeries(name=name, data=tuple(points), color=SERIES_COLORS.get(name), type=chart_type)


def _empty(name: str, chart_type: str) -> List[ChartSeries]:
    return [_series(name, (), chart_type)]


def prepare_grade_progress_chart(progress: Optional[Iterable[AcademicProgress]]) -> List[ChartSeries]:
    """GPA per semester in chronological order."""

    ordered = sorted(progress or (), key=lambda p: semester_sort_key(p.year, p.semester))
    points = [
        ChartPoint(x=semester_label(p.year, p.semester), y=float(p.gpa), label=f"GPA: {p.gpa:.2f}")
        for p in ordered
        if _is_plottable(p.gpa)
    ]
    if not points:
        return _empty(GPA_SERIES, "line")
    return [_series(GPA_SERIES, points, "line")]


def prepare_study_hours_chart(
    sessions: Optional[Iterable[StudySession]],
    timeframe: str = "month",
    now: Optional[datetime] = None,
) -> List[ChartSeries]:
    """Daily study hours inside the timeframe, one bar per calendar day."""

    sessions = list(sessions or ())
    if not sessions:
        return _empty(STUDY_HOURS_SERIES, "bar")
    if now is None:
        now = max(s.timestamp for s in sessions)
    window = timeframe_window(timeframe, now)
    frame = session_frame(filter_sessions(sessions, window))
    if frame.empty:
        return _empty(STUDY_HOURS_SERIES, "bar")

    daily = frame.groupby("date")["hours"].sum().sort_index()
    points = []
    for day, hours in daily.items():
        rounded = round(float(hours), 1)
        points.append(ChartPoint(x=day, y=rounded, label=f"{rounded} hours"))
    return [_series(STUDY_HOURS_SERIES, points, "bar")]


def prepare_subject_distribution_chart(performances: Optional[Iterable[SubjectPerformance]]) -> List[ChartSeries]:
    """Total study hours per requirement category, alphabetical."""

    rows = [
        {"category": p.category, "hours": float(p.study_hours)}
        for p in performances or ()
        if _is_plottable(p.study_hours)
    ]
    if not rows:
        return _empty(SUBJECT_HOURS_SERIES, "bar")
    totals = pd.DataFrame(rows).groupby("category")["hours"].sum().sort_index()
    points = [
        ChartPoint(x=str(category), y=float(hours), label=f"{hours:g} hours") for category, hours in totals.items()
    ]
    return [_series(SUBJECT_HOURS_SERIES, points, "bar")]


def prepare_weekly_pattern_chart(pattern: Optional[LearningPattern]) -> List[ChartSeries]:
    if pattern is None or not pattern.weekly_pattern:
        return _empty(WEEKLY_SERIES, "bar")
    points = [
        ChartPoint(
            x=WEEKDAY_NAMES[day.day_of_week],
            y=round(float(day.study_hours), 1),
            label=f"efficiency {day.efficiency:.1f}",
        )
        for day in sorted(pattern.weekly_pattern, key=lambda d: d.day_of_week)
        if _is_plottable(day.study_hours)
    ]
    return [_series(WEEKLY_SERIES, points, "bar")]


def prepare_gpa_history_chart(history: Optional[Iterable[GpaHistoryEntry]]) -> List[ChartSeries]:
    """Semester and cumulative GPA side by side, chronological."""

    ordered = sorted(history or (), key=lambda h: semester_sort_key(h.academic_year, h.semester))
    if not ordered:
        return _empty(SEMESTER_GPA_SERIES, "line")
    semester_points = []
    cumulative_points = []
    for entry in ordered:
        x = semester_label(entry.academic_year, entry.semester)
        if _is_plottable(entry.semester_gpa):
            semester_points.append(ChartPoint(x=x, y=float(entry.semester_gpa), label=f"{entry.semester_gpa:.2f}"))
        if _is_plottable(entry.cumulative_gpa):
            cumulative_points.append(
                ChartPoint(x=x, y=float(entry.cumulative_gpa), label=f"{entry.cumulative_gpa:.2f}")
            )
    return [
        _series(SEMESTER_GPA_SERIES, semester_points, "line"),
        _series(CUMULATIVE_GPA_SERIES, cumulative_points, "line"),
    ]


def _json_value(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def series_to_payload(series: Iterable[ChartSeries]) -> Dict[str, Any]:
    """
    JSON-ready dict for dashboards: {"data": [...series...], "metadata": {...}}.
    """

    series = list(series)
    data = [
        {
            "name": s.name,
            "color": s.color,
            "type": s.type,
            "data": [{"x": _json_value(p.x), "y": p.y, "label": p.label} for p in s.data],
        }
        for s in series
    ]
    return {
        "data": data,
        "metadata": {
            "series_count": len(series),
            "point_count": sum(len(s.data) for s in series),
        },
    }
