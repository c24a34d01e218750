# ABOUTME: Aggregates study sessions into hours, average durations, and daily streaks.
# ABOUTME: Filters sessions by timeframe, subject, location, and activity type.

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Optional

import pandas as pd

from src.common.grades import TIMEFRAME_LABELS, resolve_now, timeframe_bounds
from src.common.schemas import SessionFilters, StudySession, Timeframe

logger = logging.getLogger(__name__)

MIN_EFFICIENCY = 1.0
MAX_EFFICIENCY = 5.0

SESSION_COLUMNS = [
    "id",
    "subject_id",
    "subject_name",
    "timestamp",
    "date",
    "hour",
    "day_of_week",
    "duration",
    "hours",
    "type",
    "location",
    "efficiency",
]


@dataclass(frozen=True)
class StreakStats:
    current: int
    longest: int


def sanitize_sessions(sessions: Optional[Iterable[StudySession]]) -> List[StudySession]:
    """
    Drop sessions with non-positive durations and clamp out-of-range ratings.

    Each anomaly is logged; the remaining sessions are returned in input order.
    """

    valid: List[StudySession] = []
    for session in sessions or ():
        if session.duration is None or session.duration <= 0:
            logger.warning("Skipping session %s with non-positive duration %r", session.id, session.duration)
            continue
        if not MIN_EFFICIENCY <= session.efficiency <= MAX_EFFICIENCY:
            clamped = max(MIN_EFFICIENCY, min(MAX_EFFICIENCY, session.efficiency))
            logger.warning("Session %s efficiency %r clamped to %.1f", session.id, session.efficiency, clamped)
            session = replace(session, efficiency=clamped)
        valid.append(session)
    return valid


def day_of_week(moment: datetime) -> int:
    """Weekday with Sunday as 0 through Saturday as 6."""

    return (moment.weekday() + 1) % 7


def session_frame(sessions: Optional[Iterable[StudySession]]) -> pd.DataFrame:
    """Tabular view of sanitized sessions, one row per session."""

    rows = [
        {
            "id": s.id,
            "subject_id": s.subject_id,
            "subject_name": s.subject_name,
            "timestamp": s.timestamp,
            "date": s.timestamp.date(),
            "hour": s.timestamp.hour,
            "day_of_week": day_of_week(s.timestamp),
            "duration": float(s.duration),
            "hours": float(s.duration) / 60.0,
            "type": s.type,
            "location": s.location,
            "efficiency": float(s.efficiency),
        }
        for s in sanitize_sessions(sessions)
    ]
    if not rows:
        return pd.DataFrame(columns=SESSION_COLUMNS)
    return pd.DataFrame(rows, columns=SESSION_COLUMNS)


def timeframe_window(kind: str, now: Optional[datetime] = None) -> Timeframe:
    start, end = timeframe_bounds(kind, now)
    return Timeframe(kind=kind, start=start, end=end, label=TIMEFRAME_LABELS[kind])


def filter_sessions(
    sessions: Optional[Iterable[StudySession]],
    timeframe: Optional[Timeframe] = None,
    filters: Optional[SessionFilters] = None,
) -> List[StudySession]:
    results = []
    for session in sessions or ():
        if timeframe is not None and not timeframe.start <= session.timestamp <= timeframe.end:
            continue
        if filters is not None:
            if filters.subjects and session.subject_id not in filters.subjects:
                continue
            if filters.locations and session.location not in filters.locations:
                continue
            if filters.study_types and session.type not in filters.study_types:
                continue
        results.append(session)
    return results


def total_study_hours(sessions: Optional[Iterable[StudySession]], timeframe: Optional[Timeframe] = None) -> float:
    selected = filter_sessions(sanitize_sessions(sessions), timeframe)
    return sum(s.duration for s in selected) / 60.0


def average_session_duration(sessions: Optional[Iterable[StudySession]]) -> float:
    """Mean session length in minutes; 0.0 without sessions."""

    valid = sanitize_sessions(sessions)
    if not valid:
        return 0.0
    return sum(s.duration for s in valid) / len(valid)


def _calendar_date(moment: datetime, now: Optional[datetime] = None) -> date:
    if now is not None and moment.tzinfo is not None and now.tzinfo is not None:
        moment = moment.astimezone(now.tzinfo)
    return moment.date()


def current_streak(sessions: Iterable[StudySession], now: Optional[datetime] = None) -> int:
    """
    Walk sessions from most recent backwards; the session at rank i must fall
    exactly i calendar days before today. The first mismatch ends the streak.
    """

    ordered = sorted(sessions, key=lambda s: s.timestamp, reverse=True)
    if not ordered:
        return 0
    now = resolve_now(now, (s.timestamp for s in ordered))
    today = _calendar_date(now, now)
    streak = 0
    for rank, session in enumerate(ordered):
        if (today - _calendar_date(session.timestamp, now)).days != rank:
            break
        streak += 1
    return streak


def longest_streak(sessions: Iterable[StudySession], now: Optional[datetime] = None) -> int:
    """Longest run of consecutive calendar days among distinct session dates, in the zone of `now`."""

    dates = sorted({_calendar_date(s.timestamp, now) for s in sessions})
    longest = 0
    run = 0
    previous: Optional[date] = None
    for day in dates:
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def study_streak(sessions: Optional[Iterable[StudySession]], now: Optional[datetime] = None) -> StreakStats:
    valid = sanitize_sessions(sessions)
    now = resolve_now(now, (s.timestamp for s in valid))
    return StreakStats(current=current_streak(valid, now), longest=longest_streak(valid, now))
