# ABOUTME: Scores study efficiency: focus, effective hours, productivity trend, burnout risk.
# ABOUTME: All cutoffs come from EfficiencyThresholds so they can be tuned per deployment.

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from src.common.config import EfficiencyThresholds
from src.common.grades import resolve_now, round_half_up
from src.common.schemas import StudyEfficiencyMetrics, StudySession

from .sessions import average_session_duration, sanitize_sessions, study_streak, total_study_hours

TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"
TREND_STABLE = "stable"

RISK_HIGH = "high"
RISK_MEDIUM = "medium"
RISK_LOW = "low"


def _mean_efficiency(sessions: List[StudySession]) -> float:
    if not sessions:
        return 0.0
    return sum(s.efficiency for s in sessions) / len(sessions)


def focus_score(sessions: Optional[Iterable[StudySession]], thresholds: EfficiencyThresholds = EfficiencyThresholds()) -> int:
    """Mean efficiency rescaled from 1-5 to 0-100; 0 without sessions."""

    valid = sanitize_sessions(sessions)
    if not valid:
        return 0
    return int(round_half_up(_mean_efficiency(valid) * thresholds.focus_scale, 0))


def effective_study_hours(
    sessions: Optional[Iterable[StudySession]], thresholds: EfficiencyThresholds = EfficiencyThresholds()
) -> float:
    valid = sanitize_sessions(sessions)
    return sum(s.duration for s in valid if s.efficiency >= thresholds.effective_efficiency) / 60.0


def productivity_trend(
    sessions: Optional[Iterable[StudySession]],
    now: Optional[datetime] = None,
    thresholds: EfficiencyThresholds = EfficiencyThresholds(),
) -> str:
    """
    Compare mean efficiency of the latest window against the window before it.

    An empty window has a mean efficiency of 0.
    """

    valid = sanitize_sessions(sessions)
    now = resolve_now(now, (s.timestamp for s in valid))
    window = timedelta(days=thresholds.trend_window_days)
    recent_start = now - window
    prior_start = now - 2 * window

    recent = [s for s in valid if recent_start <= s.timestamp <= now]
    prior = [s for s in valid if prior_start <= s.timestamp < recent_start]
    delta = _mean_efficiency(recent) - _mean_efficiency(prior)
    if delta > thresholds.trend_deadband:
        return TREND_INCREASING
    if delta < -thresholds.trend_deadband:
        return TREND_DECREASING
    return TREND_STABLE


def average_daily_hours(
    sessions: Optional[Iterable[StudySession]],
    now: Optional[datetime] = None,
    thresholds: EfficiencyThresholds = EfficiencyThresholds(),
) -> float:
    valid = sanitize_sessions(sessions)
    now = resolve_now(now, (s.timestamp for s in valid))
    days = thresholds.trend_window_days
    start = now - timedelta(days=days)
    hours = sum(s.duration for s in valid if start <= s.timestamp <= now) / 60.0
    return hours / days


def burnout_risk(
    sessions: Optional[Iterable[StudySession]],
    focus: int,
    now: Optional[datetime] = None,
    thresholds: EfficiencyThresholds = EfficiencyThresholds(),
) -> str:
    daily = average_daily_hours(sessions, now, thresholds)
    if daily > thresholds.burnout_high_daily_hours and focus < thresholds.burnout_high_focus:
        return RISK_HIGH
    if daily > thresholds.burnout_medium_daily_hours and focus < thresholds.burnout_medium_focus:
        return RISK_MEDIUM
    return RISK_LOW


def calculate_efficiency_metrics(
    sessions: Optional[Iterable[StudySession]],
    now: Optional[datetime] = None,
    thresholds: EfficiencyThresholds = EfficiencyThresholds(),
) -> StudyEfficiencyMetrics:
    """Bundle every efficiency indicator for one student's session history."""

    valid = sanitize_sessions(sessions)
    now = resolve_now(now, (s.timestamp for s in valid))
    focus = focus_score(valid, thresholds)
    streak = study_streak(valid, now)
    return StudyEfficiencyMetrics(
        total_study_hours=round_half_up(total_study_hours(valid), 1),
        effective_study_hours=round_half_up(effective_study_hours(valid, thresholds), 1),
        average_session_duration=round_half_up(average_session_duration(valid), 1),
        longest_streak=streak.longest,
        current_streak=streak.current,
        focus_score=focus,
        productivity_trend=productivity_trend(valid, now, thresholds),
        burnout_risk=burnout_risk(valid, focus, now, thresholds),
    )
