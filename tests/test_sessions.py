# ABOUTME: Tests study-hour totals, session filters, and current/longest streak calculations.
# ABOUTME: Uses fixed timestamps so streak results do not depend on the wall clock.

from datetime import datetime, timedelta, timezone

from src.common.schemas import SessionFilters, StudySession
from src.learning.sessions import (
    average_session_duration,
    current_streak,
    day_of_week,
    filter_sessions,
    longest_streak,
    sanitize_sessions,
    session_frame,
    study_streak,
    timeframe_window,
    total_study_hours,
)

NOW = datetime(2024, 5, 10, 20, 0)


def _session(ts, duration=60, efficiency=4.0, location="library", kind="study", subject_id="db", sid=None):
    return StudySession(
        id=sid or f"s-{ts.isoformat()}-{subject_id}",
        subject_id=subject_id,
        subject_name=subject_id.upper(),
        timestamp=ts,
        duration=duration,
        type=kind,
        location=location,
        efficiency=efficiency,
    )


def test_total_study_hours_sums_minutes():
    sessions = [_session(NOW, duration=90), _session(NOW - timedelta(days=1), duration=30)]
    assert total_study_hours(sessions) == 2.0


def test_total_study_hours_respects_timeframe():
    sessions = [_session(NOW - timedelta(days=1)), _session(NOW - timedelta(days=40))]
    assert total_study_hours(sessions, timeframe_window("week", NOW)) == 1.0
    assert total_study_hours(sessions, timeframe_window("all", NOW)) == 2.0


def test_average_session_duration():
    assert average_session_duration([_session(NOW, duration=60), _session(NOW, duration=120)]) == 90.0
    assert average_session_duration([]) == 0.0


def test_single_session_today_has_streak_of_one():
    streak = study_streak([_session(NOW)], NOW)
    assert streak.current == 1
    assert streak.longest == 1


def test_consecutive_days_build_current_streak():
    sessions = [_session(NOW - timedelta(days=offset)) for offset in range(3)]
    assert current_streak(sessions, NOW) == 3
    assert longest_streak(sessions) == 3


def test_gap_breaks_current_streak():
    sessions = [_session(NOW), _session(NOW - timedelta(days=2))]
    assert current_streak(sessions, NOW) == 1


def test_no_session_today_means_no_current_streak():
    sessions = [_session(NOW - timedelta(days=1)), _session(NOW - timedelta(days=2))]
    assert current_streak(sessions, NOW) == 0
    assert longest_streak(sessions) == 2


def test_current_streak_counts_one_session_per_day():
    sessions = [_session(NOW), _session(NOW - timedelta(hours=2)), _session(NOW - timedelta(days=1))]
    assert current_streak(sessions, NOW) == 1
    assert longest_streak(sessions) == 2


def test_sessions_eight_days_apart_never_link():
    sessions = [_session(NOW), _session(NOW - timedelta(days=8))]
    streak = study_streak(sessions, NOW)
    assert streak.longest == 1
    assert streak.current == 1

    later = study_streak(sessions, NOW + timedelta(days=3))
    assert later.longest == 1
    assert later.current == 0


def test_streaks_do_not_reorder_input():
    sessions = [_session(NOW - timedelta(days=1)), _session(NOW)]
    snapshot = list(sessions)
    study_streak(sessions, NOW)
    assert sessions == snapshot


def test_empty_sessions():
    streak = study_streak([], NOW)
    assert (streak.current, streak.longest) == (0, 0)
    assert total_study_hours(None) == 0.0


def test_malformed_sessions_are_skipped_or_clamped():
    sessions = [_session(NOW, duration=0), _session(NOW, efficiency=7.0)]
    cleaned = sanitize_sessions(sessions)
    assert len(cleaned) == 1
    assert cleaned[0].efficiency == 5.0


def test_filter_sessions_by_subject_location_and_type():
    sessions = [
        _session(NOW, subject_id="db", location="library", kind="study"),
        _session(NOW, subject_id="stat", location="home", kind="review"),
        _session(NOW, subject_id="db", location="home", kind="lecture"),
    ]
    assert len(filter_sessions(sessions, filters=SessionFilters(subjects=("db",)))) == 2
    assert len(filter_sessions(sessions, filters=SessionFilters(locations=("home",)))) == 2
    only = filter_sessions(sessions, filters=SessionFilters(subjects=("db",), study_types=("lecture",)))
    assert [s.location for s in only] == ["home"]


def test_day_of_week_starts_on_sunday():
    assert day_of_week(datetime(2024, 5, 12)) == 0
    assert day_of_week(datetime(2024, 5, 13)) == 1
    assert day_of_week(datetime(2024, 5, 18)) == 6


def test_session_frame_columns():
    frame = session_frame([_session(NOW, duration=30)])
    assert frame.loc[0, "hours"] == 0.5
    assert frame.loc[0, "hour"] == 20
    assert session_frame([]).empty


def test_streaks_use_the_calendar_day_of_now_for_aware_timestamps():
    tokyo = timezone(timedelta(hours=9))
    now = datetime(2024, 5, 10, 20, 0, tzinfo=tokyo)
    # UTC dates 05-08 and 05-10; Tokyo dates 05-09 and 05-10.
    sessions = [
        _session(datetime(2024, 5, 8, 23, 0, tzinfo=timezone.utc)),
        _session(datetime(2024, 5, 10, 1, 0, tzinfo=timezone.utc)),
    ]
    assert longest_streak(sessions, now) == 2
    streak = study_streak(sessions, now)
    assert (streak.current, streak.longest) == (2, 2)
