# ABOUTME: Tests the end-to-end learning report over the deterministic sample dataset.
# ABOUTME: Checks cross-component consistency rather than exact sample numbers.

import json
from datetime import datetime

from src.common.sample_data import NEW_STUDENT, SAMPLE_STUDENT, build_sample_dataset
from src.common.schemas import LearningGoal, SessionFilters
from src.learning.export import analytics_to_json
from src.learning.recommendation import PRIORITY_ORDER
from src.learning.report import build_learning_report

NOW = datetime(2024, 6, 3, 18, 0)


def _report(student_id=SAMPLE_STUDENT, **kwargs):
    dataset = build_sample_dataset(now=NOW)
    return build_learning_report(
        dataset.enrollments.get_enrollments(student_id),
        dataset.sessions.get_sessions(student_id),
        now=NOW,
        **kwargs,
    )


def test_sample_report_is_internally_consistent():
    report = _report()
    assert len(report.pattern.weekly_pattern) == 7
    assert report.metrics.effective_study_hours <= report.metrics.total_study_hours
    assert 0 <= report.metrics.focus_score <= 100
    assert report.summary.completed_credits == sum(p.credits for p in report.progress)
    priorities = [PRIORITY_ORDER[rec.priority] for rec in report.recommendations]
    assert priorities == sorted(priorities)


def test_sample_report_flags_weak_subjects():
    report = _report()
    assert report.summary.improvement_areas == ("Statistics", "Introduction to History")
    assert "subject-improvement" in [rec.id for rec in report.recommendations]


def test_timeframe_and_filters_narrow_sessions():
    everything = _report()
    week = _report(timeframe="week")
    lectures = _report(filters=SessionFilters(study_types=("lecture",)))
    assert len(week.sessions) < len(everything.sessions)
    assert lectures.sessions
    assert all(s.type == "lecture" for s in lectures.sessions)


def test_new_student_report_is_empty_but_well_formed():
    report = _report(NEW_STUDENT)
    assert report.sessions == []
    assert report.recommendations == []
    assert report.summary.current_gpa == 0.0
    assert len(report.pattern.weekly_pattern) == 7


def test_report_payload_serializes():
    payload = _report().to_payload(exported_at=NOW)
    data = json.loads(analytics_to_json(payload))
    assert data["exported_at"] == "2024-06-03T18:00:00"
    assert set(data["analytics_metrics"]) == {"learning_pattern", "efficiency_metrics", "recommendations"}


def test_report_refreshes_goal_status():
    reached = LearningGoal("g1", "Hours", 10.0, 12.0, "hours", datetime(2024, 7, 1), "study_hours")
    overdue = LearningGoal("g2", "GPA", 3.8, 3.2, "GPA", datetime(2024, 5, 1), "gpa")
    report = _report(goals=[reached, overdue])
    assert [goal.status for goal in report.goals] == ["completed", "failed"]
