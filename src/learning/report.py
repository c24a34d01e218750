# ABOUTME: Runs the full learning analytics pipeline for one student in a single call.
# ABOUTME: Chains integration, session filters, patterns, efficiency, recommendations, and summary.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from src.common.config import AnalyticsConfig
from src.common.grades import resolve_now
from src.common.schemas import (
    AcademicProgress,
    AnalyticsSummary,
    Enrollment,
    LearningGoal,
    LearningPattern,
    LearningRecommendation,
    SessionFilters,
    StudyEfficiencyMetrics,
    StudySession,
    SubjectPerformance,
)

from .efficiency import calculate_efficiency_metrics
from .export import analytics_payload
from .integration import academic_progress_from_enrollments, performances_from_enrollments
from .patterns import analyze_learning_patterns
from .recommendation import generate_recommendations
from .sessions import filter_sessions, sanitize_sessions, timeframe_window
from .summary import build_analytics_summary, refresh_goal_status


@dataclass
class LearningReport:
    timeframe: str
    sessions: List[StudySession]
    performances: List[SubjectPerformance]
    progress: List[AcademicProgress]
    pattern: LearningPattern
    metrics: StudyEfficiencyMetrics
    recommendations: List[LearningRecommendation]
    summary: AnalyticsSummary
    goals: List[LearningGoal] = field(default_factory=list)

    def to_payload(self, exported_at: Optional[datetime] = None):
        return analytics_payload(
            self.sessions,
            self.progress,
            self.performances,
            self.goals,
            self.summary,
            self.pattern,
            self.metrics,
            self.recommendations,
            exported_at=exported_at,
        )


def build_learning_report(
    enrollments: Iterable[Enrollment],
    sessions: Optional[Iterable[StudySession]],
    timeframe: str = "all",
    filters: Optional[SessionFilters] = None,
    now: Optional[datetime] = None,
    config: AnalyticsConfig = AnalyticsConfig(),
    goals: Optional[Iterable[LearningGoal]] = None,
) -> LearningReport:
    """
    Analyze one student's enrollments and sessions within a timeframe.

    `now` defaults to the current time; pass it explicitly for reproducible output.
    Active goals are completed or failed against `now` before they are returned.
    """

    enrollments = list(enrollments)
    valid = sanitize_sessions(sessions)
    now = resolve_now(now, (s.timestamp for s in valid))
    selected = filter_sessions(valid, timeframe_window(timeframe, now), filters)

    performances = performances_from_enrollments(enrollments, config.weights)
    progress = academic_progress_from_enrollments(enrollments)
    pattern = analyze_learning_patterns(selected, performances)
    metrics = calculate_efficiency_metrics(selected, now, config.thresholds)
    return LearningReport(
        timeframe=timeframe,
        sessions=selected,
        performances=performances,
        progress=progress,
        pattern=pattern,
        metrics=metrics,
        recommendations=generate_recommendations(performances, pattern, metrics),
        summary=build_analytics_summary(performances, progress, selected, now),
        goals=[refresh_goal_status(goal, now) for goal in goals or ()],
    )
