# ABOUTME: Groups the learning analytics pipeline: sessions, patterns, efficiency, recommendations.
# ABOUTME: Re-exports the entry points the CLI and dashboards call.

from .charts import (
    prepare_gpa_history_chart,
    prepare_grade_progress_chart,
    prepare_study_hours_chart,
    prepare_subject_distribution_chart,
    prepare_weekly_pattern_chart,
    series_to_payload,
)
from .efficiency import calculate_efficiency_metrics
from .patterns import analyze_learning_patterns
from .recommendation import generate_recommendations
from .report import LearningReport, build_learning_report
from .sessions import study_streak, total_study_hours

__all__ = [
    "prepare_gpa_history_chart",
    "prepare_grade_progress_chart",
    "prepare_study_hours_chart",
    "prepare_subject_distribution_chart",
    "prepare_weekly_pattern_chart",
    "series_to_payload",
    "calculate_efficiency_metrics",
    "analyze_learning_patterns",
    "generate_recommendations",
    "LearningReport",
    "build_learning_report",
    "study_streak",
    "total_study_hours",
]
