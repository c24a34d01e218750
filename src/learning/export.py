# ABOUTME: Exports study sessions as CSV and the full analytics bundle as JSON.
# ABOUTME: Dataclass results are flattened into plain dicts with ISO-formatted dates.

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from src.common.schemas import (
    AcademicProgress,
    AnalyticsSummary,
    LearningGoal,
    LearningPattern,
    LearningRecommendation,
    StudyEfficiencyMetrics,
    StudySession,
    SubjectPerformance,
)

SESSION_CSV_HEADER = ["Date", "Subject", "Duration (min)", "Type", "Location", "Efficiency"]
DATA_SOURCE = "integrated"


def _number(value: float):
    value = float(value)
    return int(value) if value.is_integer() else value


def sessions_frame(sessions: Iterable[StudySession]) -> pd.DataFrame:
    rows = [
        {
            "Date": s.timestamp.date().isoformat(),
            "Subject": s.subject_name or s.subject_id,
            "Duration (min)": _number(s.duration),
            "Type": s.type,
            "Location": s.location,
            "Efficiency": _number(s.efficiency),
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=SESSION_CSV_HEADER)


def sessions_to_csv(sessions: Iterable[StudySession]) -> str:
    return sessions_frame(sessions).to_csv(index=False, lineterminator="\n")


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclasses, tuples, and dates into JSON-compatible values."""

    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def analytics_payload(
    sessions: Iterable[StudySession],
    progress: Iterable[AcademicProgress],
    performances: Iterable[SubjectPerformance],
    goals: Iterable[LearningGoal],
    summary: AnalyticsSummary,
    pattern: LearningPattern,
    metrics: StudyEfficiencyMetrics,
    recommendations: Iterable[LearningRecommendation],
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    exported_at = exported_at or datetime.now()
    payload: Dict[str, Any] = {
        "study_sessions": list(sessions),
        "academic_progress": list(progress),
        "subject_performances": list(performances),
        "learning_goals": list(goals),
        "summary": summary,
        "analytics_metrics": {
            "learning_pattern": pattern,
            "efficiency_metrics": metrics,
            "recommendations": list(recommendations),
        },
        "exported_at": exported_at,
        "data_source": DATA_SOURCE,
    }
    return to_jsonable(payload)


def analytics_to_json(payload: Dict[str, Any]) -> str:
    return json.dumps(to_jsonable(payload), indent=2, ensure_ascii=False)


def export_filename(kind: str, fmt: str, on: Optional[date] = None) -> str:
    """Download name such as learning-analytics-2024-05-01.json."""

    on = on or date.today()
    prefix: Dict[str, str] = {"analytics": "learning-analytics", "sessions": "study-sessions"}
    return f"{prefix.get(kind, kind)}-{on.isoformat()}.{fmt}"
