# ABOUTME: Pure grade and calendar helpers shared by the records and learning engines.
# ABOUTME: Maps letter grades to points, semester codes to dates, and timeframes to windows.

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Tuple

import pandas as pd

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

GRADE_POINTS = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "F": 0.0,
}

# Numeric score used when only a letter grade is known.
GRADE_SCORES = {
    "A+": 95,
    "A": 90,
    "A-": 87,
    "B+": 83,
    "B": 80,
    "B-": 77,
    "C+": 73,
    "C": 70,
    "C-": 67,
    "D+": 63,
    "D": 60,
    "F": 0,
}

FAILING_GRADE = "F"
# Best to worst.
GRADE_ORDER = ["A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "F"]
NEEDS_IMPROVEMENT_GRADES = frozenset({"C", "C-", "D+", "D", "F"})

GRADE_BAND_EXCELLENT = "excellent"
GRADE_BAND_GOOD = "good"
GRADE_BAND_SATISFACTORY = "satisfactory"
GRADE_BAND_NEEDS_IMPROVEMENT = "needs_improvement"
GRADE_BAND_UNKNOWN = "unknown"

SEMESTER_ORDER = {"spring": 0, "fall": 1, "intensive": 2}
SEMESTER_NAMES = {"spring": "Spring", "fall": "Fall", "intensive": "Intensive"}

# (start year offset, start month, start day, end year offset, end month, end day)
SEMESTER_CALENDAR = {
    "spring": (0, 4, 1, 0, 9, 30),
    "fall": (0, 10, 1, 1, 1, 31),
    "intensive": (1, 2, 1, 1, 3, 31),
}

TIMEFRAME_KINDS = ("week", "month", "semester", "year", "all")
TIMEFRAME_LABELS = {
    "week": "Past week",
    "month": "Past month",
    "semester": "This semester",
    "year": "Past year",
    "all": "All time",
}
SEMESTER_TIMEFRAME_MONTHS = 4
ALL_TIME_START = datetime(2020, 1, 1)


def normalize_grade(grade: Optional[str]) -> Optional[str]:
    if grade is None:
        return None
    text = str(grade).strip().upper()
    return text or None


def is_known_grade(grade: Optional[str]) -> bool:
    return normalize_grade(grade) in GRADE_POINTS


def grade_to_points(grade: Optional[str]) -> float:
    """
    Convert a letter grade to grade points.

    Unrecognized codes default to 0.0 and are logged as a data-quality warning.
    """

    normalized = normalize_grade(grade)
    if normalized is None:
        return 0.0
    if normalized not in GRADE_POINTS:
        logger.warning("Unrecognized letter grade %r; defaulting to 0.0 grade points", grade)
        return 0.0
    return GRADE_POINTS[normalized]


def grade_to_score(grade: Optional[str]) -> int:
    return GRADE_SCORES.get(normalize_grade(grade) or "", 0)


def grade_rank(grade: Optional[str]) -> int:
    """Position of the grade in GRADE_ORDER; unknown grades sort last."""

    normalized = normalize_grade(grade)
    if normalized in GRADE_POINTS:
        return GRADE_ORDER.index(normalized)
    return len(GRADE_ORDER)


def classify_grade_band(grade: Optional[str]) -> str:
    normalized = normalize_grade(grade)
    if normalized not in GRADE_POINTS:
        return GRADE_BAND_UNKNOWN
    if normalized in NEEDS_IMPROVEMENT_GRADES:
        return GRADE_BAND_NEEDS_IMPROVEMENT
    if normalized in {"A+", "A", "A-"}:
        return GRADE_BAND_EXCELLENT
    if normalized in {"B+", "B", "B-"}:
        return GRADE_BAND_GOOD
    return GRADE_BAND_SATISFACTORY


def round_half_up(value: float, digits: int = 2) -> float:
    """Round the way report cards do (2.345 -> 2.35), not banker's rounding."""

    if value is None or not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def semester_sort_key(academic_year: int, semester: str) -> Tuple[int, int, str]:
    return (int(academic_year), SEMESTER_ORDER.get(semester, len(SEMESTER_ORDER)), semester)


def semester_label(academic_year: int, semester: str) -> str:
    return f"{academic_year} {SEMESTER_NAMES.get(semester, semester)}"


def semester_date_range(academic_year: int, semester: str) -> Tuple[date, date]:
    """Return the (start, end) dates of a semester within an academic year."""

    if semester not in SEMESTER_CALENDAR:
        raise InvalidInputError(
            f"Unknown semester code '{semester}'. Expected one of: {', '.join(SEMESTER_CALENDAR)}."
        )
    start_offset, start_month, start_day, end_offset, end_month, end_day = SEMESTER_CALENDAR[semester]
    start = date(academic_year + start_offset, start_month, start_day)
    end = date(academic_year + end_offset, end_month, end_day)
    return start, end


def resolve_now(now: Optional[datetime] = None, timestamps: Iterable[datetime] = ()) -> datetime:
    """
    Pick the reference time for window calculations.

    Falls back to the current time, timezone-aware only when the supplied
    timestamps are, so comparisons never mix naive and aware values.
    """

    if now is not None:
        return now
    for ts in timestamps:
        if ts.tzinfo is not None:
            return datetime.now(timezone.utc)
        break
    return datetime.now()


def add_months(moment: datetime, months: int) -> datetime:
    return (pd.Timestamp(moment) + pd.DateOffset(months=months)).to_pydatetime()


def timeframe_bounds(kind: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    if kind not in TIMEFRAME_KINDS:
        raise InvalidInputError(f"Unsupported timeframe '{kind}'. Expected one of: {', '.join(TIMEFRAME_KINDS)}.")
    end = resolve_now(now)
    if kind == "week":
        start = end - timedelta(days=7)
    elif kind == "month":
        start = add_months(end, -1)
    elif kind == "semester":
        start = add_months(end, -SEMESTER_TIMEFRAME_MONTHS)
    elif kind == "year":
        start = add_months(end, -12)
    else:
        start = ALL_TIME_START.replace(tzinfo=end.tzinfo)
    return start, end
