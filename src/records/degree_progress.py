# ABOUTME: Compares earned and in-progress credits against a program's requirements table.
# ABOUTME: Produces clamped category progress, eligibility, and an estimated graduation date.

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from src.common.config import ProgramRequirements, ProgressSettings
from src.common.errors import ConfigurationMissingError, InvalidInputError
from src.common.grades import add_months, resolve_now, round_half_up
from src.common.schemas import (
    STATUS_REGISTERED,
    CategoryProgress,
    DegreeProgress,
    Enrollment,
    GraduationCheck,
)
from src.common.sources import CourseCatalog

from .aggregation import earned_credits

logger = logging.getLogger(__name__)


def clamp_percent(earned: float, required: float) -> float:
    """Progress percentage in [0, 100]; a zero requirement counts as complete."""

    if required <= 0:
        return 100.0
    return round_half_up(max(0.0, min(100.0, earned / required * 100.0)), 1)


def resolve_category(enrollment: Enrollment, catalog: Optional[CourseCatalog] = None) -> str:
    if catalog is not None:
        course = catalog.get_course(enrollment.course_id)
        if course is not None:
            return course.category
    return enrollment.category


def in_progress_credits(enrollment: Enrollment) -> int:
    if enrollment.status != STATUS_REGISTERED or enrollment.is_graded:
        return 0
    return max(int(enrollment.credits), 0)


def estimate_graduation(
    remaining_credits: int,
    now: Optional[datetime] = None,
    settings: ProgressSettings = ProgressSettings(),
) -> datetime:
    if settings.average_credits_per_semester <= 0:
        raise InvalidInputError("average_credits_per_semester must be positive")
    now = resolve_now(now)
    semesters_remaining = math.ceil(max(remaining_credits, 0) / settings.average_credits_per_semester)
    return add_months(now, semesters_remaining * settings.months_per_semester)


def calculate_degree_progress(
    enrollments: Iterable[Enrollment],
    requirements: Optional[ProgramRequirements],
    catalog: Optional[CourseCatalog] = None,
    now: Optional[datetime] = None,
    settings: ProgressSettings = ProgressSettings(),
) -> DegreeProgress:
    """
    Compute per-category and overall progress toward a degree.

    Steps:
    - Resolve each enrollment's requirement category (catalog first).
    - Sum earned credits (graded, non-failing) and in-progress credits
      (registered, ungraded) per category.
    - Eligible only when the total and every category minimum are met.
    """

    if requirements is None:
        raise ConfigurationMissingError("Degree progress requires a program requirements table")

    enrollments = list(enrollments)
    earned_by_category: Dict[str, int] = {}
    in_progress_by_category: Dict[str, int] = {}
    courses_by_category: Dict[str, List[str]] = {}
    for enrollment in enrollments:
        category = resolve_category(enrollment, catalog)
        earned = earned_credits(enrollment)
        pending = in_progress_credits(enrollment)
        earned_by_category[category] = earned_by_category.get(category, 0) + earned
        in_progress_by_category[category] = in_progress_by_category.get(category, 0) + pending
        if earned or pending:
            courses_by_category.setdefault(category, []).append(enrollment.course_id)

    unmapped = set(earned_by_category) - set(requirements.categories)
    if unmapped:
        logger.warning("Enrollments in categories without requirements: %s", ", ".join(sorted(unmapped)))

    category_progress = []
    remaining_requirements = []
    for category, required in requirements.categories.items():
        earned = earned_by_category.get(category, 0)
        category_progress.append(
            CategoryProgress(
                category=category,
                required_credits=required,
                earned_credits=earned,
                in_progress_credits=in_progress_by_category.get(category, 0),
                courses=tuple(courses_by_category.get(category, [])),
                progress_percent=clamp_percent(earned, required),
            )
        )
        if earned < required:
            remaining_requirements.append(f"{category}: {earned}/{required} credits")

    total_earned = sum(earned_credits(e) for e in enrollments)
    remaining_credits = max(requirements.total_credits - total_earned, 0)
    if remaining_credits > 0:
        remaining_requirements.insert(
            0, f"Total credits: {total_earned}/{requirements.total_credits} ({remaining_credits} remaining)"
        )

    return DegreeProgress(
        program=requirements.program,
        total_required_credits=requirements.total_credits,
        earned_credits=total_earned,
        remaining_credits=remaining_credits,
        category_progress=tuple(category_progress),
        expected_graduation=estimate_graduation(remaining_credits, now, settings),
        graduation_eligible=not remaining_requirements,
        remaining_requirements=tuple(remaining_requirements),
        progress_percent=clamp_percent(total_earned, requirements.total_credits),
    )


def check_graduation_eligibility(
    enrollments: Iterable[Enrollment],
    requirements: Optional[ProgramRequirements],
    catalog: Optional[CourseCatalog] = None,
    now: Optional[datetime] = None,
    settings: ProgressSettings = ProgressSettings(),
) -> GraduationCheck:
    progress = calculate_degree_progress(enrollments, requirements, catalog, now, settings)
    return GraduationCheck(
        eligible=progress.graduation_eligible,
        progress=progress,
        missing_requirements=progress.remaining_requirements,
        estimated_graduation=progress.expected_graduation,
    )
