# ABOUTME: Loads program requirements and heuristic tuning from YAML config files.
# ABOUTME: Keeps every threshold and weighting table swappable instead of inlined.

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationMissingError, InvalidInputError


@dataclass(frozen=True)
class ProgramRequirements:
    """Credits a program requires in total and per requirement category."""

    program: str
    total_credits: int
    categories: Mapping[str, int]


@dataclass(frozen=True)
class ProgressSettings:
    average_credits_per_semester: float = 20.0
    months_per_semester: int = 6


@dataclass(frozen=True)
class EfficiencyThresholds:
    """Heuristic cutoffs for focus, trend, and burnout scoring."""

    effective_efficiency: float = 4.0
    focus_scale: float = 20.0
    trend_window_days: int = 7
    trend_deadband: float = 0.3
    burnout_high_daily_hours: float = 8.0
    burnout_high_focus: int = 60
    burnout_medium_daily_hours: float = 6.0
    burnout_medium_focus: int = 70


@dataclass(frozen=True)
class EstimationWeights:
    """Weights for estimating study load, difficulty, and satisfaction from grades."""

    hours_per_credit: float = 15.0
    category_multipliers: Mapping[str, float] = field(
        default_factory=lambda: {
            "required": 1.2,
            "required_elective": 1.1,
            "elective": 1.0,
            "free": 0.8,
        }
    )
    base_difficulty: float = 3.0
    category_difficulty: Mapping[str, float] = field(
        default_factory=lambda: {"required": 0.5, "required_elective": 0.3}
    )
    # (minimum grade points, difficulty adjustment), checked top-down; below all -> low_gpa_difficulty.
    gpa_difficulty: tuple = ((4.0, -1.0), (3.5, -0.5), (2.5, 0.0))
    low_gpa_difficulty: float = 1.0
    # (minimum grade points, satisfaction), checked top-down; below all -> 1.
    gpa_satisfaction: tuple = ((4.0, 5.0), (3.5, 4.0), (3.0, 3.0), (2.5, 2.0))
    heavy_course_credits: int = 3
    heavy_course_penalty: float = 0.3
    default_attendance: float = 90.0


@dataclass(frozen=True)
class AnalyticsConfig:
    thresholds: EfficiencyThresholds = field(default_factory=EfficiencyThresholds)
    weights: EstimationWeights = field(default_factory=EstimationWeights)
    progress: ProgressSettings = field(default_factory=ProgressSettings)


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationMissingError(f"Config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationMissingError(f"Config file {path} must contain a mapping at the top level.")
    return data


def parse_program_requirements(data: Mapping[str, Any]) -> ProgramRequirements:
    """Build ProgramRequirements from a mapping with program, total_credits, and categories."""

    missing = [key for key in ("total_credits", "categories") if key not in data]
    if missing:
        raise ConfigurationMissingError(f"Requirements table is missing keys: {', '.join(missing)}")
    categories = data["categories"] or {}
    if not isinstance(categories, Mapping):
        raise ConfigurationMissingError("Requirements 'categories' must map category name to credits.")
    return ProgramRequirements(
        program=str(data.get("program", "")),
        total_credits=int(data["total_credits"]),
        categories={str(name): int(credits) for name, credits in categories.items()},
    )


def load_program_requirements(path: Path) -> ProgramRequirements:
    data = load_yaml(path)
    section = data.get("requirements", data)
    return parse_program_requirements(section)


def load_analytics_config(path: Optional[Path] = None) -> AnalyticsConfig:
    """
    Load threshold and weighting overrides; unspecified fields keep their defaults.
    """

    config = AnalyticsConfig()
    if path is None:
        return config
    data = load_yaml(path)
    return AnalyticsConfig(
        thresholds=_override(config.thresholds, data.get("thresholds")),
        weights=_override(config.weights, data.get("weights")),
        progress=_override(config.progress, data.get("progress")),
    )


def _override(instance, overrides: Optional[Mapping[str, Any]]):
    if not overrides:
        return instance
    known = {f.name for f in fields(instance)}
    unknown = set(overrides) - known
    if unknown:
        raise InvalidInputError(f"Unknown config keys for {type(instance).__name__}: {', '.join(sorted(unknown))}")
    values = {}
    for key, value in overrides.items():
        if isinstance(value, list):
            value = tuple(tuple(item) if isinstance(item, list) else item for item in value)
        values[key] = value
    return replace(instance, **values)
