# ABOUTME: Tests loading program requirements and analytics overrides from YAML.
# ABOUTME: Verifies the shipped configs parse and that missing keys fail loudly.

from pathlib import Path

import pytest

from src.common.config import (
    EfficiencyThresholds,
    load_analytics_config,
    load_program_requirements,
    parse_program_requirements,
)
from src.common.errors import ConfigurationMissingError, InvalidInputError

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs"


def test_shipped_program_requirements():
    requirements = load_program_requirements(CONFIG_DIR / "program_requirements.yaml")
    assert requirements.total_credits == 124
    assert dict(requirements.categories) == {"required": 40, "required_elective": 30, "elective": 40, "free": 14}


def test_shipped_analytics_config_matches_defaults():
    config = load_analytics_config(CONFIG_DIR / "analytics.yaml")
    assert config.thresholds == EfficiencyThresholds()
    assert config.weights.gpa_difficulty == ((4.0, -1.0), (3.5, -0.5), (2.5, 0.0))
    assert config.progress.average_credits_per_semester == 20


def test_top_level_requirements_without_section(tmp_path):
    path = tmp_path / "reqs.yaml"
    path.write_text("program: Math\ntotal_credits: 60\ncategories:\n  required: 60\n", encoding="utf-8")
    requirements = load_program_requirements(path)
    assert requirements.program == "Math"
    assert requirements.categories == {"required": 60}


def test_missing_keys_raise_configuration_missing():
    with pytest.raises(ConfigurationMissingError):
        parse_program_requirements({"total_credits": 124})


def test_missing_file_raises_configuration_missing(tmp_path):
    with pytest.raises(ConfigurationMissingError):
        load_program_requirements(tmp_path / "absent.yaml")


def test_analytics_overrides_keep_other_defaults(tmp_path):
    path = tmp_path / "analytics.yaml"
    path.write_text("thresholds:\n  trend_deadband: 0.5\n", encoding="utf-8")
    config = load_analytics_config(path)
    assert config.thresholds.trend_deadband == 0.5
    assert config.thresholds.effective_efficiency == 4.0
    assert load_analytics_config().thresholds.trend_deadband == 0.3


def test_unknown_override_key_is_rejected(tmp_path):
    path = tmp_path / "analytics.yaml"
    path.write_text("thresholds:\n  trend_deadzone: 0.5\n", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_analytics_config(path)
