# ABOUTME: Verifies the portal CLI exposes its commands and runs them against sample data.
# ABOUTME: Engine errors must surface as a non-zero exit instead of a traceback.

import json
from pathlib import Path

from typer.testing import CliRunner

from scripts import portal_cli

runner = CliRunner()
REQUIREMENTS = Path(__file__).resolve().parents[1] / "configs" / "program_requirements.yaml"


def test_cli_registers_all_commands():
    command_names = {cmd.name or cmd.callback.__name__ for cmd in portal_cli.app.registered_commands}
    assert {"record", "progress", "transcript", "analytics", "charts"} <= command_names


def test_record_command_prints_cumulative_gpa():
    result = runner.invoke(portal_cli.app, ["record"])
    assert result.exit_code == 0, result.output
    assert "Cumulative GPA: 3.30" in result.output


def test_unknown_student_exits_with_error():
    result = runner.invoke(portal_cli.app, ["record", "--student-id", "ghost"])
    assert result.exit_code == 1
    assert "ghost" in result.output


def test_progress_command_uses_requirements_file():
    result = runner.invoke(portal_cli.app, ["progress", "--requirements", str(REQUIREMENTS)])
    assert result.exit_code == 0, result.output
    assert "Eligible: no" in result.output


def test_missing_requirements_file_exits_with_error(tmp_path):
    result = runner.invoke(portal_cli.app, ["progress", "--requirements", str(tmp_path / "none.yaml")])
    assert result.exit_code == 1


def test_transcript_text_format():
    result = runner.invoke(portal_cli.app, ["transcript", "--format", "text"])
    assert result.exit_code == 0, result.output
    assert "Student ID: student-1" in result.output


def test_analytics_json_export(tmp_path):
    output = tmp_path / "analytics.json"
    result = runner.invoke(portal_cli.app, ["analytics", "--export", "json", "--output", str(output)])
    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert "summary" in data


def test_charts_command_writes_payload(tmp_path):
    output = tmp_path / "charts.json"
    result = runner.invoke(portal_cli.app, ["charts", "--output", str(output)])
    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["metadata"]["series_count"] == 6
