# ABOUTME: Provides a CLI over the academic records engine and learning analytics pipeline.
# ABOUTME: Reads a JSON dataset (or built-in sample data) and renders results as rich tables.

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.common.config import load_analytics_config, load_program_requirements
from src.common.errors import EngineError
from src.common.grades import semester_label
from src.common.sample_data import SAMPLE_STUDENT, build_sample_dataset
from src.common.sources import Dataset, load_json_dataset
from src.learning.charts import (
    prepare_gpa_history_chart,
    prepare_grade_progress_chart,
    prepare_study_hours_chart,
    prepare_subject_distribution_chart,
    prepare_weekly_pattern_chart,
    series_to_payload,
)
from src.learning.export import analytics_to_json, sessions_to_csv
from src.learning.report import build_learning_report
from src.learning.summary import goal_progress
from src.records.service import check_graduation, export_transcript, get_academic_record, get_gpa_history

console = Console()
app = typer.Typer(help="Academic records and learning analytics for a single student.")

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _load_dataset(data: Optional[Path]) -> Dataset:
    if data is None:
        console.print("[yellow]No --data given; using built-in sample data.[/yellow]")
        return build_sample_dataset()
    return load_json_dataset(data)


def _fail(error: EngineError) -> None:
    console.print(f"[red]{error}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log data-quality warnings and loader details.")) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def record(
    student_id: str = typer.Option(SAMPLE_STUDENT, "--student-id", help="Student identifier."),
    data: Optional[Path] = typer.Option(None, "--data", help="Dataset JSON; defaults to sample data."),
) -> None:
    """
    Show semester GPAs, cumulative totals, honors, and probations.
    """
    try:
        dataset = _load_dataset(data)
        academic = get_academic_record(dataset.enrollments, student_id)
    except EngineError as error:
        _fail(error)

    console.rule(f"[bold blue]Academic Record: {student_id}[/bold blue]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Semester")
    table.add_column("Courses")
    table.add_column("Credits")
    table.add_column("GPA")
    for semester in academic.semester_records:
        table.add_row(
            semester_label(semester.academic_year, semester.semester),
            str(len(semester.enrollments)),
            str(semester.semester_credits),
            f"{semester.semester_gpa:.2f}",
        )
    console.print(table)
    console.print(f"[bold]Cumulative GPA:[/] {academic.cumulative_gpa:.2f}")
    console.print(
        f"[bold]Credits:[/] {academic.total_credits_earned} earned / {academic.total_credits_attempted} attempted"
    )
    for honor in academic.honors:
        console.print(f"[green]{honor.name}[/green] {semester_label(honor.academic_year, honor.semester)} ({honor.gpa:.2f})")
    for probation in academic.probations:
        console.print(f"[red]{probation.type}[/red] {semester_label(probation.academic_year, probation.semester)}: {probation.reason}")
    for warning in academic.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")


@app.command()
def progress(
    student_id: str = typer.Option(SAMPLE_STUDENT, "--student-id", help="Student identifier."),
    requirements: Path = typer.Option(
        Path("configs/program_requirements.yaml"), "--requirements", help="Program requirements YAML."
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Analytics overrides YAML (progress settings)."),
    data: Optional[Path] = typer.Option(None, "--data", help="Dataset JSON; defaults to sample data."),
) -> None:
    """
    Compare earned credits with the program requirements and estimate graduation.
    """
    try:
        dataset = _load_dataset(data)
        program = load_program_requirements(requirements)
        settings = load_analytics_config(config).progress
        check = check_graduation(dataset.enrollments, student_id, program, dataset.catalog, settings=settings)
    except EngineError as error:
        _fail(error)

    degree = check.progress
    console.rule(f"[bold blue]Degree Progress: {degree.program or student_id}[/bold blue]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Earned")
    table.add_column("In progress")
    table.add_column("Required")
    table.add_column("Progress")
    for category in degree.category_progress:
        table.add_row(
            category.category,
            str(category.earned_credits),
            str(category.in_progress_credits),
            str(category.required_credits),
            f"{category.progress_percent:.1f}%",
        )
    console.print(table)
    console.print(
        f"[bold]Total:[/] {degree.earned_credits}/{degree.total_required_credits} ({degree.progress_percent:.1f}%)"
    )
    console.print(f"[bold]Eligible:[/] {'yes' if check.eligible else 'no'}")
    console.print(f"[bold]Estimated graduation:[/] {check.estimated_graduation:%Y-%m}")
    for requirement in check.missing_requirements:
        console.print(f"  - {requirement}")


@app.command()
def transcript(
    student_id: str = typer.Option(SAMPLE_STUDENT, "--student-id", help="Student identifier."),
    fmt: str = typer.Option("csv", "--format", help="csv or text."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write to this file instead of stdout."),
    data: Optional[Path] = typer.Option(None, "--data", help="Dataset JSON; defaults to sample data."),
) -> None:
    """
    Export a transcript as CSV rows or a short text summary.
    """
    try:
        dataset = _load_dataset(data)
        content = export_transcript(dataset.enrollments, student_id, fmt)
    except EngineError as error:
        _fail(error)

    if output is None:
        console.print(content, markup=False, highlight=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    console.print(f"[green]Transcript written to {output}[/green]")


@app.command()
def analytics(
    student_id: str = typer.Option(SAMPLE_STUDENT, "--student-id", help="Student identifier."),
    timeframe: str = typer.Option("all", "--timeframe", help="week, month, semester, year, or all."),
    config: Optional[Path] = typer.Option(None, "--config", help="Analytics overrides YAML."),
    export: Optional[str] = typer.Option(None, "--export", help="json or csv; requires --output."),
    output: Optional[Path] = typer.Option(None, "--output", help="Export destination."),
    data: Optional[Path] = typer.Option(None, "--data", help="Dataset JSON; defaults to sample data."),
) -> None:
    """
    Summarize study habits, efficiency, and recommendations.
    """
    try:
        dataset = _load_dataset(data)
        settings = load_analytics_config(config)
        enrollments = dataset.enrollments.get_enrollments(student_id)
        report = build_learning_report(
            enrollments,
            dataset.sessions.get_sessions(student_id),
            timeframe=timeframe,
            config=settings,
            goals=dataset.goals.get(student_id, []),
        )
    except EngineError as error:
        _fail(error)

    summary = report.summary
    metrics = report.metrics
    console.rule(f"[bold blue]Learning Analytics: {student_id} ({timeframe})[/bold blue]")
    overview = Table(show_header=True, header_style="bold magenta")
    overview.add_column("Metric")
    overview.add_column("Value")
    overview.add_row("Current GPA", f"{summary.current_gpa:.2f} ({summary.gpa_change:+.2f})")
    overview.add_row("Study hours", f"{metrics.total_study_hours:.1f} ({metrics.effective_study_hours:.1f} effective)")
    overview.add_row("Average session", f"{metrics.average_session_duration:.0f} min")
    overview.add_row("Streak", f"{metrics.current_streak} current / {metrics.longest_streak} longest")
    overview.add_row("Focus score", str(metrics.focus_score))
    overview.add_row("Trend", metrics.productivity_trend)
    overview.add_row("Burnout risk", metrics.burnout_risk)
    overview.add_row("Strongest", ", ".join(summary.strongest_subjects) or "-")
    overview.add_row("Needs work", ", ".join(summary.improvement_areas) or "-")
    console.print(overview)

    weekly = Table(show_header=True, header_style="bold magenta")
    weekly.add_column("Day")
    weekly.add_column("Hours")
    weekly.add_column("Efficiency")
    for day in report.pattern.weekly_pattern:
        weekly.add_row(DAY_NAMES[day.day_of_week], f"{day.study_hours:.1f}", f"{day.efficiency:.1f}")
    console.print(weekly)

    console.print()
    console.print("[bold yellow]Recommendations[/bold yellow]")
    rec_table = Table(show_header=True, header_style="bold magenta")
    rec_table.add_column("Priority")
    rec_table.add_column("Title")
    rec_table.add_column("Description")
    for rec in report.recommendations:
        rec_table.add_row(rec.priority, rec.title, rec.description)
    console.print(rec_table)

    if report.goals:
        goal_table = Table(show_header=True, header_style="bold magenta")
        goal_table.add_column("Goal")
        goal_table.add_column("Status")
        goal_table.add_column("Progress")
        goal_table.add_column("Deadline")
        for goal in report.goals:
            goal_table.add_row(goal.title, goal.status, f"{goal_progress(goal):.1f}%", f"{goal.deadline:%Y-%m-%d}")
        console.print(goal_table)

    if export is None:
        return
    if output is None:
        console.print("[red]--export requires --output[/red]")
        raise typer.Exit(code=1)
    if export == "json":
        content = analytics_to_json(report.to_payload())
    elif export == "csv":
        content = sessions_to_csv(report.sessions)
    else:
        console.print(f"[red]Unsupported export format '{export}'. Expected json or csv.[/red]")
        raise typer.Exit(code=1)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    console.print(f"[green]Exported {export} to {output}[/green]")


@app.command()
def charts(
    student_id: str = typer.Option(SAMPLE_STUDENT, "--student-id", help="Student identifier."),
    timeframe: str = typer.Option("month", "--timeframe", help="Window for the daily study-hours chart."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write chart JSON here."),
    data: Optional[Path] = typer.Option(None, "--data", help="Dataset JSON; defaults to sample data."),
) -> None:
    """
    Prepare chart series for dashboards and optionally write them as JSON.
    """
    try:
        dataset = _load_dataset(data)
        enrollments = dataset.enrollments.get_enrollments(student_id)
        sessions = dataset.sessions.get_sessions(student_id)
        report = build_learning_report(enrollments, sessions)
        series = (
            prepare_grade_progress_chart(report.progress)
            + prepare_gpa_history_chart(get_gpa_history(dataset.enrollments, student_id))
            + prepare_study_hours_chart(sessions, timeframe)
            + prepare_subject_distribution_chart(report.performances)
            + prepare_weekly_pattern_chart(report.pattern)
        )
    except EngineError as error:
        _fail(error)

    payload = series_to_payload(series)
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Series")
    table.add_column("Type")
    table.add_column("Points")
    for entry in payload["data"]:
        table.add_row(entry["name"], entry["type"], str(len(entry["data"])))
    console.print(table)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(analytics_to_json(payload), encoding="utf-8")
        console.print(f"[green]Chart data written to {output}[/green]")


if __name__ == "__main__":
    app()
