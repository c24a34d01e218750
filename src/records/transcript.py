# ABOUTME: Flattens an academic record into a chronological, semester-grouped transcript.
# ABOUTME: Serializes transcripts to CSV rows and a short plain-text summary.

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from src.common.grades import semester_sort_key
from src.common.schemas import AcademicRecord, Transcript, TranscriptLine, TranscriptSemester

TRANSCRIPT_HEADER = ["course code", "name", "credits", "year", "semester", "grade", "GPA"]


def assemble_transcript(
    record: AcademicRecord,
    academic_years: Optional[Sequence[int]] = None,
    semesters: Optional[Sequence[str]] = None,
) -> Transcript:
    """
    Group graded course lines by semester, oldest first.

    Year and semester filters narrow the listed semesters; the summary
    figures always describe the whole record.
    """

    semester_stats = {
        (r.academic_year, r.semester): (r.semester_gpa, r.semester_credits) for r in record.semester_records
    }
    grouped = {}
    for line in record.course_grades:
        if academic_years and line.academic_year not in academic_years:
            continue
        if semesters and line.semester not in semesters:
            continue
        grouped.setdefault((line.academic_year, line.semester), []).append(line)

    transcript_semesters = []
    for key in sorted(grouped, key=lambda k: semester_sort_key(*k)):
        gpa, credits = semester_stats.get(key, (0.0, 0))
        lines = sorted(grouped[key], key=lambda line: line.course_code)
        transcript_semesters.append(
            TranscriptSemester(
                academic_year=key[0],
                semester=key[1],
                lines=tuple(lines),
                semester_gpa=gpa,
                semester_credits=credits,
            )
        )

    return Transcript(
        student_id=record.student_id,
        semesters=tuple(transcript_semesters),
        total_credits=record.total_credits_earned,
        cumulative_gpa=record.cumulative_gpa,
        honors=record.honors,
    )


def transcript_frame(lines: Iterable[TranscriptLine]) -> pd.DataFrame:
    rows = [
        {
            "course code": line.course_code,
            "name": line.course_name,
            "credits": line.credits,
            "year": line.academic_year,
            "semester": line.semester,
            "grade": line.final_grade,
            "GPA": line.grade_points,
        }
        for line in lines
    ]
    return pd.DataFrame(rows, columns=TRANSCRIPT_HEADER)


def transcript_to_csv(transcript: Transcript) -> str:
    """One row per graded enrollment under the fixed transcript header."""

    return transcript_frame(transcript.lines).to_csv(index=False, lineterminator="\n")


def transcript_summary_text(record: AcademicRecord) -> str:
    lines: List[str] = [
        "Academic Transcript",
        f"Student ID: {record.student_id}",
        f"Cumulative GPA: {record.cumulative_gpa:.2f}",
        f"Total Earned Credits: {record.total_credits_earned}",
    ]
    return "\n".join(lines)
