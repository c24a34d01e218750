# ABOUTME: Resolves students through an EnrollmentSource and runs the records engine on them.
# ABOUTME: Distinguishes unknown students (NotFoundError) from students with no data yet.

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from src.common.config import ProgramRequirements, ProgressSettings
from src.common.errors import InvalidInputError, NotFoundError
from src.common.schemas import AcademicRecord, GpaHistoryEntry, GraduationCheck, SemesterRecord, Transcript
from src.common.sources import CourseCatalog, EnrollmentSource

from .aggregation import build_academic_record, build_semester_record, gpa_history
from .degree_progress import check_graduation_eligibility
from .transcript import assemble_transcript, transcript_summary_text, transcript_to_csv

EXPORT_FORMATS = ("csv", "text")


def _require_student(source: EnrollmentSource, student_id: str) -> None:
    if not source.has_student(student_id):
        raise NotFoundError(f"No academic record for student '{student_id}'")


def get_academic_record(source: EnrollmentSource, student_id: str) -> AcademicRecord:
    _require_student(source, student_id)
    return build_academic_record(student_id, source.get_enrollments(student_id))


def get_semester_record(
    source: EnrollmentSource, student_id: str, academic_year: int, semester: str
) -> SemesterRecord:
    _require_student(source, student_id)
    enrollments = source.get_enrollments(student_id, academic_years=[academic_year], semesters=[semester])
    if not enrollments:
        raise NotFoundError(f"No enrollments for '{student_id}' in {academic_year} {semester}")
    return build_semester_record(academic_year, semester, enrollments)


def get_gpa_history(source: EnrollmentSource, student_id: str) -> List[GpaHistoryEntry]:
    _require_student(source, student_id)
    return gpa_history(source.get_enrollments(student_id))


def check_graduation(
    source: EnrollmentSource,
    student_id: str,
    requirements: Optional[ProgramRequirements],
    catalog: Optional[CourseCatalog] = None,
    now: Optional[datetime] = None,
    settings: ProgressSettings = ProgressSettings(),
) -> GraduationCheck:
    _require_student(source, student_id)
    return check_graduation_eligibility(source.get_enrollments(student_id), requirements, catalog, now, settings)


def generate_transcript(
    source: EnrollmentSource,
    student_id: str,
    academic_years: Optional[Sequence[int]] = None,
    semesters: Optional[Sequence[str]] = None,
) -> Transcript:
    record = get_academic_record(source, student_id)
    return assemble_transcript(record, academic_years, semesters)


def export_transcript(source: EnrollmentSource, student_id: str, fmt: str = "csv") -> str:
    if fmt not in EXPORT_FORMATS:
        raise InvalidInputError(f"Unsupported transcript format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}.")
    record = get_academic_record(source, student_id)
    if fmt == "csv":
        return transcript_to_csv(assemble_transcript(record))
    return transcript_summary_text(record)
