# ABOUTME: Groups the academic record engine: GPA aggregation, degree progress, transcripts.
# ABOUTME: Re-exports the entry points used by the CLI and by callers holding raw enrollments.

from .aggregation import build_academic_record, build_semester_records, cumulative_stats, gpa_history, semester_gpa
from .degree_progress import calculate_degree_progress, check_graduation_eligibility
from .transcript import assemble_transcript, transcript_summary_text, transcript_to_csv

__all__ = [
    "build_academic_record",
    "build_semester_records",
    "cumulative_stats",
    "gpa_history",
    "semester_gpa",
    "calculate_degree_progress",
    "check_graduation_eligibility",
    "assemble_transcript",
    "transcript_summary_text",
    "transcript_to_csv",
]
