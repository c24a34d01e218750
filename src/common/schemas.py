# ABOUTME: Defines canonical records shared by the records and learning engines.
# ABOUTME: Centralizes enrollment, session, progress, recommendation, and chart schemas.

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

CATEGORIES = ("required", "required_elective", "elective", "free")

STATUS_REGISTERED = "registered"
STATUS_COMPLETED = "completed"
STATUS_DROPPED = "dropped"
STATUS_FAILED = "failed"
STATUS_WAITLISTED = "waitlisted"
ENROLLMENT_STATUSES = (
    STATUS_REGISTERED,
    STATUS_COMPLETED,
    STATUS_DROPPED,
    STATUS_FAILED,
    STATUS_WAITLISTED,
)

SESSION_TYPES = ("lecture", "study", "assignment", "exam", "review")
SESSION_LOCATIONS = ("classroom", "library", "home", "online")
GOAL_CATEGORIES = ("gpa", "study_hours", "attendance", "skills", "credits")
GOAL_STATUSES = ("active", "completed", "paused", "failed")


@dataclass(frozen=True)
class Course:
    """Course catalog entry used to map enrollments to requirement categories."""

    course_id: str
    code: str
    name: str
    credits: int
    category: str


@dataclass(frozen=True)
class Enrollment:
    """One student's registration in one course offering for one semester."""

    id: str
    student_id: str
    course_id: str
    credits: int
    category: str
    status: str
    academic_year: int
    semester: str
    course_code: str = ""
    course_name: str = ""
    final_grade: Optional[str] = None
    grade_points: Optional[float] = None
    registration_date: Optional[date] = None
    drop_date: Optional[date] = None
    completion_date: Optional[date] = None

    @property
    def is_graded(self) -> bool:
        return self.final_grade is not None and str(self.final_grade).strip() != ""


@dataclass(frozen=True)
class SemesterRecord:
    academic_year: int
    semester: str
    enrollments: Tuple[Enrollment, ...]
    semester_gpa: float
    semester_credits: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def key(self) -> str:
        return f"{self.academic_year}-{self.semester}"


@dataclass(frozen=True)
class Honor:
    type: str
    name: str
    academic_year: int
    semester: str
    gpa: float


@dataclass(frozen=True)
class Probation:
    type: str
    academic_year: int
    semester: str
    reason: str
    requirements: Tuple[str, ...]
    resolved: bool = False


@dataclass(frozen=True)
class GpaHistoryEntry:
    academic_year: int
    semester: str
    semester_gpa: float
    cumulative_gpa: float
    credits: int


@dataclass(frozen=True)
class TranscriptLine:
    course_code: str
    course_name: str
    credits: int
    academic_year: int
    semester: str
    final_grade: str
    grade_points: float
    category: str = ""


@dataclass(frozen=True)
class AcademicRecord:
    """Everything derived from one student's enrollment history."""

    student_id: str
    semester_records: Tuple[SemesterRecord, ...]
    total_credits_earned: int
    total_credits_attempted: int
    cumulative_gpa: float
    honors: Tuple[Honor, ...]
    probations: Tuple[Probation, ...]
    course_grades: Tuple[TranscriptLine, ...]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryProgress:
    category: str
    required_credits: int
    earned_credits: int
    in_progress_credits: int
    courses: Tuple[str, ...]
    progress_percent: float


@dataclass(frozen=True)
class DegreeProgress:
    program: str
    total_required_credits: int
    earned_credits: int
    remaining_credits: int
    category_progress: Tuple[CategoryProgress, ...]
    expected_graduation: datetime
    graduation_eligible: bool
    remaining_requirements: Tuple[str, ...]
    progress_percent: float


@dataclass(frozen=True)
class GraduationCheck:
    eligible: bool
    progress: DegreeProgress
    missing_requirements: Tuple[str, ...]
    estimated_graduation: datetime


@dataclass(frozen=True)
class TranscriptSemester:
    academic_year: int
    semester: str
    lines: Tuple[TranscriptLine, ...]
    semester_gpa: float
    semester_credits: int


@dataclass(frozen=True)
class Transcript:
    student_id: str
    semesters: Tuple[TranscriptSemester, ...]
    total_credits: int
    cumulative_gpa: float
    honors: Tuple[Honor, ...] = ()

    @property
    def lines(self) -> List[TranscriptLine]:
        return [line for semester in self.semesters for line in semester.lines]


@dataclass(frozen=True)
class StudySession:
    """One timed learning activity; duration in minutes, efficiency rated 1-5."""

    id: str
    subject_id: str
    timestamp: datetime
    duration: float
    type: str
    location: str
    efficiency: float
    subject_name: str = ""
    notes: Optional[str] = None
    manual: bool = False


@dataclass(frozen=True)
class SubjectPerformance:
    subject_id: str
    subject_name: str
    category: str
    semester: str
    year: int
    current_grade: Optional[str] = None
    midterm_score: Optional[float] = None
    final_score: Optional[float] = None
    assignment_scores: Tuple[float, ...] = ()
    attendance_rate: float = 0.0
    study_hours: float = 0.0
    difficulty: float = 3.0
    satisfaction: float = 3.0


@dataclass(frozen=True)
class AcademicProgress:
    semester: str
    year: int
    gpa: float
    credits: int
    total_subjects: int
    passed_subjects: int
    failed_subjects: int
    average_grade: int


@dataclass(frozen=True)
class LearningGoal:
    id: str
    title: str
    target_value: float
    current_value: float
    unit: str
    deadline: datetime
    category: str
    status: str = "active"
    description: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TimeSlotEfficiency:
    hour: int
    efficiency: float
    sessions: int


@dataclass(frozen=True)
class LocationEfficiency:
    location: str
    frequency: int
    efficiency: float


@dataclass(frozen=True)
class CategoryDifficulty:
    category: str
    average_grade: float
    study_hours_needed: float


@dataclass(frozen=True)
class WeekdayPattern:
    day_of_week: int
    study_hours: float
    efficiency: float


@dataclass(frozen=True)
class LearningPattern:
    preferred_time_slots: Tuple[TimeSlotEfficiency, ...]
    preferred_locations: Tuple[LocationEfficiency, ...]
    subject_difficulty: Tuple[CategoryDifficulty, ...]
    weekly_pattern: Tuple[WeekdayPattern, ...]


@dataclass(frozen=True)
class StudyEfficiencyMetrics:
    total_study_hours: float
    effective_study_hours: float
    average_session_duration: float
    longest_streak: int
    current_streak: int
    focus_score: int
    productivity_trend: str
    burnout_risk: str


@dataclass(frozen=True)
class LearningRecommendation:
    id: str
    type: str
    priority: str
    title: str
    description: str
    action_items: Tuple[str, ...]
    expected_impact: str
    time_to_complete: str
    difficulty: str
    tags: Tuple[str, ...]


@dataclass(frozen=True)
class Achievement:
    title: str
    description: str
    achieved_at: datetime
    type: str


@dataclass(frozen=True)
class AnalyticsSummary:
    current_gpa: float
    gpa_change: float
    total_study_hours: float
    average_attendance: float
    completed_credits: int
    strongest_subjects: Tuple[str, ...]
    improvement_areas: Tuple[str, ...]
    achievements: Tuple[Achievement, ...] = ()


@dataclass(frozen=True)
class ComparisonMetrics:
    my_score: float
    class_average: float
    class_median: float
    percentile: int
    rank: int
    total_students: int


@dataclass(frozen=True)
class Timeframe:
    kind: str
    start: datetime
    end: datetime
    label: str


@dataclass(frozen=True)
class SessionFilters:
    subjects: Tuple[str, ...] = ()
    locations: Tuple[str, ...] = ()
    study_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChartPoint:
    x: Union[str, int, float, date, datetime]
    y: float
    label: Optional[str] = None


@dataclass(frozen=True)
class ChartSeries:
    name: str
    data: Tuple[ChartPoint, ...] = field(default_factory=tuple)
    color: Optional[str] = None
    type: str = "line"
