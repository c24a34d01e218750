# ABOUTME: Makes the shared common package importable across both engines.
# ABOUTME: Re-exports schema types, grade helpers, and the error taxonomy for convenience.

from .errors import ConfigurationMissingError, EngineError, InvalidInputError, NotFoundError
from .grades import GRADE_POINTS, grade_to_points
from .schemas import Enrollment, LearningGoal, StudySession, SubjectPerformance

__all__ = [
    "ConfigurationMissingError",
    "EngineError",
    "InvalidInputError",
    "NotFoundError",
    "GRADE_POINTS",
    "grade_to_points",
    "Enrollment",
    "LearningGoal",
    "StudySession",
    "SubjectPerformance",
]
