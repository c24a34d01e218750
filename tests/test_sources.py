# ABOUTME: Tests the in-memory enrollment/session sources, JSON dataset loading, and sample data.
# ABOUTME: Only manually logged sessions may be edited or deleted.

import json
from datetime import datetime

import pytest

from src.common.errors import InvalidInputError, NotFoundError
from src.common.sample_data import NEW_STUDENT, SAMPLE_STUDENT, build_sample_dataset
from src.common.schemas import StudySession
from src.common.sources import InMemorySessionSource, dataset_from_dict, load_json_dataset
from src.learning.report import build_learning_report

NOW = datetime(2024, 6, 3, 18, 0)

PAYLOAD = {
    "students": ["s1", "s2"],
    "courses": [{"course_id": "cs101", "code": "CS101", "name": "Programming", "credits": 2, "category": "required"}],
    "enrollments": [
        {
            "id": "e1",
            "student_id": "s1",
            "course_id": "cs101",
            "credits": 2,
            "category": "required",
            "status": "completed",
            "academic_year": 2024,
            "semester": "spring",
            "final_grade": "A",
            "completion_date": "2024-07-30",
        },
        {
            "id": "e2",
            "student_id": "s1",
            "course_id": "db301",
            "credits": 2,
            "category": "required",
            "status": "registered",
            "academic_year": 2024,
            "semester": "fall",
        },
    ],
    "sessions": [
        {
            "student_id": "s1",
            "id": "x1",
            "subject_id": "cs101",
            "timestamp": "2024-05-10T09:00:00",
            "duration": 90,
            "type": "lecture",
            "location": "classroom",
            "efficiency": 4,
        }
    ],
}


def _manual_session(duration=45):
    return StudySession("", "cs101", NOW, duration, "review", "home", 4.0)


def test_dataset_from_dict_parses_rows():
    dataset = dataset_from_dict(PAYLOAD)
    enrollments = dataset.enrollments.get_enrollments("s1")
    assert len(enrollments) == 2
    assert enrollments[0].completion_date.isoformat() == "2024-07-30"
    assert dataset.sessions.get_sessions("s1")[0].timestamp == datetime(2024, 5, 10, 9, 0)
    assert dataset.catalog.get_course("cs101").category == "required"


def test_enrollment_filters():
    source = dataset_from_dict(PAYLOAD).enrollments
    assert [e.id for e in source.get_enrollments("s1", statuses=["registered"])] == ["e2"]
    assert [e.id for e in source.get_enrollments("s1", semesters=["spring"], academic_years=[2024])] == ["e1"]
    assert source.get_enrollments("s1", categories=["free"]) == []


def test_known_student_without_rows_and_unknown_student():
    source = dataset_from_dict(PAYLOAD).enrollments
    assert source.get_enrollments("s2") == []
    with pytest.raises(NotFoundError):
        source.get_enrollments("ghost")


def test_load_json_dataset(tmp_path):
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    assert len(load_json_dataset(path).sessions.get_sessions("s1")) == 1
    with pytest.raises(NotFoundError):
        load_json_dataset(tmp_path / "missing.json")


def test_manual_sessions_can_be_edited_and_deleted():
    source = InMemorySessionSource()
    stored = source.add_session("s1", _manual_session())
    assert stored.id
    assert stored.manual is True

    updated = source.update_session("s1", stored.id, duration=60)
    assert updated.duration == 60
    assert source.get_sessions("s1") == [updated]

    source.delete_session("s1", stored.id)
    assert source.get_sessions("s1") == []


def test_derived_sessions_are_read_only():
    derived = StudySession("lecture_0_0", "cs101", NOW, 90, "lecture", "classroom", 4.0)
    source = InMemorySessionSource({"s1": [derived]})
    with pytest.raises(InvalidInputError):
        source.delete_session("s1", "lecture_0_0")
    with pytest.raises(InvalidInputError):
        source.update_session("s1", "lecture_0_0", duration=10)
    with pytest.raises(NotFoundError):
        source.delete_session("s1", "missing")


def test_non_positive_duration_is_rejected_on_add():
    with pytest.raises(InvalidInputError):
        InMemorySessionSource().add_session("s1", _manual_session(duration=0))


def test_sample_dataset_is_deterministic():
    first = build_sample_dataset(now=NOW)
    second = build_sample_dataset(now=NOW)
    sessions = first.sessions.get_sessions(SAMPLE_STUDENT)
    assert sessions == second.sessions.get_sessions(SAMPLE_STUDENT)
    assert sessions
    assert all(s.timestamp <= NOW for s in sessions)
    assert all(1.0 <= s.efficiency <= 5.0 for s in sessions)
    assert len(first.enrollments.get_enrollments(SAMPLE_STUDENT)) == 10
    assert first.enrollments.get_enrollments(NEW_STUDENT) == []
    assert len(first.catalog) == 9


def test_goals_are_parsed_per_student():
    payload = dict(PAYLOAD)
    payload["goals"] = [
        {
            "student_id": "s1",
            "id": "g1",
            "title": "Study 20 hours",
            "target_value": 20,
            "current_value": 5,
            "unit": "hours",
            "deadline": "2024-06-30T00:00:00",
            "category": "study_hours",
        }
    ]
    goal = dataset_from_dict(payload).goals["s1"][0]
    assert goal.status == "active"
    assert goal.deadline == datetime(2024, 6, 30)
    assert goal.target_value == 20.0


def test_unknown_goal_category_and_enrollment_status_are_rejected():
    bad_goal = dict(PAYLOAD)
    bad_goal["goals"] = [
        {
            "student_id": "s1",
            "id": "g1",
            "title": "Mystery",
            "target_value": 1,
            "unit": "x",
            "deadline": "2024-06-30",
            "category": "vibes",
        }
    ]
    with pytest.raises(InvalidInputError):
        dataset_from_dict(bad_goal)

    bad_status = dict(PAYLOAD)
    bad_status["enrollments"] = [dict(PAYLOAD["enrollments"][0], status="graduated")]
    with pytest.raises(InvalidInputError):
        dataset_from_dict(bad_status)


def test_sample_dataset_ships_goals_for_sample_student():
    dataset = build_sample_dataset(now=NOW)
    assert {goal.category for goal in dataset.goals[SAMPLE_STUDENT]} == {"gpa", "study_hours"}
    assert NEW_STUDENT not in dataset.goals


def test_mixed_offsets_are_normalized_to_naive_utc():
    payload = {
        "students": ["s1"],
        "sessions": [
            dict(PAYLOAD["sessions"][0], id="z", timestamp="2025-03-19T10:00:00Z"),
            dict(PAYLOAD["sessions"][0], id="naive", timestamp="2025-03-18T10:00:00"),
            dict(PAYLOAD["sessions"][0], id="tokyo", timestamp="2025-03-17T18:00:00+09:00"),
        ],
        "goals": [
            {
                "student_id": "s1",
                "id": "g1",
                "title": "Study 20 hours",
                "target_value": 20,
                "unit": "hours",
                "deadline": "2025-06-30",
                "category": "study_hours",
            }
        ],
    }
    dataset = dataset_from_dict(payload)
    sessions = dataset.sessions.get_sessions("s1")
    assert [s.timestamp for s in sessions] == [
        datetime(2025, 3, 19, 10, 0),
        datetime(2025, 3, 18, 10, 0),
        datetime(2025, 3, 17, 9, 0),
    ]
    assert all(s.timestamp.tzinfo is None for s in sessions)

    report = build_learning_report([], sessions, goals=dataset.goals["s1"], now=datetime(2025, 3, 20, 12, 0))
    assert report.metrics.longest_streak == 3
    assert report.goals[0].status == "active"
