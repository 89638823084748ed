from __future__ import annotations

from datetime import datetime

import pytest

from smart_attendance.attendance.service import DUPLICATE_MESSAGE
from smart_attendance.core.enums import AttendanceStatus
from smart_attendance.core.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.fixture()
def svc(container):
    return container.attendance_service


def test_record_defaults_to_present_and_student_name(svc):
    rec = svc.record(student_id="S1", subject="Math", date="2026-03-02", teacher_id="T1")
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.student_name == "Asha"
    assert rec.to_dict()["status"] == "PRESENT"


def test_second_mark_for_same_subject_and_day_is_rejected(svc, container):
    svc.record(student_id="S1", subject="Math", date="2026-03-02", teacher_id="T1")

    with pytest.raises(ConflictError) as e:
        svc.record(student_id="S1", subject="Math", date="2026-03-02", teacher_id="T1", status="ABSENT")
    assert e.value.message == DUPLICATE_MESSAGE

    # Other subject or other day is a different fact.
    svc.record(student_id="S1", subject="Physics", date="2026-03-02", teacher_id="T1")
    svc.record(student_id="S1", subject="Math", date="2026-03-03", teacher_id="T1")
    assert len(container.attendance_repo.items) == 3


@pytest.mark.parametrize(
    "kwargs, exc",
    [
        (dict(student_id="", subject="Math", date="2026-03-02"), ValidationError),
        (dict(student_id="S1", subject="", date="2026-03-02"), ValidationError),
        (dict(student_id="S1", subject="Math", date="02/03/2026"), ValidationError),
        (dict(student_id="S1", subject="Math", date="2026-03-02", status="LATE"), ValidationError),
        (dict(student_id="S1", subject="Math", date="2026-03-02", timestamp="now"), ValidationError),
        (dict(student_id="S1", subject="Math", date="2026-03-02", student_name=["Asha"]), ValidationError),
        (dict(student_id="T1", subject="Math", date="2026-03-02"), NotFoundError),
    ],
)
def test_record_validation(svc, kwargs, exc):
    with pytest.raises(exc):
        svc.record(teacher_id="T1", **kwargs)


def test_scan_records_present_for_linked_student(svc):
    now = datetime(2026, 3, 2, 8, 30, 0)
    rec = svc.record_scan(teacher_id="T1", subject="Math", code=" S1 ", now=now)

    assert rec.student_id == "S1"
    assert rec.date == "2026-03-02"
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.timestamp == int(now.timestamp() * 1000)

    with pytest.raises(ConflictError):
        svc.record_scan(teacher_id="T1", subject="Math", code="S1", now=now)


@pytest.mark.parametrize("code", ["S2", "T1", "unknown"])
def test_scan_rejects_students_outside_the_class(svc, code):
    with pytest.raises(ValidationError) as e:
        svc.record_scan(teacher_id="T1", subject="Math", code=code)
    assert e.value.message == "Scanned student is not assigned to your classes."


def test_query_filters_and_all_subjects(svc):
    svc.record(student_id="S1", subject="Math", date="2026-03-01", teacher_id="T1", timestamp=1)
    svc.record(student_id="S1", subject="Physics", date="2026-03-02", teacher_id="T1", timestamp=2)
    svc.record(student_id="S2", subject="Math", date="2026-03-03", teacher_id="T2", timestamp=3)

    assert [r.timestamp for r in svc.query()] == [3, 2, 1]
    assert len(svc.query(subject="All")) == 3
    assert [r.subject for r in svc.query(student_id="S1", subject="Math")] == ["Math"]
    assert [r.date for r in svc.query(start_date="2026-03-02", end_date="2026-03-02")] == ["2026-03-02"]
    assert [r.student_id for r in svc.query(teacher_id="T2")] == ["S2"]

    with pytest.raises(ValidationError):
        svc.query(start_date="yesterday")


def test_daily_stats_keeps_latest_days_oldest_first(svc):
    for day in range(1, 17):
        svc.record(student_id="S1", subject="Math", date=f"2026-03-{day:02d}", teacher_id="T1")
    svc.record(student_id="S2", subject="Math", date="2026-03-16", teacher_id="T1", status="ABSENT")

    days = svc.daily_stats(subject="Math")

    assert len(days) == 14
    assert days[0].date == "2026-03-03"
    assert days[-1].to_dict() == {"date": "2026-03-16", "present": 1, "absent": 1}


def test_student_summary_rounds_half_up(svc):
    for day in range(1, 9):
        status = "PRESENT" if day == 1 else "ABSENT"
        svc.record(student_id="S1", subject="Math", date=f"2026-03-{day:02d}", teacher_id="T1", status=status)

    summary = svc.student_summary("S1")
    assert (summary.total, summary.present, summary.absent) == (8, 1, 7)
    assert summary.percentage == 13

    assert svc.student_summary("S2").to_dict() == {"total": 0, "present": 0, "absent": 0, "percentage": 0}


def test_supplied_student_name_is_trimmed(svc):
    rec = svc.record(student_id="S1", subject="Math", date="2026-03-02", teacher_id="T1", student_name="  Asha R ")
    assert rec.student_name == "Asha R"
