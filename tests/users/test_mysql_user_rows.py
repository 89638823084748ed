from __future__ import annotations

from smart_attendance.users.model import Admin, Student, Teacher
from smart_attendance.users.mysql_user_repository import MySQLUserRepository


def _row(user_id, role, **extra):
    return {
        "id": user_id,
        "name": user_id.lower(),
        "email": f"{user_id.lower()}@school.local",
        "password_hash": "hash",
        "role": role,
        "allow_invite": 0,
        "total_classes": 0,
        "created_at": 10,
        **extra,
    }


def test_rows_map_to_role_variants():
    subjects = {"T1": {"Math"}}
    links = {"S1": {"T1", "T2"}}

    teacher = MySQLUserRepository._to_user(_row("T1", "TEACHER", allow_invite=1, total_classes=30), subjects, links)
    student = MySQLUserRepository._to_user(_row("S1", "STUDENT"), subjects, links)
    admin = MySQLUserRepository._to_user(_row("A1", "ADMIN"), subjects, links)

    assert isinstance(teacher, Teacher)
    assert (teacher.subjects, teacher.allow_invite, teacher.total_classes) == (frozenset({"Math"}), True, 30)
    assert isinstance(student, Student) and student.teacher_ids == frozenset({"T1", "T2"})
    assert isinstance(admin, Admin)


def test_row_params_follow_the_variant():
    teacher = Teacher(
        id="T1", name="t", email="t@x", password_hash="h", created_at=1, allow_invite=True, total_classes=4
    )
    student = Student(id="S1", name="s", email="s@x", password_hash="h", created_at=2)

    assert MySQLUserRepository._row_params(teacher) == ("T1", "t", "t@x", "h", "TEACHER", 1, 4, 1)
    assert MySQLUserRepository._row_params(student) == ("S1", "s", "s@x", "h", "STUDENT", 0, 0, 2)
