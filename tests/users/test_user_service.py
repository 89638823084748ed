from __future__ import annotations

import pytest

from smart_attendance.core.enums import RequestStatus, Role
from smart_attendance.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from smart_attendance.users.model import Student, Teacher, to_public_dict
from smart_attendance.users.service import AuthService, UserService


def test_authenticate_checks_role_and_password(users_repo):
    auth = AuthService(users_repo)

    user = auth.authenticate("rao@school.local", "secret1", "TEACHER")
    assert user.id == "T1"

    with pytest.raises(AuthenticationError):
        auth.authenticate("rao@school.local", "secret1", "STUDENT")
    with pytest.raises(AuthenticationError):
        auth.authenticate("rao@school.local", "wrong-pass", "TEACHER")
    with pytest.raises(AuthenticationError):
        auth.authenticate("nobody@school.local", "secret1", "TEACHER")


def test_authenticate_requires_fields_and_known_role(users_repo):
    auth = AuthService(users_repo)
    with pytest.raises(ValidationError):
        auth.authenticate("", "secret1", "TEACHER")
    with pytest.raises(ValidationError) as e:
        auth.authenticate("rao@school.local", "secret1", "JANITOR")
    assert e.value.message == "Invalid role"


def test_password_reset_for_unknown_email(users_repo):
    auth = AuthService(users_repo)
    auth.request_password_reset("asha@school.local")
    with pytest.raises(NotFoundError) as e:
        auth.request_password_reset("ghost@school.local")
    assert e.value.message == "No account found with this email address."


def test_public_dict_never_contains_password_hash(users_repo):
    for user in users_repo.users.values():
        out = to_public_dict(user)
        assert "passwordHash" not in out and "password_hash" not in out
    assert to_public_dict(users_repo.users["S1"])["teacherIds"] == ["T1"]
    assert to_public_dict(users_repo.users["T1"])["subjects"] == ["Math", "Physics"]


def test_create_account_validates_and_rejects_duplicates(users_repo):
    svc = UserService(users_repo)

    created = svc.create_account(
        {"id": "S3", "name": "Chen", "email": "chen@school.local", "password": "abcdef", "role": "STUDENT"}
    )
    assert isinstance(created, Student)
    assert created.password_hash != "abcdef"

    with pytest.raises(ValidationError) as e:
        svc.create_account({"id": "S3", "name": "X", "email": "x@school.local", "password": "abcdef", "role": "STUDENT"})
    assert e.value.message == "User ID already exists"

    with pytest.raises(ValidationError) as e:
        svc.create_account({"id": "S4", "name": "X", "email": "chen@school.local", "password": "abcdef", "role": "STUDENT"})
    assert e.value.message == "Email already registered"

    with pytest.raises(ValidationError):
        svc.create_account({"id": "S5", "name": "X", "email": "y@school.local", "password": "abc", "role": "STUDENT"})


def test_register_teacher_generates_id(users_repo):
    svc = UserService(users_repo)
    teacher = svc.register_teacher(name="New", email="new@school.local", password="abcdef")
    assert isinstance(teacher, Teacher)
    assert teacher.id.startswith("TR-")
    assert users_repo.get_by_id(teacher.id) is not None


def test_update_keeps_password_when_blank_and_blocks_id_change(users_repo):
    svc = UserService(users_repo)
    before = users_repo.get_by_id("S1").password_hash

    updated = svc.update_account(
        actor_id="S1", actor_role=Role.STUDENT, user_id="S1", changes={"name": "Asha K", "password": ""}
    )
    assert updated.name == "Asha K"
    assert updated.password_hash == before

    with pytest.raises(ValidationError) as e:
        svc.update_account(actor_id="admin-001", actor_role=Role.ADMIN, user_id="S1", changes={"id": "S9"})
    assert e.value.message == "Changing User ID is not allowed."


def test_non_admin_cannot_edit_others_or_escalate(users_repo):
    svc = UserService(users_repo)
    with pytest.raises(AuthorizationError):
        svc.update_account(actor_id="S2", actor_role=Role.STUDENT, user_id="S1", changes={"name": "x"})
    with pytest.raises(AuthorizationError):
        svc.update_account(actor_id="S2", actor_role=Role.STUDENT, user_id="S2", changes={"role": "ADMIN"})
    with pytest.raises(AuthorizationError):
        svc.update_account(actor_id="S2", actor_role=Role.STUDENT, user_id="S2", changes={"teacherIds": ["T1"]})
    with pytest.raises(AuthorizationError):
        svc.update_account(actor_id="T1", actor_role=Role.TEACHER, user_id="T1", changes={"allowInvite": True})


def test_admin_update_unions_teacher_links(users_repo):
    svc = UserService(users_repo)
    updated = svc.update_account(
        actor_id="admin-001", actor_role=Role.ADMIN, user_id="S1", changes={"teacherIds": ["T2"]}
    )
    assert updated.teacher_ids == frozenset({"T1", "T2"})


def test_delete_account_refuses_admin(users_repo):
    svc = UserService(users_repo)
    with pytest.raises(ValidationError):
        svc.delete_account("admin-001")

    svc.delete_account("T1")
    assert users_repo.get_by_id("T1") is None
    assert users_repo.get_by_id("S1").teacher_ids == frozenset()

    with pytest.raises(NotFoundError):
        svc.delete_account("T1")


def test_bulk_assign_links_students_only(users_repo):
    svc = UserService(users_repo)

    result = svc.bulk_assign(["S1", "S2", "T2", "missing"], ["T1", "T2"])

    assert [u.id for u in result] == ["S1", "S2", "T2"]
    assert users_repo.get_by_id("S1").teacher_ids == frozenset({"T1", "T2"})
    assert users_repo.get_by_id("S2").teacher_ids == frozenset({"T1", "T2"})
    # Non-students are returned unchanged.
    assert isinstance(result[2], Teacher)


def test_bulk_assign_is_idempotent(users_repo):
    svc = UserService(users_repo)
    svc.bulk_assign(["S2"], ["T1"])
    svc.bulk_assign(["S2"], ["T1"])
    assert users_repo.get_by_id("S2").teacher_ids == frozenset({"T1"})


@pytest.mark.parametrize(
    "students, teachers",
    [("S1", ["T1"]), (["S1"], "T1"), (None, ["T1"]), (["S1", 3], ["T1"])],
)
def test_bulk_assign_rejects_non_lists(users_repo, students, teachers):
    with pytest.raises(ValidationError) as e:
        UserService(users_repo).bulk_assign(students, teachers)
    assert e.value.message == "Invalid data format"


def test_teacher_turned_student_drops_links_and_pending_requests(users_repo, container):
    pending = container.join_request_service.submit(student_id="S2", teacher_id="T1")

    updated = container.user_service.update_account(
        actor_id="admin-001", actor_role=Role.ADMIN, user_id="T1", changes={"role": "STUDENT"}
    )

    assert isinstance(updated, Student)
    assert "T1" not in users_repo.get_by_id("S1").teacher_ids
    assert container.join_requests_repo.get(pending.id).status == RequestStatus.REJECTED
    assert container.join_request_service.list_pending_for_teacher("T1") == []


def test_deleting_teacher_rejects_pending_requests(container):
    pending = container.join_request_service.submit(student_id="S2", teacher_id="T2")

    container.user_service.delete_account("T2")

    assert container.join_requests_repo.get(pending.id).status == RequestStatus.REJECTED
