from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional

import pytest
from werkzeug.security import generate_password_hash

from smart_attendance.container import build_services
from smart_attendance.core.enums import RequestStatus, Role
from smart_attendance.users.model import Admin, Student, Teacher

PASSWORD = "secret1"


def _hash(password: str) -> str:
    # Low iteration count keeps the suite fast.
    return generate_password_hash(password, method="pbkdf2:sha256:1000")


class FakeUsersRepo:
    def __init__(self):
        self.users: Dict[str, object] = {}
        # Set by the container fixture; retiring a teacher also touches join requests.
        self.join_requests = None

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        for u in self.users.values():
            if u.email == email:
                return u
        return None

    def list_users(self, *, role=None):
        items = [u for u in self.users.values() if role is None or u.role == role]
        return sorted(items, key=lambda u: u.created_at, reverse=True)

    def list_by_ids(self, user_ids):
        return [self.users[i] for i in user_ids if i in self.users]

    def list_students_of(self, teacher_id):
        items = [u for u in self.users.values() if isinstance(u, Student) and teacher_id in u.teacher_ids]
        return sorted(items, key=lambda u: u.name)

    def create(self, user):
        if user.id in self.users or self.get_by_email(user.email):
            return False
        self.users[user.id] = user
        return True

    def save(self, user):
        if user.id not in self.users:
            return False
        current = self.users[user.id]
        if isinstance(user, Student) and isinstance(current, Student):
            user = replace(user, teacher_ids=user.teacher_ids | current.teacher_ids)
        self.users[user.id] = user
        if not isinstance(user, Teacher):
            self._retire_teacher(user.id)
        return True

    def delete_by_id(self, user_id):
        if self.users.pop(user_id, None) is None:
            return False
        self._retire_teacher(user_id)
        return True

    def _retire_teacher(self, user_id):
        for sid, u in list(self.users.items()):
            if isinstance(u, Student) and user_id in u.teacher_ids:
                self.users[sid] = replace(u, teacher_ids=u.teacher_ids - {user_id})
        if self.join_requests is not None:
            for r in self.join_requests.list_requests(teacher_id=user_id, status=RequestStatus.PENDING):
                self.join_requests.decide(request_id=r.id, status=RequestStatus.REJECTED, responded_at=0)

    def add_teacher_links(self, *, student_ids, teacher_ids):
        teacher_ids = frozenset(teacher_ids)
        created = 0
        for sid in set(student_ids):
            u = self.users.get(sid)
            if not isinstance(u, Student):
                continue
            created += len(teacher_ids - u.teacher_ids)
            self.users[sid] = replace(u, teacher_ids=u.teacher_ids | teacher_ids)
        return created


class FakeJoinRequestsRepo:
    """Mirrors the storage guarantees: one PENDING request per pair, compare-and-set decide."""

    def __init__(self, users: FakeUsersRepo):
        self.items: Dict[str, object] = {}
        self.users = users

    def get(self, request_id):
        return self.items.get(request_id)

    def find_pending(self, *, student_id, teacher_id):
        for r in self.items.values():
            if r.student_id == student_id and r.teacher_id == teacher_id and r.is_pending:
                return r
        return None

    def list_requests(self, *, teacher_id=None, student_id=None, status=None):
        items = [
            r
            for r in self.items.values()
            if (teacher_id is None or r.teacher_id == teacher_id)
            and (student_id is None or r.student_id == student_id)
            and (status is None or r.status == status)
        ]
        return sorted(items, key=lambda r: r.timestamp, reverse=True)

    def create(self, request):
        if request.id in self.items:
            return False
        if self.find_pending(student_id=request.student_id, teacher_id=request.teacher_id):
            return False
        self.items[request.id] = request
        return True

    def decide(self, *, request_id, status, responded_at):
        req = self.items.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.items[request_id] = replace(req, status=status, responded_at=responded_at)
        return True

    def accept(self, *, request_id, responded_at):
        req = self.items.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        # Link first: if it raises, the request stays PENDING.
        self.users.add_teacher_links(student_ids=[req.student_id], teacher_ids=[req.teacher_id])
        self.items[request_id] = replace(req, status=RequestStatus.ACCEPTED, responded_at=responded_at)
        return True


class FakeAttendanceRepo:
    def __init__(self):
        self.items: Dict[str, object] = {}

    def find(self, *, student_id, subject, date):
        for r in self.items.values():
            if (r.student_id, r.subject, r.date) == (student_id, subject, date):
                return r
        return None

    def create(self, record):
        if record.id in self.items or self.find(student_id=record.student_id, subject=record.subject, date=record.date):
            return False
        self.items[record.id] = record
        return True

    def query(self, *, student_id=None, teacher_id=None, subject=None, start_date=None, end_date=None):
        items = [
            r
            for r in self.items.values()
            if (student_id is None or r.student_id == student_id)
            and (teacher_id is None or r.teacher_id == teacher_id)
            and (subject is None or r.subject == subject)
            and (start_date is None or r.date >= start_date)
            and (end_date is None or r.date <= end_date)
        ]
        return sorted(items, key=lambda r: r.timestamp, reverse=True)


class _FakeTeacherContentRepo:
    order_attr = "timestamp"

    def __init__(self):
        self.items: Dict[str, object] = {}

    def get(self, item_id):
        return self.items.get(item_id)

    def list_for_teachers(self, teacher_ids=None):
        items = [i for i in self.items.values() if teacher_ids is None or i.teacher_id in teacher_ids]
        return sorted(items, key=lambda i: getattr(i, self.order_attr), reverse=True)

    def create(self, item):
        if item.id in self.items:
            return False
        self.items[item.id] = item
        return True

    def update(self, item):
        if item.id not in self.items:
            return False
        self.items[item.id] = item
        return True

    def delete(self, item_id):
        return self.items.pop(item_id, None) is not None


class FakeNoticesRepo(_FakeTeacherContentRepo):
    order_attr = "timestamp"


class FakePapersRepo(_FakeTeacherContentRepo):
    order_attr = "uploaded_at"


class FakeSettingsRepo:
    def __init__(self):
        self.items: Dict[str, object] = {}

    def get(self, settings_id):
        return self.items.get(settings_id)

    def create_if_missing(self, settings):
        self.items.setdefault(settings.id, settings)

    def upsert(self, settings):
        self.items[settings.id] = settings


@pytest.fixture()
def users_repo():
    """Admin, two teachers and two students; S1 is already linked to T1."""

    repo = FakeUsersRepo()
    repo.users = {
        "admin-001": Admin(
            id="admin-001", name="Admin", email="admin@school.local", password_hash=_hash(PASSWORD), created_at=1
        ),
        "T1": Teacher(
            id="T1",
            name="Mr. Rao",
            email="rao@school.local",
            password_hash=_hash(PASSWORD),
            created_at=2,
            subjects=frozenset({"Math", "Physics"}),
        ),
        "T2": Teacher(
            id="T2",
            name="Ms. Iyer",
            email="iyer@school.local",
            password_hash=_hash(PASSWORD),
            created_at=3,
            subjects=frozenset({"Chemistry"}),
        ),
        "S1": Student(
            id="S1",
            name="Asha",
            email="asha@school.local",
            password_hash=_hash(PASSWORD),
            created_at=4,
            teacher_ids=frozenset({"T1"}),
        ),
        "S2": Student(
            id="S2", name="Bilal", email="bilal@school.local", password_hash=_hash(PASSWORD), created_at=5
        ),
    }
    return repo


@pytest.fixture()
def container(users_repo):
    join_requests = FakeJoinRequestsRepo(users_repo)
    users_repo.join_requests = join_requests
    return build_services(
        users_repo=users_repo,
        join_requests_repo=join_requests,
        attendance_repo=FakeAttendanceRepo(),
        notices_repo=FakeNoticesRepo(),
        papers_repo=FakePapersRepo(),
        settings_repo=FakeSettingsRepo(),
    )


@pytest.fixture()
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from smart_attendance.main import create_app

    return create_app(container=container)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(email: str, role: Role, password: Optional[str] = PASSWORD):
        resp = client.post("/api/login", json={"email": email, "password": password, "role": role.value})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    return _login
