from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set

import mysql.connector

from ..common.datetime_utils import now_ms
from ..core.enums import RequestStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import Admin, Student, Teacher, User
from .repository import UserRepository

_COLUMNS = "id, name, email, password_hash, role, allow_invite, total_classes, created_at"


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- reads --------
    def get_by_id(self, user_id: str) -> Optional[User]:
        users = self._select("WHERE id=%s", (user_id,))
        return users[0] if users else None

    def get_by_email(self, email: str) -> Optional[User]:
        users = self._select("WHERE email=%s", (email,))
        return users[0] if users else None

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        if role is None:
            return self._select("ORDER BY created_at DESC", ())
        return self._select("WHERE role=%s ORDER BY created_at DESC", (role.value,))

    def list_by_ids(self, user_ids: Sequence[str]) -> Sequence[User]:
        if not user_ids:
            return []
        placeholders, params = in_clause(list(user_ids))
        return self._select(f"WHERE id IN {placeholders}", params)

    def list_students_of(self, teacher_id: str) -> Sequence[User]:
        return self._select(
            "WHERE role='STUDENT' AND id IN (SELECT student_id FROM student_teachers WHERE teacher_id=%s) "
            "ORDER BY name",
            (teacher_id,),
        )

    def _select(self, tail: str, params: tuple) -> List[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users {tail}", params)
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [r["id"] for r in rows]
            subjects = self._load_subjects(cur, [r["id"] for r in rows if r["role"] == Role.TEACHER.value])
            links = self._load_links(cur, [r["id"] for r in rows if r["role"] == Role.STUDENT.value])
            by_id = {r["id"]: r for r in rows}
            return [self._to_user(by_id[i], subjects, links) for i in ids]

    @staticmethod
    def _load_subjects(cur, teacher_ids: List[str]) -> Dict[str, Set[str]]:
        out: Dict[str, Set[str]] = defaultdict(set)
        if not teacher_ids:
            return out
        placeholders, params = in_clause(teacher_ids)
        cur.execute(f"SELECT teacher_id, subject FROM teacher_subjects WHERE teacher_id IN {placeholders}", params)
        for r in fetchall(cur):
            out[r["teacher_id"]].add(r["subject"])
        return out

    @staticmethod
    def _load_links(cur, student_ids: List[str]) -> Dict[str, Set[str]]:
        out: Dict[str, Set[str]] = defaultdict(set)
        if not student_ids:
            return out
        placeholders, params = in_clause(student_ids)
        cur.execute(f"SELECT student_id, teacher_id FROM student_teachers WHERE student_id IN {placeholders}", params)
        for r in fetchall(cur):
            out[r["student_id"]].add(r["teacher_id"])
        return out

    @staticmethod
    def _to_user(row: dict, subjects: Dict[str, Set[str]], links: Dict[str, Set[str]]) -> User:
        common = dict(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=int(row["created_at"]),
        )
        role = Role(row["role"])
        if role == Role.TEACHER:
            return Teacher(
                **common,
                subjects=frozenset(subjects.get(row["id"], ())),
                allow_invite=bool(row.get("allow_invite")),
                total_classes=int(row.get("total_classes") or 0),
            )
        if role == Role.STUDENT:
            return Student(**common, teacher_ids=frozenset(links.get(row["id"], ())))
        return Admin(**common)

    # -------- writes --------
    def create(self, user: User) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO users({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s)",
                    self._row_params(user),
                )
                self._write_role_fields(cur, user)
            return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def save(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM users WHERE id=%s FOR UPDATE", (user.id,))
            if not fetchone(cur):
                return False
            params = self._row_params(user)
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, password_hash=%s, role=%s,
                    allow_invite=%s, total_classes=%s, created_at=%s
                WHERE id=%s
                """,
                params[1:] + (user.id,),
            )
            cur.execute("DELETE FROM teacher_subjects WHERE teacher_id=%s", (user.id,))
            if not isinstance(user, Student):
                cur.execute("DELETE FROM student_teachers WHERE student_id=%s", (user.id,))
            if not isinstance(user, Teacher):
                self._retire_teacher(cur, user.id)
            self._write_role_fields(cur, user)
            return True

    def delete_by_id(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            self._retire_teacher(cur, user_id)
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

    @staticmethod
    def _retire_teacher(cur, user_id: str) -> None:
        # No-op unless the account was a teacher.
        cur.execute("DELETE FROM student_teachers WHERE teacher_id=%s", (user_id,))
        cur.execute(
            "UPDATE join_requests SET status=%s, responded_at=%s WHERE teacher_id=%s AND status=%s",
            (RequestStatus.REJECTED.value, now_ms(), user_id, RequestStatus.PENDING.value),
        )

    def add_teacher_links(self, *, student_ids: Iterable[str], teacher_ids: Iterable[str]) -> int:
        student_ids = list(dict.fromkeys(student_ids))
        teacher_ids = list(dict.fromkeys(teacher_ids))
        if not student_ids or not teacher_ids:
            return 0

        placeholders, params = in_clause(student_ids)
        created = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for teacher_id in teacher_ids:
                cur.execute(
                    f"""
                    INSERT IGNORE INTO student_teachers(student_id, teacher_id)
                    SELECT id, %s FROM users
                    WHERE role='STUDENT' AND id IN {placeholders}
                    """,
                    (teacher_id,) + params,
                )
                created += cur.rowcount
        return created

    @staticmethod
    def _row_params(user: User) -> tuple:
        allow_invite = 1 if isinstance(user, Teacher) and user.allow_invite else 0
        total_classes = user.total_classes if isinstance(user, Teacher) else 0
        return (
            user.id,
            user.name,
            user.email,
            user.password_hash,
            user.role.value,
            allow_invite,
            total_classes,
            user.created_at,
        )

    @staticmethod
    def _write_role_fields(cur, user: User) -> None:
        if isinstance(user, Teacher) and user.subjects:
            cur.executemany(
                "INSERT INTO teacher_subjects(teacher_id, subject) VALUES(%s,%s)",
                [(user.id, s) for s in sorted(user.subjects)],
            )
        elif isinstance(user, Student) and user.teacher_ids:
            cur.executemany(
                "INSERT IGNORE INTO student_teachers(student_id, teacher_id) VALUES(%s,%s)",
                [(user.id, t) for t in sorted(user.teacher_ids)],
            )
