from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import JoinRequest
from .repository import JoinRequestRepository

_COLUMNS = "id, student_id, student_name, teacher_id, teacher_name, status, timestamp, responded_at"


class MySQLJoinRequestRepository(JoinRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, request_id: str) -> Optional[JoinRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM join_requests WHERE id=%s", (request_id,))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def find_pending(self, *, student_id: str, teacher_id: str) -> Optional[JoinRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM join_requests
                WHERE student_id=%s AND teacher_id=%s AND status=%s
                """,
                (student_id, teacher_id, RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_requests(
        self,
        *,
        teacher_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[JoinRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(teacher_id)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM join_requests WHERE {where} ORDER BY timestamp DESC",
                tuple(params),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def create(self, request: JoinRequest) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO join_requests({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        request.id,
                        request.student_id,
                        request.student_name,
                        request.teacher_id,
                        request.teacher_name,
                        RequestStatus.PENDING.value,
                        request.timestamp,
                        None,
                    ),
                )
            return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def decide(self, *, request_id: str, status: RequestStatus, responded_at: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE join_requests
                SET status=%s, responded_at=%s
                WHERE id=%s AND status=%s
                """,
                (status.value, responded_at, request_id, RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def accept(self, *, request_id: str, responded_at: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE join_requests
                SET status=%s, responded_at=%s
                WHERE id=%s AND status=%s
                """,
                (RequestStatus.ACCEPTED.value, responded_at, request_id, RequestStatus.PENDING.value),
            )
            if cur.rowcount == 0:
                return False
            # Same transaction as the status change.
            cur.execute(
                """
                INSERT IGNORE INTO student_teachers(student_id, teacher_id)
                SELECT u.id, r.teacher_id
                FROM join_requests r JOIN users u ON u.id = r.student_id
                WHERE r.id=%s AND u.role='STUDENT'
                """,
                (request_id,),
            )
            return True

    @staticmethod
    def _to_model(r: dict) -> JoinRequest:
        return JoinRequest(
            id=r["id"],
            student_id=r["student_id"],
            student_name=r["student_name"],
            teacher_id=r["teacher_id"],
            teacher_name=r.get("teacher_name") or "",
            status=RequestStatus(r["status"]),
            timestamp=int(r["timestamp"]),
            responded_at=int(r["responded_at"]) if r.get("responded_at") is not None else None,
        )
