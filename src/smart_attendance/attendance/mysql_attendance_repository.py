from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, student_id, student_name, teacher_id, subject, date, timestamp, status"


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, student_id: str, subject: str, date: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE student_id=%s AND subject=%s AND date=%s
                """,
                (student_id, subject, date),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def create(self, record: AttendanceRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO attendance_records({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s)",
                    (
                        record.id,
                        record.student_id,
                        record.student_name,
                        record.teacher_id,
                        record.subject,
                        record.date,
                        record.timestamp,
                        record.status.value,
                    ),
                )
            return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def query(
        self,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        subject: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if student_id:
            clauses.append("student_id=%s")
            params.append(student_id)
        if teacher_id:
            clauses.append("teacher_id=%s")
            params.append(teacher_id)
        if subject:
            clauses.append("subject=%s")
            params.append(subject)
        if start_date:
            clauses.append("date>=%s")
            params.append(start_date)
        if end_date:
            clauses.append("date<=%s")
            params.append(end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY timestamp DESC",
                tuple(params),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    @staticmethod
    def _to_model(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            id=r["id"],
            student_id=r["student_id"],
            student_name=r["student_name"],
            teacher_id=r["teacher_id"],
            subject=r["subject"],
            date=r["date"],
            timestamp=int(r["timestamp"]),
            status=AttendanceStatus(r["status"]),
        )
