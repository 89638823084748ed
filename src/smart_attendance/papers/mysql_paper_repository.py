from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import QuestionPaper
from .repository import PaperRepository

_COLUMNS = "id, teacher_id, teacher_name, subject, year, title, file_name, file_data, uploaded_at"


class MySQLPaperRepository(PaperRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, paper_id: str) -> Optional[QuestionPaper]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM question_papers WHERE id=%s", (paper_id,))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_for_teachers(self, teacher_ids: Optional[Sequence[str]] = None) -> Sequence[QuestionPaper]:
        if teacher_ids is not None and not teacher_ids:
            return []
        where, params = "", ()
        if teacher_ids is not None:
            placeholders, params = in_clause(list(teacher_ids))
            where = f"WHERE teacher_id IN {placeholders}"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM question_papers {where} ORDER BY uploaded_at DESC", params)
            return [self._to_model(r) for r in fetchall(cur)]

    def create(self, paper: QuestionPaper) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO question_papers({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                    (
                        paper.id,
                        paper.teacher_id,
                        paper.teacher_name,
                        paper.subject,
                        paper.year,
                        paper.title,
                        paper.file_name,
                        paper.file_data,
                        paper.uploaded_at,
                    ),
                )
            return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def delete(self, paper_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM question_papers WHERE id=%s", (paper_id,))
            return cur.rowcount > 0

    @staticmethod
    def _to_model(r: dict) -> QuestionPaper:
        return QuestionPaper(
            id=r["id"],
            teacher_id=r["teacher_id"],
            teacher_name=r["teacher_name"],
            subject=r["subject"],
            year=r["year"],
            title=r["title"],
            file_name=r["file_name"],
            file_data=r["file_data"],
            uploaded_at=int(r["uploaded_at"]),
        )
