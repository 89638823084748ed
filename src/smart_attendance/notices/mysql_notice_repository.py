from __future__ import annotations

import json
from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import Attachment, Notice
from .repository import NoticeRepository

_COLUMNS = "id, teacher_id, teacher_name, title, content, attachments, timestamp"


class MySQLNoticeRepository(NoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, notice_id: str) -> Optional[Notice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notices WHERE id=%s", (notice_id,))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_for_teachers(self, teacher_ids: Optional[Sequence[str]] = None) -> Sequence[Notice]:
        if teacher_ids is not None and not teacher_ids:
            return []
        where, params = "", ()
        if teacher_ids is not None:
            placeholders, params = in_clause(list(teacher_ids))
            where = f"WHERE teacher_id IN {placeholders}"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notices {where} ORDER BY timestamp DESC", params)
            return [self._to_model(r) for r in fetchall(cur)]

    def create(self, notice: Notice) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO notices({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s)",
                    self._params(notice),
                )
            return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def update(self, notice: Notice) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notices
                SET teacher_id=%s, teacher_name=%s, title=%s, content=%s, attachments=%s, timestamp=%s
                WHERE id=%s
                """,
                self._params(notice)[1:] + (notice.id,),
            )
            # rowcount is 0 for an unchanged row too, so confirm existence separately.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM notices WHERE id=%s", (notice.id,))
            return fetchone(cur) is not None

    def delete(self, notice_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notices WHERE id=%s", (notice_id,))
            return cur.rowcount > 0

    @staticmethod
    def _params(notice: Notice) -> tuple:
        return (
            notice.id,
            notice.teacher_id,
            notice.teacher_name,
            notice.title,
            notice.content,
            json.dumps([a.to_dict() for a in notice.attachments]),
            notice.timestamp,
        )

    @staticmethod
    def _to_model(r: dict) -> Notice:
        raw = json.loads(r.get("attachments") or "[]")
        return Notice(
            id=r["id"],
            teacher_id=r["teacher_id"],
            teacher_name=r.get("teacher_name") or "",
            title=r["title"],
            content=r["content"],
            timestamp=int(r["timestamp"]),
            attachments=tuple(Attachment(name=a["name"], type=a.get("type", ""), data=a["data"]) for a in raw),
        )
