from __future__ import annotations

from typing import Optional

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SystemSettings
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, settings_id: str) -> Optional[SystemSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, school_name, academic_year, system_notification, notification_type
                FROM system_settings WHERE id=%s
                """,
                (settings_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SystemSettings(
                id=r["id"],
                school_name=r.get("school_name") or "",
                academic_year=r.get("academic_year") or "",
                system_notification=r.get("system_notification") or "",
                notification_type=NotificationType(r["notification_type"]),
            )

    def create_if_missing(self, settings: SystemSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO system_settings(id, school_name, academic_year, system_notification, notification_type)
                VALUES(%s,%s,%s,%s,%s)
                """,
                self._params(settings),
            )

    def upsert(self, settings: SystemSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_settings(id, school_name, academic_year, system_notification, notification_type)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    school_name=VALUES(school_name),
                    academic_year=VALUES(academic_year),
                    system_notification=VALUES(system_notification),
                    notification_type=VALUES(notification_type)
                """,
                self._params(settings),
            )

    @staticmethod
    def _params(s: SystemSettings) -> tuple:
        return (s.id, s.school_name, s.academic_year, s.system_notification, s.notification_type.value)
