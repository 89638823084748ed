from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import SETTINGS_ID
from ..core.enums import NotificationType


@dataclass(frozen=True)
class SystemSettings:
    """Global school settings; a single document stored under ``SETTINGS_ID``."""

    id: str = SETTINGS_ID
    school_name: str = ""
    academic_year: str = ""
    system_notification: str = ""
    notification_type: NotificationType = NotificationType.INFO

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolName": self.school_name,
            "academicYear": self.academic_year,
            "systemNotification": self.system_notification,
            "notificationType": self.notification_type.value,
        }
