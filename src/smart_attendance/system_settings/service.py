from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from ..core.constants import SETTINGS_ID
from ..core.enums import NotificationType
from ..core.exceptions import ValidationError
from .model import SystemSettings
from .repository import SettingsRepository

_TEXT_FIELDS = {
    "schoolName": "school_name",
    "academicYear": "academic_year",
    "systemNotification": "system_notification",
}


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get(self) -> SystemSettings:
        current = self._settings.get(SETTINGS_ID)
        if current is None:
            self._settings.create_if_missing(SystemSettings())
            current = self._settings.get(SETTINGS_ID) or SystemSettings()
        return current

    def save(self, data: Mapping[str, Any]) -> SystemSettings:
        """Merge the given fields into the global settings (partial upsert)."""

        changes: dict = {}
        for key, attr in _TEXT_FIELDS.items():
            if key in data:
                value = data[key]
                if value is not None and not isinstance(value, str):
                    raise ValidationError(f"{key} must be a string")
                changes[attr] = (value or "").strip()
        if "notificationType" in data:
            try:
                changes["notification_type"] = NotificationType(data["notificationType"])
            except ValueError:
                raise ValidationError("Invalid notification type")

        updated = replace(self.get(), **changes)
        self._settings.upsert(updated)
        return updated
