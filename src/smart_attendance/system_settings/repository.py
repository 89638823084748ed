from __future__ import annotations

from typing import Optional, Protocol

from .model import SystemSettings


class SettingsRepository(Protocol):
    def get(self, settings_id: str) -> Optional[SystemSettings]:
        raise NotImplementedError

    def create_if_missing(self, settings: SystemSettings) -> None:
        raise NotImplementedError

    def upsert(self, settings: SystemSettings) -> None:
        raise NotImplementedError
