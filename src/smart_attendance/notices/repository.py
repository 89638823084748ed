from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Notice


class NoticeRepository(Protocol):
    def get(self, notice_id: str) -> Optional[Notice]:
        raise NotImplementedError

    def list_for_teachers(self, teacher_ids: Optional[Sequence[str]] = None) -> Sequence[Notice]:
        """Newest first; ``None`` means every teacher."""

        raise NotImplementedError

    def create(self, notice: Notice) -> bool:
        raise NotImplementedError

    def update(self, notice: Notice) -> bool:
        raise NotImplementedError

    def delete(self, notice_id: str) -> bool:
        raise NotImplementedError
