from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find(self, *, student_id: str, subject: str, date: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> bool:
        """Insert unless a record with the same (student, subject, date) or id exists."""

        raise NotImplementedError

    def query(
        self,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        subject: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Filtered records, newest timestamp first. Date bounds are inclusive."""

        raise NotImplementedError
