from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class JoinRequest:
    """A student's request to be linked to a teacher.

    Names are copied at creation time and are not kept in sync with later renames.
    """

    id: str
    student_id: str
    student_name: str
    teacher_id: str
    teacher_name: str
    status: RequestStatus
    timestamp: int
    responded_at: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "status": self.status.value,
            "timestamp": self.timestamp,
            "respondedAt": self.responded_at,
        }
