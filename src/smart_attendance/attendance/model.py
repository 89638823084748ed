from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendance fact; (student_id, subject, date) is its natural key."""

    id: str
    student_id: str
    student_name: str
    teacher_id: str
    subject: str
    date: str
    timestamp: int
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "teacherId": self.teacher_id,
            "subject": self.subject,
            "date": self.date,
            "timestamp": self.timestamp,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DailyCount:
    date: str
    present: int
    absent: int

    def to_dict(self) -> dict:
        return {"date": self.date, "present": self.present, "absent": self.absent}


@dataclass(frozen=True)
class AttendanceSummary:
    total: int
    present: int
    absent: int
    percentage: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "percentage": self.percentage,
        }
