from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any, List, Optional, Sequence

from ..common.datetime_utils import now_local, to_epoch_ms
from ..common.ids import id_or_new
from ..common.validators import optional_string, require_iso_date, require_non_empty
from ..core.constants import ALL_SUBJECTS, STATS_MAX_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.model import Student
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceSummary, DailyCount
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Attendance already marked for this subject today."


def parse_status(value: Any, default: AttendanceStatus = AttendanceStatus.PRESENT) -> AttendanceStatus:
    if value is None or value == "":
        return default
    try:
        return AttendanceStatus(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid attendance status")


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def record(
        self,
        *,
        student_id: Any,
        subject: Any,
        date: Any,
        teacher_id: str,
        status: Any = None,
        timestamp: Optional[int] = None,
        record_id: Optional[str] = None,
        student_name: Optional[str] = None,
    ) -> AttendanceRecord:
        """Write one (student, subject, date) fact; a second write for the same key fails."""

        student_id = require_non_empty(student_id, "Student ID")
        subject = require_non_empty(subject, "Subject")
        date = require_iso_date(date, "Date")
        teacher_id = require_non_empty(teacher_id, "Teacher ID")
        att_status = parse_status(status)
        student_name = optional_string(student_name, "studentName")
        if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
            raise ValidationError("timestamp must be epoch milliseconds")

        student = self._users.get_by_id(student_id)
        if not isinstance(student, Student):
            raise NotFoundError("Student not found")

        if self._attendance.find(student_id=student_id, subject=subject, date=date):
            raise ConflictError(DUPLICATE_MESSAGE)

        rec = AttendanceRecord(
            id=id_or_new(record_id, "att"),
            student_id=student_id,
            student_name=student_name or student.name,
            teacher_id=teacher_id,
            subject=subject,
            date=date,
            timestamp=timestamp if timestamp is not None else to_epoch_ms(now_local()),
            status=att_status,
        )
        if not self._attendance.create(rec):
            # The natural key is unique in storage, so a concurrent writer lands here.
            if self._attendance.find(student_id=student_id, subject=subject, date=date):
                raise ConflictError(DUPLICATE_MESSAGE)
            raise ConflictError("Attendance ID already exists")

        logger.info("attendance %s: %s %s %s %s", rec.id, student_id, subject, date, att_status.value)
        return rec

    def record_scan(
        self,
        *,
        teacher_id: str,
        subject: Any,
        code: Any,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Record PRESENT for today from a scanned student QR payload (the student id)."""

        scanned_id = require_non_empty(code, "QR code")
        subject = require_non_empty(subject, "Subject")

        student = self._users.get_by_id(scanned_id)
        if not isinstance(student, Student) or teacher_id not in student.teacher_ids:
            raise ValidationError("Scanned student is not assigned to your classes.")

        now = now or now_local()
        return self.record(
            student_id=student.id,
            subject=subject,
            date=now.strftime("%Y-%m-%d"),
            teacher_id=teacher_id,
            status=AttendanceStatus.PRESENT,
            timestamp=to_epoch_ms(now),
        )

    def query(
        self,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        subject: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        if start_date:
            require_iso_date(start_date, "startDate")
        if end_date:
            require_iso_date(end_date, "endDate")
        if subject == ALL_SUBJECTS:
            subject = None
        return self._attendance.query(
            student_id=student_id or None,
            teacher_id=teacher_id or None,
            subject=subject or None,
            start_date=start_date or None,
            end_date=end_date or None,
        )

    def daily_stats(self, *, subject: Optional[str] = None, teacher_id: Optional[str] = None) -> List[DailyCount]:
        """Present/absent counts per date, oldest first, limited to the latest dates."""

        counts: "OrderedDict[str, list]" = OrderedDict()
        for r in sorted(self.query(subject=subject, teacher_id=teacher_id), key=lambda r: r.date):
            bucket = counts.setdefault(r.date, [0, 0])
            if r.status == AttendanceStatus.PRESENT:
                bucket[0] += 1
            else:
                bucket[1] += 1
        days = [DailyCount(date=d, present=p, absent=a) for d, (p, a) in counts.items()]
        return days[-STATS_MAX_DAYS:]

    def student_summary(self, student_id: str, *, subject: Optional[str] = None) -> AttendanceSummary:
        records = self.query(student_id=student_id, subject=subject)
        total = len(records)
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        # Half-up rounding, so 12.5% reads as 13%.
        percentage = int(present * 100 / total + 0.5) if total else 0
        return AttendanceSummary(total=total, present=present, absent=total - present, percentage=percentage)
