from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role, also the discriminator of the account variants."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class RequestStatus(str, Enum):
    """Join request lifecycle. ACCEPTED and REJECTED are terminal."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
