from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local, to_epoch_ms
from ..common.ids import id_or_new
from ..common.validators import require_non_empty
from ..core.enums import RequestStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Student, Teacher
from ..users.repository import UserRepository
from .model import JoinRequest
from .repository import JoinRequestRepository

logger = logging.getLogger(__name__)


class JoinRequestService:
    """Request/response handshake that gates linking a student to a teacher.

    PENDING -> ACCEPTED | REJECTED. Decided requests are kept as an audit trail
    and never reopened; a student retries by submitting a new request.
    """

    def __init__(self, requests: JoinRequestRepository, users: UserRepository):
        self._requests = requests
        self._users = users

    def submit(
        self,
        *,
        student_id: str,
        teacher_id: Any,
        request_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> JoinRequest:
        teacher_id = require_non_empty(teacher_id, "Teacher ID")

        teacher = self._users.get_by_id(teacher_id)
        if not isinstance(teacher, Teacher):
            raise NotFoundError("Teacher not found")

        student = self._users.get_by_id(student_id)
        if not isinstance(student, Student):
            raise NotFoundError("Student not found")

        if teacher_id in student.teacher_ids:
            raise ConflictError("Already assigned to this teacher")

        if self._requests.find_pending(student_id=student.id, teacher_id=teacher.id):
            raise ConflictError("Request already pending")

        req = JoinRequest(
            id=id_or_new(request_id, "req"),
            student_id=student.id,
            student_name=student.name,
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            status=RequestStatus.PENDING,
            timestamp=to_epoch_ms(now or now_local()),
        )
        if not self._requests.create(req):
            # Lost a race with a concurrent submit, or the caller reused an id.
            if self._requests.find_pending(student_id=student.id, teacher_id=teacher.id):
                raise ConflictError("Request already pending")
            raise ConflictError("Request ID already exists")

        logger.info("join request %s: %s -> %s submitted", req.id, student.id, teacher.id)
        return req

    def respond(
        self,
        *,
        request_id: Any,
        status: Any,
        responder_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> JoinRequest:
        request_id = require_non_empty(request_id, "Request ID")
        req = self._requests.get(request_id)
        if not req:
            raise NotFoundError("Request not found")

        try:
            decision = RequestStatus(str(status).upper())
        except ValueError:
            raise ValidationError("Invalid status")
        if decision == RequestStatus.PENDING:
            raise ValidationError("Invalid status")

        if responder_id is not None and responder_id != req.teacher_id:
            raise AuthorizationError("You can only respond to your own requests")

        if not req.is_pending:
            raise ConflictError("Request already processed")

        responded_at = to_epoch_ms(now or now_local())
        if decision == RequestStatus.ACCEPTED:
            decided = self._requests.accept(request_id=req.id, responded_at=responded_at)
        else:
            decided = self._requests.decide(request_id=req.id, status=decision, responded_at=responded_at)
        if not decided:
            raise ConflictError("Request already processed")

        logger.info("join request %s %s by %s", req.id, decision.value, responder_id or "-")
        return replace(req, status=decision, responded_at=responded_at)

    def list_pending_for_teacher(self, teacher_id: str) -> Sequence[JoinRequest]:
        return self._requests.list_requests(teacher_id=teacher_id, status=RequestStatus.PENDING)

    def list_for_student(self, student_id: str) -> Sequence[JoinRequest]:
        return self._requests.list_requests(student_id=student_id)
