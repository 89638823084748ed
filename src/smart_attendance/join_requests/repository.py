from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import JoinRequest


class JoinRequestRepository(Protocol):
    def get(self, request_id: str) -> Optional[JoinRequest]:
        raise NotImplementedError

    def find_pending(self, *, student_id: str, teacher_id: str) -> Optional[JoinRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        teacher_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[JoinRequest]:
        """Newest first."""

        raise NotImplementedError

    def create(self, request: JoinRequest) -> bool:
        """Insert a PENDING request.

        Returns False when the id is taken or a PENDING request already exists for
        the same (student, teacher) pair. The check and the insert are one atomic write.
        """

        raise NotImplementedError

    def decide(self, *, request_id: str, status: RequestStatus, responded_at: int) -> bool:
        """Move a PENDING request to ``status``; False when it is no longer PENDING."""

        raise NotImplementedError

    def accept(self, *, request_id: str, responded_at: int) -> bool:
        """Move a PENDING request to ACCEPTED and link its student to its teacher.

        Both writes commit together or not at all; False when the request is no
        longer PENDING.
        """

        raise NotImplementedError
