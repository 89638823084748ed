from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import now_ms
from ..common.ids import id_or_new
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Student, Teacher
from ..users.repository import UserRepository
from .model import Attachment, Notice
from .repository import NoticeRepository


def parse_attachments(value: Any) -> Tuple[Attachment, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError("attachments must be a list")
    out = []
    for item in value:
        if not isinstance(item, dict):
            raise ValidationError("Invalid attachment")
        out.append(
            Attachment(
                name=require_non_empty(item.get("name"), "Attachment name"),
                type=str(item.get("type") or ""),
                data=require_non_empty(item.get("data"), "Attachment data"),
            )
        )
    return tuple(out)


def teacher_scope(users: UserRepository, *, teacher_id: Optional[str], student_id: Optional[str]) -> Optional[Sequence[str]]:
    """Which teachers' content a listing covers.

    A student sees only content from linked teachers, optionally narrowed to one
    of them; ``None`` means no filter.
    """

    if student_id:
        student = users.get_by_id(student_id)
        if not isinstance(student, Student):
            return []
        if teacher_id:
            return [teacher_id] if teacher_id in student.teacher_ids else []
        return sorted(student.teacher_ids)
    if teacher_id:
        return [teacher_id]
    return None


class NoticeService:
    def __init__(self, notices: NoticeRepository, users: UserRepository):
        self._notices = notices
        self._users = users

    def list_notices(self, *, teacher_id: Optional[str] = None, student_id: Optional[str] = None) -> Sequence[Notice]:
        scope = teacher_scope(self._users, teacher_id=teacher_id, student_id=student_id)
        if scope is not None and not scope:
            return []
        return self._notices.list_for_teachers(scope)

    def create(self, *, author_id: str, data: Mapping[str, Any]) -> Notice:
        author = self._users.get_by_id(author_id)
        if not isinstance(author, Teacher):
            raise AuthorizationError("Only teachers can post notices")

        notice = Notice(
            id=id_or_new(data.get("id"), "notice"),
            teacher_id=author.id,
            teacher_name=author.name,
            title=require_non_empty(data.get("title"), "Title"),
            content=require_non_empty(data.get("content"), "Content"),
            attachments=parse_attachments(data.get("attachments")),
            timestamp=now_ms(),
        )
        if not self._notices.create(notice):
            raise ConflictError("Notice ID already exists")
        return notice

    def update(self, *, actor_id: str, actor_role: Role, notice_id: str, data: Mapping[str, Any]) -> Notice:
        notice = self._notices.get(notice_id)
        if not notice:
            raise NotFoundError("Notice not found")
        self._check_owner(notice, actor_id, actor_role)

        updated = replace(
            notice,
            title=require_non_empty(data["title"], "Title") if "title" in data else notice.title,
            content=require_non_empty(data["content"], "Content") if "content" in data else notice.content,
            attachments=parse_attachments(data["attachments"]) if "attachments" in data else notice.attachments,
        )
        if not self._notices.update(updated):
            raise NotFoundError("Notice not found")
        return updated

    def delete(self, *, actor_id: str, actor_role: Role, notice_id: str) -> None:
        notice = self._notices.get(notice_id)
        if not notice:
            return
        self._check_owner(notice, actor_id, actor_role)
        self._notices.delete(notice_id)

    @staticmethod
    def _check_owner(notice: Notice, actor_id: str, actor_role: Role) -> None:
        if actor_role != Role.ADMIN and notice.teacher_id != actor_id:
            raise AuthorizationError("You can only change your own notices")
