from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_ms
from ..common.ids import id_or_new
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError
from ..notices.service import teacher_scope
from ..users.model import Teacher
from ..users.repository import UserRepository
from .model import QuestionPaper
from .repository import PaperRepository


class PaperService:
    def __init__(self, papers: PaperRepository, users: UserRepository):
        self._papers = papers
        self._users = users

    def list_papers(self, *, teacher_id: Optional[str] = None, student_id: Optional[str] = None) -> Sequence[QuestionPaper]:
        scope = teacher_scope(self._users, teacher_id=teacher_id, student_id=student_id)
        if scope is not None and not scope:
            return []
        return self._papers.list_for_teachers(scope)

    def upload(self, *, author_id: str, data: Mapping[str, Any]) -> QuestionPaper:
        author = self._users.get_by_id(author_id)
        if not isinstance(author, Teacher):
            raise AuthorizationError("Only teachers can upload papers")

        year = data.get("year")
        paper = QuestionPaper(
            id=id_or_new(data.get("id"), "paper"),
            teacher_id=author.id,
            teacher_name=author.name,
            subject=require_non_empty(data.get("subject"), "Subject"),
            year=require_non_empty(str(year) if isinstance(year, int) else year, "Year"),
            title=require_non_empty(data.get("title"), "Title"),
            file_name=require_non_empty(data.get("fileName"), "File name"),
            file_data=require_non_empty(data.get("fileData"), "File data"),
            uploaded_at=now_ms(),
        )
        if not self._papers.create(paper):
            raise ConflictError("Paper ID already exists")
        return paper

    def delete(self, *, actor_id: str, actor_role: Role, paper_id: str) -> None:
        paper = self._papers.get(paper_id)
        if not paper:
            return
        if actor_role != Role.ADMIN and paper.teacher_id != actor_id:
            raise AuthorizationError("You can only delete your own papers")
        self._papers.delete(paper_id)
