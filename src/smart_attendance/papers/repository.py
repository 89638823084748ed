from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import QuestionPaper


class PaperRepository(Protocol):
    def get(self, paper_id: str) -> Optional[QuestionPaper]:
        raise NotImplementedError

    def list_for_teachers(self, teacher_ids: Optional[Sequence[str]] = None) -> Sequence[QuestionPaper]:
        """Most recently uploaded first; ``None`` means every teacher."""

        raise NotImplementedError

    def create(self, paper: QuestionPaper) -> bool:
        raise NotImplementedError

    def delete(self, paper_id: str) -> bool:
        raise NotImplementedError
