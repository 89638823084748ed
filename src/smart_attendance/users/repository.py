from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Account store.

    Note (DIP): services depend on this interface, never on a concrete database.
    Relationship writes (``add_teacher_links``) are set unions: existing links are
    silently kept, never duplicated.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def list_by_ids(self, user_ids: Sequence[str]) -> Sequence[User]:
        raise NotImplementedError

    def list_students_of(self, teacher_id: str) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> bool:
        """Insert a new account; False when the id or email is already taken."""

        raise NotImplementedError

    def save(self, user: User) -> bool:
        """Overwrite an existing account including its role-specific fields.

        When the saved account is not a TEACHER, links naming it are dropped and
        its PENDING join requests are REJECTED in the same write.
        """

        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        """Remove the account and the links naming it; its PENDING join requests are REJECTED."""

        raise NotImplementedError

    def add_teacher_links(self, *, student_ids: Iterable[str], teacher_ids: Iterable[str]) -> int:
        """Union ``teacher_ids`` into every listed account whose role is STUDENT.

        Returns the number of links actually created.
        """

        raise NotImplementedError
