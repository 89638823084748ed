from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, FrozenSet, Union

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Fields shared by every account variant.

    Note: ``password_hash`` never leaves the service layer; see :func:`to_public_dict`.
    """

    role: ClassVar[Role]

    id: str
    name: str
    email: str
    password_hash: str
    created_at: int


@dataclass(frozen=True)
class Admin(Account):
    role: ClassVar[Role] = Role.ADMIN


@dataclass(frozen=True)
class Teacher(Account):
    role: ClassVar[Role] = Role.TEACHER

    subjects: FrozenSet[str] = field(default_factory=frozenset)
    allow_invite: bool = False
    total_classes: int = 0


@dataclass(frozen=True)
class Student(Account):
    role: ClassVar[Role] = Role.STUDENT

    teacher_ids: FrozenSet[str] = field(default_factory=frozenset)


User = Union[Admin, Teacher, Student]

def to_public_dict(user: User) -> dict:
    """Serialize an account for API responses (camelCase, no credentials)."""

    out = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "createdAt": user.created_at,
    }
    if isinstance(user, Teacher):
        out["subjects"] = sorted(user.subjects)
        out["allowInvite"] = user.allow_invite
        out["totalClasses"] = user.total_classes
    elif isinstance(user, Student):
        out["teacherIds"] = sorted(user.teacher_ids)
    return out
