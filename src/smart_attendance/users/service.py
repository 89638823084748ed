from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_ms
from ..common.ids import new_id
from ..common.validators import (
    optional_bool,
    optional_non_negative_int,
    require_min_length,
    require_non_empty,
    require_string_list,
)
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import Admin, Student, Teacher, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def parse_role(value: Any) -> Role:
    try:
        return Role(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid role")


def _string_set(value: Any, field_name: str) -> frozenset:
    if value is None:
        return frozenset()
    items = require_string_list(value, f"{field_name} must be a list of strings")
    return frozenset(s.strip() for s in items if s.strip())


def _build_user(role: Role, *, base: Mapping[str, Any], fields: Mapping[str, Any]) -> User:
    if role == Role.TEACHER:
        return Teacher(
            **base,
            subjects=_string_set(fields.get("subjects"), "subjects"),
            allow_invite=optional_bool(fields.get("allowInvite"), "allowInvite"),
            total_classes=optional_non_negative_int(fields.get("totalClasses"), "totalClasses"),
        )
    if role == Role.STUDENT:
        return Student(**base, teacher_ids=_string_set(fields.get("teacherIds"), "teacherIds"))
    return Admin(**base)


class AuthService:
    """Use case: authenticate user (login) and the simulated password reset."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str, role: Any) -> User:
        email = (email or "").strip() if isinstance(email, str) else ""
        if not email or not isinstance(password, str) or not password:
            raise ValidationError("Email and password are required")
        wanted = parse_role(role)

        user = self._users.get_by_email(email)
        if not user or user.role != wanted:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        return user

    def request_password_reset(self, email: str) -> None:
        email = require_non_empty(email, "Email")
        if not self._users.get_by_email(email):
            raise NotFoundError("No account found with this email address.")
        # No mail transport is configured; the reset is simulated.
        logger.info("[SIMULATION] password reset link sent to %s", email)


class UserService:
    """Use case: manage accounts and teacher links."""

    def __init__(self, users: UserRepository):
        self._users = users

    # -------- reads --------
    def list_users(self, *, role: Optional[Any] = None) -> Sequence[User]:
        return self._users.list_users(role=parse_role(role) if role else None)

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_students_of(self, teacher_id: str) -> Sequence[User]:
        return self._users.list_students_of(teacher_id)

    # -------- writes --------
    def create_account(self, data: Mapping[str, Any]) -> User:
        user_id = require_non_empty(data.get("id"), "User ID")
        name = require_non_empty(data.get("name"), "Name")
        email = require_non_empty(data.get("email"), "Email")
        password = require_min_length(data.get("password"), "Password", MIN_PASSWORD_LENGTH)
        role = parse_role(data.get("role"))

        if self._users.get_by_id(user_id):
            raise ValidationError("User ID already exists")
        if self._users.get_by_email(email):
            raise ValidationError("Email already registered")

        user = _build_user(
            role,
            base=dict(
                id=user_id,
                name=name,
                email=email,
                password_hash=generate_password_hash(password),
                created_at=now_ms(),
            ),
            fields=data,
        )
        if not self._users.create(user):
            raise ConflictError("User ID or email already exists")
        logger.info("account %s created (role=%s)", user.id, user.role.value)
        return user

    def register_teacher(self, *, name: str, email: str, password: str) -> User:
        """Public self-registration; always creates a TEACHER with a generated id."""

        return self.create_account(
            {
                "id": new_id("TR", length=6).upper(),
                "name": name,
                "email": email,
                "password": password,
                "role": Role.TEACHER.value,
            }
        )

    def update_account(
        self,
        *,
        actor_id: str,
        actor_role: Role,
        user_id: str,
        changes: Mapping[str, Any],
    ) -> User:
        user = self.get_user(user_id)
        is_admin = actor_role == Role.ADMIN
        if not is_admin and actor_id != user.id:
            raise AuthorizationError("You do not have permission")

        if "id" in changes and changes["id"] != user.id:
            raise ValidationError("Changing User ID is not allowed.")

        role = parse_role(changes["role"]) if changes.get("role") else user.role
        if not is_admin:
            self._check_self_edit(user, role, changes)

        name = require_non_empty(changes["name"], "Name") if "name" in changes else user.name
        email = user.email
        if "email" in changes:
            email = require_non_empty(changes["email"], "Email")
            other = self._users.get_by_email(email)
            if other and other.id != user.id:
                raise ValidationError("Email already registered")

        password_hash = user.password_hash
        # An empty password keeps the current one.
        if changes.get("password"):
            password = require_min_length(changes["password"], "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(password)

        base = dict(id=user.id, name=name, email=email, password_hash=password_hash, created_at=user.created_at)
        updated = _build_user(role, base=base, fields=self._merged_fields(user, changes))
        if not self._users.save(updated):
            raise NotFoundError("User not found")
        logger.info("account %s updated by %s", user.id, actor_id)
        return self.get_user(user.id)

    @staticmethod
    def _merged_fields(user: User, changes: Mapping[str, Any]) -> dict:
        # Start from the stored role fields so a partial update keeps them.
        fields: dict = {}
        if isinstance(user, Teacher):
            fields.update(
                subjects=sorted(user.subjects),
                allowInvite=user.allow_invite,
                totalClasses=user.total_classes,
            )
        elif isinstance(user, Student):
            fields["teacherIds"] = sorted(user.teacher_ids)

        for key in ("subjects", "allowInvite", "totalClasses"):
            if key in changes:
                fields[key] = changes[key]
        if "teacherIds" in changes:
            # Links are only ever added; unlinking is not supported.
            added = _string_set(changes["teacherIds"], "teacherIds")
            fields["teacherIds"] = sorted(set(fields.get("teacherIds", [])) | added)
        return fields

    @staticmethod
    def _check_self_edit(user: User, role: Role, changes: Mapping[str, Any]) -> None:
        if role != user.role:
            raise AuthorizationError("You cannot change your own role")
        if "allowInvite" in changes and (
            not isinstance(user, Teacher) or changes["allowInvite"] != user.allow_invite
        ):
            raise AuthorizationError("Only an admin can change invite permissions")
        if "teacherIds" in changes:
            current = user.teacher_ids if isinstance(user, Student) else frozenset()
            if _string_set(changes["teacherIds"], "teacherIds") != current:
                raise AuthorizationError("Use a join request to link with a teacher")

    def delete_account(self, user_id: str) -> None:
        user = self.get_user(user_id)
        if isinstance(user, Admin):
            raise ValidationError("Cannot delete an admin account")
        if not self._users.delete_by_id(user_id):
            raise NotFoundError("User not found")
        logger.info("account %s deleted", user_id)

    def bulk_assign(self, student_ids: Any, teacher_ids: Any) -> List[User]:
        """Union ``teacher_ids`` into every listed STUDENT, bypassing join requests.

        Returns the current record of every requested id that exists, including
        accounts that were skipped because they are not students.
        """

        students = require_string_list(student_ids, "Invalid data format")
        teachers = require_string_list(teacher_ids, "Invalid data format")

        created = self._users.add_teacher_links(student_ids=students, teacher_ids=teachers)
        logger.info(
            "bulk assign: %d teacher(s) -> %d student id(s), %d new link(s)",
            len(set(teachers)),
            len(set(students)),
            created,
        )

        by_id = {u.id: u for u in self._users.list_by_ids(list(dict.fromkeys(students)))}
        return [by_id[i] for i in dict.fromkeys(students) if i in by_id]
