from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


def current_user_id() -> Optional[str]:
    return session.get("user_id")


def current_role() -> Optional[Role]:
    role = session.get("role")
    return Role(role) if role else None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Please log in")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    """Allow only the given roles; anonymous callers get 401, others 403."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                raise AuthenticationError("Please log in")
            if session.get("role") not in allowed:
                raise AuthorizationError("You do not have permission")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = roles_required(Role.ADMIN)
teacher_required = roles_required(Role.TEACHER)
student_required = roles_required(Role.STUDENT)
