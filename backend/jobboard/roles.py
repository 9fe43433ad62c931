from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    EMPLOYER = "employer"
    ADMIN = "admin"


ROUTE_ROLES: dict[str, frozenset[Role]] = {
    "/api/admin": frozenset({Role.ADMIN}),
    "/api/employer": frozenset({Role.EMPLOYER, Role.ADMIN}),
    "/api/cvs": frozenset({Role.STUDENT, Role.ADMIN}),
    "/api/matches": frozenset({Role.STUDENT, Role.ADMIN}),
    "/api/applications": frozenset({Role.STUDENT, Role.ADMIN}),
    "/api/profile": frozenset({Role.STUDENT, Role.EMPLOYER, Role.ADMIN}),
}

# Roles that may be picked at self-registration.
SELF_REGISTER_ROLES = frozenset({Role.STUDENT, Role.EMPLOYER})


def _prefix_matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def allowed_roles(path: str) -> frozenset[Role] | None:
    """Roles allowed on a path, by longest matching prefix; None if unrestricted."""
    matches = [prefix for prefix in ROUTE_ROLES if _prefix_matches(path, prefix)]
    if not matches:
        return None
    return ROUTE_ROLES[max(matches, key=len)]


def is_allowed(path: str, role: Role) -> bool:
    roles = allowed_roles(path)
    return roles is None or role in roles
