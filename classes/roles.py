from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    DEAN = "dean"
    HOD = "hod"
    TEACHER = "teacher"
    STUDENT = "student"


def _parse(value):
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def roles_of(user):
    """Collect every role a user holds.

    Works on `User` rows and on decoded JWT payloads, where `role` is the
    primary role and `roles` an optional list of extra ones.
    """
    if user is None:
        return frozenset()

    if isinstance(user, dict):
        primary = user.get("role")
        extra = user.get("roles") or []
    else:
        primary = getattr(user, "role", None)
        extra = getattr(user, "roles", None) or []

    if isinstance(primary, (list, tuple, set)):
        extra = list(primary) + list(extra)
        primary = None

    found = {_parse(r) for r in [primary, *extra] if r}
    found.discard(None)
    return frozenset(found)


def has_role(user, role):
    return Role(role) in roles_of(user)


def has_any_role(user, *roles):
    held = roles_of(user)
    return any(Role(r) in held for r in roles)
