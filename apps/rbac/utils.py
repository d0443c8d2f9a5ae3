# apps/rbac/utils.py
from typing import Iterable, Set

from apps.rbac.permissions import _norm


def user_roles(user) -> Set[str]:
    """
    Return a normalized set of role names held by the user.
    Mirrors the logic used in DRF permission class HasRole.
    """
    if not getattr(user, "is_authenticated", False):
        return set()
    role = _norm(getattr(user, "role", ""))
    return {role} if role else set()


def has_role(user, *roles: Iterable[str], allow_superuser: bool = False) -> bool:
    """
    Plain-Django helper: does the user have ANY of the given roles?
    Example usage:
        if has_role(request.user, "pharmacist"):
            ...
    """
    if not getattr(user, "is_authenticated", False):
        return False
    if allow_superuser and getattr(user, "is_superuser", False):
        return True

    required = {_norm(r) for r in roles if isinstance(r, str) and r.strip()}
    if not required:
        return True

    return bool(user_roles(user) & required)
