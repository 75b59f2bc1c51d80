"""Role-based access control for DRF views.

Roles are plain strings (``ADMIN``, ``USER``).  They are resolved from:

* ``TokenUser`` (externally issued JWT): the ``roles`` and
  ``permissions`` claims.
* Django users (SimpleJWT / session): group names, upper-cased;
  superusers always hold ``ADMIN``.

Usage::

    permission_classes = [IsAuthenticated, require_roles(ROLE_ADMIN)]
"""

from __future__ import annotations

from typing import Iterable, Set, Type

from rest_framework.permissions import BasePermission

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"


def get_user_roles(user) -> Set[str]:
    """Return the upper-cased role names held by ``user``."""
    if user is None or not getattr(user, "is_authenticated", False):
        return set()

    token_roles = getattr(user, "roles", None)
    if token_roles is not None:
        return {str(role).upper() for role in token_roles}

    roles: Set[str] = set()
    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
    groups = getattr(user, "groups", None)
    if groups is not None:
        roles.update(name.upper() for name in groups.values_list("name", flat=True))
    return roles


def require_roles(*allowed: str) -> Type[BasePermission]:
    """Build a permission class granting access to holders of any ``allowed`` role."""
    allowed_set = frozenset(role.upper() for role in allowed)

    class HasAnyRole(BasePermission):
        message = "You do not have permission to access this resource"

        def has_permission(self, request, view) -> bool:
            return bool(get_user_roles(request.user) & allowed_set)

    HasAnyRole.__name__ = "HasAnyRole_" + "_".join(sorted(allowed_set))
    return HasAnyRole


def roles_for(actions: Iterable[str], *allowed: str) -> dict:
    """Map each DRF action name to the same role requirement."""
    permission = require_roles(*allowed)
    return {action: permission for action in actions}
