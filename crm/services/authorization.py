"""Authentication + role check applied before each protected operation."""

from collections.abc import Collection

from crm.core.exceptions import ForbiddenError, UnauthorizedError
from crm.models.user import Role
from crm.schemas.auth import CurrentUser

ALL_ROLES = frozenset(Role)
ADMIN_ONLY = frozenset({Role.ADMIN})


def authorize(
    identity: CurrentUser | None,
    allowed_roles: Collection[Role] | None = None,
) -> CurrentUser:
    """
    Return identity if it may perform the operation.

    No identity raises UnauthorizedError (401). A role outside allowed_roles
    raises ForbiddenError (403). allowed_roles=None means any authenticated user.
    """
    if identity is None:
        raise UnauthorizedError()
    if allowed_roles is not None and identity.role not in allowed_roles:
        raise ForbiddenError()
    return identity
