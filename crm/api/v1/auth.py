"""JWT login and auth dependencies (get_current_user, RoleGuard)."""

from collections.abc import Collection
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm.api.deps import get_auth_service
from crm.models.user import Role
from crm.schemas.auth import CurrentUser, LoginRequest, LoginResponse, MessageResponse
from crm.services.auth import AuthService
from crm.services.authorization import authorize

router = APIRouter()
security = HTTPBearer(auto_error=False)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_token_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth_service: AuthServiceDep,
) -> CurrentUser | None:
    """Identity embedded in the Bearer token, or None if absent or invalid."""
    if credentials is None:
        return None
    return auth_service.resolve_token(credentials.credentials)


def get_current_user(
    identity: Annotated[CurrentUser | None, Depends(get_token_identity)],
) -> CurrentUser:
    """Dependency: require a valid Bearer JWT, any role. Raises 401 if missing or invalid."""
    return authorize(identity)


class RoleGuard:
    """
    Dependency attached to a route registration with the roles allowed to call it.

    Raises 401 without a valid token and 403 when the token's role is not allowed.
    """

    def __init__(self, allowed_roles: Collection[Role]) -> None:
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(
        self,
        identity: Annotated[CurrentUser | None, Depends(get_token_identity)],
    ) -> CurrentUser:
        return authorize(identity, self.allowed_roles)

    def __repr__(self) -> str:
        roles = ", ".join(sorted(role.value for role in self.allowed_roles))
        return f"RoleGuard({roles})"


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT access token and the user.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    return auth_service.login(body.username, body.password)


@router.get("/me", response_model=CurrentUser)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth_service: AuthServiceDep,
) -> CurrentUser:
    """Current id, username and role, re-read from the database."""
    return auth_service.get_profile(current_user.id)


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client discards its token. Kept for API symmetry."""
    return MessageResponse(message="Logged out successfully")
