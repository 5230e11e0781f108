"""User management endpoints. Every route requires the admin role."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from crm.api.deps import get_user_service
from crm.api.v1.auth import RoleGuard
from crm.schemas.auth import CurrentUser
from crm.schemas.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Page
from crm.schemas.user import UserCreate, UserResponse, UserUpdate
from crm.services.authorization import ADMIN_ONLY
from crm.services.users import UserService

router = APIRouter()

require_admin = RoleGuard(ADMIN_ONLY)

AdminDep = Annotated[CurrentUser, Depends(require_admin)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.get("", response_model=Page[UserResponse])
def list_users(
    _admin: AdminDep,
    service: UserServiceDep,
    page: Annotated[int, Query(ge=1)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
) -> Page[UserResponse]:
    """List users newest first, paginated."""
    return service.list_users(page=page, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, _admin: AdminDep, service: UserServiceDep) -> UserResponse:
    return service.get_user(user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, _admin: AdminDep, service: UserServiceDep) -> UserResponse:
    return service.create_user(body)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    _admin: AdminDep,
    service: UserServiceDep,
) -> UserResponse:
    return service.update_user(user_id, body)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, admin: AdminDep, service: UserServiceDep) -> None:
    """Delete a user; deleting your own account is a 409."""
    service.delete_user(user_id, acting=admin)
