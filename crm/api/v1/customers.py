"""Customer endpoints: reads for admin and viewer, writes for admin only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from crm.api.deps import get_customer_service
from crm.api.v1.auth import RoleGuard
from crm.schemas.auth import CurrentUser
from crm.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from crm.schemas.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Page
from crm.services.authorization import ADMIN_ONLY, ALL_ROLES
from crm.services.customers import CustomerService

router = APIRouter()

READ_ROLES = ALL_ROLES
WRITE_ROLES = ADMIN_ONLY

ReaderDep = Annotated[CurrentUser, Depends(RoleGuard(READ_ROLES))]
WriterDep = Annotated[CurrentUser, Depends(RoleGuard(WRITE_ROLES))]
CustomerServiceDep = Annotated[CustomerService, Depends(get_customer_service)]


@router.get("", response_model=Page[CustomerResponse])
def list_customers(
    _user: ReaderDep,
    service: CustomerServiceDep,
    page: Annotated[int, Query(ge=1)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
) -> Page[CustomerResponse]:
    """List customers newest first, paginated."""
    return service.list_customers(page=page, limit=limit)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, _user: ReaderDep, service: CustomerServiceDep) -> CustomerResponse:
    return service.get_customer(customer_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    body: CustomerCreate,
    _admin: WriterDep,
    service: CustomerServiceDep,
) -> CustomerResponse:
    return service.create_customer(body)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    _admin: WriterDep,
    service: CustomerServiceDep,
) -> CustomerResponse:
    return service.update_customer(customer_id, body)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, _admin: WriterDep, service: CustomerServiceDep) -> None:
    service.delete_customer(customer_id)
