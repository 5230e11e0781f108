"""Pydantic request/response schemas."""

from crm.schemas.auth import CurrentUser, LoginRequest, LoginResponse, MessageResponse
from crm.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from crm.schemas.health import HealthResponse, LivenessResponse, ReadinessResponse
from crm.schemas.pagination import Page, PaginationMeta
from crm.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "CurrentUser",
    "CustomerCreate",
    "CustomerResponse",
    "CustomerUpdate",
    "HealthResponse",
    "LivenessResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "Page",
    "PaginationMeta",
    "ReadinessResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
