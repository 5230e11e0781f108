"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from crm.models.user import Role


class LoginRequest(BaseModel):
    """Credentials for login."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) passed explicitly into services."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role


class LoginResponse(BaseModel):
    """JWT access token and public user view returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: CurrentUser


class MessageResponse(BaseModel):
    message: str
