"""Request/response schemas for user management (admin only)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.models.user import Role

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role = Role.VIEWER


class UserUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str | None = Field(None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role | None = None

    @field_validator("username", "password", "role")
    @classmethod
    def reject_null(cls, v: object) -> object:
        # Only runs for values present in the body; omitted fields keep their default.
        if v is None:
            raise ValueError("must not be null")
        return v


class UserResponse(BaseModel):
    """User entry without password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role
    created_at: datetime
    updated_at: datetime
