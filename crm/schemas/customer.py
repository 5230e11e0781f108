"""Request/response schemas for customers."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

NAME_MAX_LEN = 100
PHONE_MAX_LEN = 20
COMPANY_MAX_LEN = 100
ADDRESS_MAX_LEN = 255


def _blank_to_none(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    return v


class CustomerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=PHONE_MAX_LEN)
    company: str | None = Field(None, max_length=COMPANY_MAX_LEN)
    address: str | None = Field(None, max_length=ADDRESS_MAX_LEN)

    @field_validator("company", "address")
    @classmethod
    def optional_blank_to_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class CustomerUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=1, max_length=PHONE_MAX_LEN)
    company: str | None = Field(None, max_length=COMPANY_MAX_LEN)
    address: str | None = Field(None, max_length=ADDRESS_MAX_LEN)

    @field_validator("name", "email", "phone")
    @classmethod
    def reject_null(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("company", "address")
    @classmethod
    def optional_blank_to_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    company: str | None = None
    address: str | None = None
    created_at: datetime
    updated_at: datetime
