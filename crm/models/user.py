"""ORM model for application users (auth and RBAC)."""

import enum

from sqlalchemy import Column, DateTime, Integer, String, func

from crm.models.base import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    VIEWER = "viewer"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'viewer'
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=Role.VIEWER.value, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
