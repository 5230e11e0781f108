"""SQLAlchemy ORM models."""

from crm.models.base import Base
from crm.models.customer import Customer
from crm.models.migration import MigrationRecord
from crm.models.user import Role, User

__all__ = ["Base", "Customer", "MigrationRecord", "Role", "User"]
