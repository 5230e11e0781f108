"""FastAPI dependencies that build services over the shared connection pool."""

from typing import Annotated

from fastapi import Depends, Request

from crm.core.config import Settings, get_settings
from crm.core.database import Database, get_database
from crm.services.auth import AuthService
from crm.services.customers import CustomerService
from crm.services.health import HealthReporter
from crm.services.users import UserService

DatabaseDep = Annotated[Database, Depends(get_database)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_auth_service(db: DatabaseDep, settings: SettingsDep) -> AuthService:
    return AuthService(db, settings)


def get_user_service(db: DatabaseDep) -> UserService:
    return UserService(db)


def get_customer_service(db: DatabaseDep) -> CustomerService:
    return CustomerService(db)


def get_health_reporter(request: Request, settings: SettingsDep) -> HealthReporter:
    # Health must answer even if startup never attached a pool.
    return HealthReporter(settings, getattr(request.app.state, "database", None))
