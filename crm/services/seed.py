"""Guarantee an admin account exists after migrations. Safe to run on every boot."""

import logging

from sqlalchemy import insert, select

from crm.core.database import Database
from crm.core.exceptions import InfrastructureError
from crm.core.security import hash_password
from crm.models.user import Role, User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "Admin@123"


def seed_default_admin(db: Database) -> bool:
    """
    Create the default admin if no admin-role user exists.

    Returns True when a user was created. The users table is the only state,
    so repeated calls never create a second admin.
    """
    admins = db.query(select(User.id).where(User.role == Role.ADMIN.value).limit(1))
    if admins:
        logger.info("Admin user already exists, skipping seed")
        return False

    taken = db.query(select(User.id).where(User.username == DEFAULT_ADMIN_USERNAME))
    if taken:
        raise InfrastructureError(
            f"No admin exists and username '{DEFAULT_ADMIN_USERNAME}' belongs to a non-admin user; "
            "promote an account manually"
        )

    db.insert(
        insert(User)
        .values(
            username=DEFAULT_ADMIN_USERNAME,
            password_hash=hash_password(DEFAULT_ADMIN_PASSWORD),
            role=Role.ADMIN.value,
        )
        .returning(User.id)
    )
    logger.warning(
        "Default admin user '%s' created with the bootstrap password; change it after first login",
        DEFAULT_ADMIN_USERNAME,
    )
    return True
