"""Startup sequence: verify the pool, apply migrations, seed the default admin."""

import logging
from typing import TYPE_CHECKING

from crm.core.database import Database
from crm.services.migrations import MigrationRunner
from crm.services.seed import seed_default_admin

if TYPE_CHECKING:
    from crm.core.config import Settings

logger = logging.getLogger(__name__)


def bootstrap(db: Database, settings: "Settings") -> list[str]:
    """
    Run the startup steps strictly in order. Any failure propagates and is
    fatal to the caller; only a missing migrations directory is skipped.

    Returns the migration filenames applied by this run.
    """
    db.ping()
    logger.info("Database connection pool created successfully")

    applied = MigrationRunner(db, settings.migrations_dir).run()
    seed_default_admin(db)
    return applied
