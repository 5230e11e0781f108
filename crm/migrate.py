"""
CLI entrypoint for the startup bootstrap (migrations + default admin). Run e.g.:

  python -m crm.migrate

Useful before rolling out a new version, or where schema changes are applied
separately from the API process.
"""

import logging
import sys

from crm.bootstrap import bootstrap
from crm.core.config import get_settings
from crm.core.database import Database
from crm.core.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """Apply pending migrations and seed the default admin."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    db = Database.from_settings(settings)
    try:
        applied = bootstrap(db, settings)
        logger.info("Bootstrap completed: migrations_applied=%s", len(applied))
        return 0
    except Exception as e:
        logger.exception("Bootstrap failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
