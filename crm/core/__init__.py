"""Core app configuration, database pool and security helpers."""

from crm.core.config import get_settings, settings
from crm.core.database import Database, get_database

__all__ = ["Database", "get_database", "get_settings", "settings"]
