"""Ledger of applied migration scripts, one row per filename."""

from sqlalchemy import Column, DateTime, Integer, String, func

from crm.models.base import Base


class MigrationRecord(Base):
    __tablename__ = "migrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False, unique=True)
    executed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
