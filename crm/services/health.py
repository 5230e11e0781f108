"""Liveness, readiness and status reporting."""

import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from crm import __version__
from crm.core.database import Database
from crm.schemas.health import (
    HealthResponse,
    LivenessResponse,
    ReadinessChecks,
    ReadinessResponse,
)

if TYPE_CHECKING:
    from crm.core.config import Settings

_STARTED_AT = time.monotonic()


class HealthReporter:
    def __init__(self, settings: "Settings", db: Database | None) -> None:
        self.settings = settings
        self.db = db

    def status(self) -> HealthResponse:
        return HealthResponse(
            timestamp=datetime.now(UTC),
            uptime=round(time.monotonic() - _STARTED_AT, 3),
            environment=self.settings.APP_ENV,
            version=__version__,
        )

    def readiness(self) -> ReadinessResponse:
        """Ready only when required settings are present and the database answers."""
        configuration = "ok" if not self.settings.missing_required() else "error"
        database = "ok" if self.db is not None and self.db.check_connection() else "error"
        ready = configuration == "ok" and database == "ok"
        return ReadinessResponse(
            status="ready" if ready else "not_ready",
            timestamp=datetime.now(UTC),
            checks=ReadinessChecks(database=database, configuration=configuration),
        )

    def liveness(self) -> LivenessResponse:
        return LivenessResponse(timestamp=datetime.now(UTC))
