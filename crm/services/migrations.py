"""Apply NNN-name.sql migration scripts once each, tracked in the migrations ledger table."""

import logging
from pathlib import Path

from crm.core.database import Database, Transaction

logger = logging.getLogger(__name__)

# Bootstrap statement for the ledger itself; not tracked in the ledger.
CREATE_LEDGER_SQL = """
CREATE TABLE IF NOT EXISTS migrations (
    id SERIAL PRIMARY KEY,
    filename VARCHAR(255) NOT NULL UNIQUE,
    executed_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""
SELECT_APPLIED_SQL = "SELECT id FROM migrations WHERE filename = :filename"
RECORD_APPLIED_SQL = "INSERT INTO migrations (filename) VALUES (:filename)"


def split_statements(script: str) -> list[str]:
    """
    Split a SQL script into statements on ';'.

    Whole-line '--' comments are dropped first. Semicolons inside string
    literals or function bodies are not supported.
    """
    lines = [line for line in script.splitlines() if not line.lstrip().startswith("--")]
    return [stmt.strip() for stmt in "\n".join(lines).split(";") if stmt.strip()]


class MigrationRunner:
    """
    Runs every *.sql file in migrations_dir in filename order, skipping files
    already recorded in the ledger. Each script and its ledger row are applied
    in a single transaction, so a failed script leaves no partial record.
    """

    def __init__(self, db: Database, migrations_dir: Path) -> None:
        self.db = db
        self.migrations_dir = migrations_dir

    def ensure_ledger(self) -> None:
        self.db.query(CREATE_LEDGER_SQL)
        logger.info("Migrations table ensured")

    def list_scripts(self) -> list[Path]:
        return sorted(
            (p for p in self.migrations_dir.iterdir() if p.is_file() and p.suffix == ".sql"),
            key=lambda p: p.name,
        )

    def is_applied(self, filename: str) -> bool:
        return bool(self.db.query(SELECT_APPLIED_SQL, {"filename": filename}))

    def run(self) -> list[str]:
        """Apply pending scripts; return the filenames applied by this call."""
        logger.info("Starting database migrations from %s", self.migrations_dir)
        self.ensure_ledger()

        if not self.migrations_dir.is_dir():
            logger.warning(
                "Migrations directory %s not found, skipping migrations",
                self.migrations_dir,
            )
            return []

        applied: list[str] = []
        for script in self.list_scripts():
            if self.is_applied(script.name):
                logger.info("Migration %s already executed, skipping", script.name)
                continue
            self.apply(script)
            applied.append(script.name)

        logger.info("Database migrations completed: applied=%s", len(applied))
        return applied

    def apply(self, script: Path) -> None:
        statements = split_statements(script.read_text(encoding="utf-8"))

        def run_script(tx: Transaction) -> None:
            for statement in statements:
                tx.query(statement)
            tx.insert(RECORD_APPLIED_SQL, {"filename": script.name})

        try:
            self.db.transaction(run_script)
        except Exception:
            logger.error("Migration %s failed", script.name)
            raise
        logger.info("Migration %s executed successfully (%s statements)", script.name, len(statements))
