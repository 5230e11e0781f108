"""PostgreSQL connection pool and parameterized query primitives."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from fastapi import Request
from sqlalchemy import create_engine, func, text, update
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable

from crm.core.exceptions import ConstraintViolationError, InfrastructureError

if TYPE_CHECKING:
    from crm.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Statement = str | Executable
Params = Mapping[str, Any] | None

# Columns a patch may never touch.
PROTECTED_COLUMNS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class InsertResult:
    generated_id: int | None
    rows_affected: int


@dataclass(frozen=True)
class UpdateResult:
    rows_affected: int
    # Postgres reports matched rows only, so this equals rows_affected there.
    rows_changed: int


@dataclass(frozen=True)
class DeleteResult:
    rows_affected: int


def _as_statement(statement: Statement) -> Executable:
    return text(statement) if isinstance(statement, str) else statement


def _describe(statement: Statement) -> str:
    return " ".join(str(statement).split())


def _driver_error(e: SQLAlchemyError) -> str:
    """Driver message without SQLAlchemy's '[parameters: ...]' suffix."""
    orig = getattr(e, "orig", None)
    if orig is None:
        return type(e).__name__
    return f"{type(e).__name__}: {orig}"


class _Executor:
    """query/insert/update/delete on top of a connection supplied by _run()."""

    def _run(self, fn: Callable[[Connection], T]) -> T:
        raise NotImplementedError

    def _execute(
        self,
        operation: str,
        statement: Statement,
        params: Params,
        consume: Callable[[CursorResult], T],
    ) -> T:
        stmt = _as_statement(statement)
        try:
            return self._run(lambda conn: consume(conn.execute(stmt, dict(params or {}))))
        except IntegrityError as e:
            logger.warning(
                "Database %s rejected by constraint: query=%s error=%s",
                operation,
                _describe(statement),
                _driver_error(e),
            )
            raise ConstraintViolationError(f"Database {operation} violated a constraint") from e
        except SQLAlchemyError as e:
            # Bound values are never logged; they can hold password hashes.
            logger.error(
                "Database %s failed: query=%s error=%s",
                operation,
                _describe(statement),
                _driver_error(e),
            )
            raise InfrastructureError(f"Database {operation} failed") from e

    def query(self, statement: Statement, params: Params = None) -> list[dict[str, Any]]:
        """Run a statement and return its rows as dicts ([] for statements without rows)."""

        def consume(result: CursorResult) -> list[dict[str, Any]]:
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

        return self._execute("query", statement, params, consume)

    def insert(self, statement: Statement, params: Params = None) -> InsertResult:
        """
        Run an INSERT. The generated id is read from a RETURNING clause when the
        statement has one, otherwise from the driver's lastrowid.
        """

        def consume(result: CursorResult) -> InsertResult:
            generated_id = None
            if result.returns_rows:
                row = result.first()
                generated_id = row[0] if row is not None else None
            elif result.lastrowid:
                generated_id = result.lastrowid
            return InsertResult(generated_id=generated_id, rows_affected=max(result.rowcount, 0))

        return self._execute("insert", statement, params, consume)

    def update(self, statement: Statement, params: Params = None) -> UpdateResult:
        def consume(result: CursorResult) -> UpdateResult:
            count = max(result.rowcount, 0)
            return UpdateResult(rows_affected=count, rows_changed=count)

        return self._execute("update", statement, params, consume)

    def delete(self, statement: Statement, params: Params = None) -> DeleteResult:
        return self._execute(
            "delete",
            statement,
            params,
            lambda result: DeleteResult(rows_affected=max(result.rowcount, 0)),
        )


class Transaction(_Executor):
    """Primitives bound to one connection inside an open BEGIN block."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def _run(self, fn: Callable[[Connection], T]) -> T:
        return fn(self.connection)


class Database(_Executor):
    """
    Bounded connection pool. Each primitive checks out a connection, runs in its
    own short transaction, and returns the connection. Callers beyond the pool
    size block until a connection frees or DB_POOL_TIMEOUT_SEC elapses.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        engine = create_engine(
            settings.database_url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=settings.DB_POOL_TIMEOUT_SEC,
            pool_pre_ping=True,
            echo=settings.DEBUG,
            hide_parameters=True,
        )
        return cls(engine)

    def _run(self, fn: Callable[[Connection], T]) -> T:
        with self.engine.begin() as conn:
            return fn(conn)

    def transaction(self, fn: Callable[[Transaction], T]) -> T:
        """Run fn on a dedicated connection; commit on success, roll back and re-raise on error."""
        try:
            with self.engine.connect() as conn:
                with conn.begin():
                    return fn(Transaction(conn))
        except SQLAlchemyError as e:
            logger.error("Transaction failed and rolled back: %s", _driver_error(e))
            raise InfrastructureError("Database transaction failed") from e
        except Exception:
            logger.error("Transaction failed and rolled back", exc_info=True)
            raise

    def ping(self) -> None:
        """Open a connection and run SELECT 1; raises InfrastructureError if unreachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Database unreachable: {e}") from e

    def check_connection(self) -> bool:
        """Run a trivial query to verify the database is reachable."""
        try:
            self.ping()
            return True
        except InfrastructureError as e:
            logger.warning("Database connection check failed: %s", e.message)
            return False

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool closed")


def build_update(model: type, key: int, patch: Mapping[str, Any]) -> Executable:
    """
    Build a parameterized UPDATE for one row from a {column: new value} patch.

    Column names are checked against the model's table, so values are the only
    caller-supplied part of the statement. updated_at is stamped when present.
    """
    columns = model.__table__.c
    unknown = [name for name in patch if name not in columns]
    if unknown:
        raise ValueError(f"Unknown column(s) for {model.__tablename__}: {', '.join(unknown)}")
    protected = [name for name in patch if name in PROTECTED_COLUMNS]
    if protected:
        raise ValueError(f"Column(s) cannot be patched: {', '.join(protected)}")

    values = dict(patch)
    if "updated_at" in columns:
        values["updated_at"] = func.now()
    return update(model).where(columns["id"] == key).values(**values)


def get_database(request: Request) -> Database:
    """Dependency that returns the pool created during application startup."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise InfrastructureError("Database pool is not initialized")
    return database
