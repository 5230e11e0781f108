"""Tests for crm.core.database: pool primitives on in-memory SQLite and the patch builder."""

import unittest

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from crm.core.database import Database, Transaction, build_update
from crm.core.exceptions import ConstraintViolationError, InfrastructureError
from crm.models import Customer, User


def _sqlite_database() -> Database:
    """One shared in-memory connection so every checkout sees the same tables."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    return Database(engine)


class TestDatabasePrimitives(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _sqlite_database()
        self.db.query("CREATE TABLE notes (id INTEGER PRIMARY KEY AUTOINCREMENT, body TEXT NOT NULL)")

    def tearDown(self) -> None:
        self.db.close()

    def _count(self) -> int:
        return self.db.query("SELECT COUNT(*) AS total FROM notes")[0]["total"]

    def test_insert_reports_generated_id(self) -> None:
        first = self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "a"})
        second = self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "b"})
        self.assertEqual((first.generated_id, first.rows_affected), (1, 1))
        self.assertEqual(second.generated_id, 2)

    def test_query_returns_rows_as_dicts(self) -> None:
        self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "hello"})
        rows = self.db.query("SELECT id, body FROM notes WHERE body = :body", {"body": "hello"})
        self.assertEqual(rows, [{"id": 1, "body": "hello"}])

    def test_update_and_delete_report_row_counts(self) -> None:
        self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "a"})
        updated = self.db.update("UPDATE notes SET body = :body WHERE id = :id", {"body": "z", "id": 1})
        missing = self.db.update("UPDATE notes SET body = :body WHERE id = :id", {"body": "z", "id": 99})
        self.assertEqual((updated.rows_affected, updated.rows_changed), (1, 1))
        self.assertEqual(missing.rows_affected, 0)

        deleted = self.db.delete("DELETE FROM notes WHERE id = :id", {"id": 1})
        self.assertEqual(deleted.rows_affected, 1)
        self.assertEqual(self._count(), 0)

    def test_transaction_commits_on_success(self) -> None:
        def work(tx: Transaction) -> int:
            tx.insert("INSERT INTO notes (body) VALUES ('a')")
            tx.insert("INSERT INTO notes (body) VALUES ('b')")
            return len(tx.query("SELECT id FROM notes"))

        self.assertEqual(self.db.transaction(work), 2)
        self.assertEqual(self._count(), 2)

    def test_transaction_rolls_back_and_reraises(self) -> None:
        def work(tx: Transaction) -> None:
            tx.insert("INSERT INTO notes (body) VALUES ('a')")
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.db.transaction(work)
        self.assertEqual(self._count(), 0)

    def test_sql_errors_surface_as_infrastructure_error(self) -> None:
        with self.assertRaises(InfrastructureError) as ctx:
            self.db.query("SELECT * FROM missing_table")
        self.assertIsInstance(ctx.exception.__cause__, SQLAlchemyError)
        self.assertEqual(ctx.exception.message, "Database query failed")

    def test_unique_violation_is_a_constraint_error(self) -> None:
        self.db.query("CREATE UNIQUE INDEX uq_notes_body ON notes (body)")
        self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "a"})
        with self.assertRaises(ConstraintViolationError) as ctx:
            self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": "a"})
        self.assertIsInstance(ctx.exception, InfrastructureError)
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertEqual(self._count(), 1)

    def test_failure_logs_never_contain_bound_values(self) -> None:
        self.db.query("CREATE UNIQUE INDEX uq_notes_body ON notes (body)")
        secret = "$2b$12$not-a-real-bcrypt-hash-value"
        self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": secret})
        with self.assertLogs("crm.core.database", level="WARNING") as logs:
            with self.assertRaises(ConstraintViolationError):
                self.db.insert("INSERT INTO notes (body) VALUES (:body)", {"body": secret})
            with self.assertRaises(InfrastructureError):
                self.db.query("SELECT * FROM missing WHERE body = :body", {"body": secret})
        output = "\n".join(logs.output)
        self.assertIn("IntegrityError", output)
        self.assertNotIn(secret, output)

    def test_connection_check(self) -> None:
        self.assertTrue(self.db.check_connection())

    def test_unreachable_database_fails_check(self) -> None:
        db = Database(create_engine("sqlite:////nonexistent-dir/crm/test.db"))
        self.assertFalse(db.check_connection())
        with self.assertRaises(InfrastructureError):
            db.ping()


class TestBuildUpdate(unittest.TestCase):
    def test_patch_values_become_bind_parameters(self) -> None:
        stmt = build_update(Customer, 5, {"name": "Robert'); DROP TABLE customers;--", "company": None})
        compiled = stmt.compile()
        sql = str(compiled)
        self.assertTrue(sql.startswith("UPDATE customers SET"))
        self.assertNotIn("DROP TABLE", sql)
        self.assertEqual(compiled.params["name"], "Robert'); DROP TABLE customers;--")
        self.assertIsNone(compiled.params["company"])
        self.assertIn(5, compiled.params.values())

    def test_updated_at_is_stamped(self) -> None:
        sql = str(build_update(User, 1, {"role": "viewer"}))
        self.assertIn("updated_at", sql)

    def test_unknown_column_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_update(User, 1, {"is_superuser": True})

    def test_protected_columns_are_rejected(self) -> None:
        for column in ("id", "created_at", "updated_at"):
            with self.subTest(column=column), self.assertRaises(ValueError):
                build_update(User, 1, {column: 1})


if __name__ == "__main__":
    unittest.main()
