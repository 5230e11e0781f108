"""Unit tests for crm.services.users.UserService over a mocked Database and in-memory SQLite."""

import unittest
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from crm.core.database import Database, DeleteResult, InsertResult, UpdateResult
from crm.core.exceptions import ConflictError, NotFoundError
from crm.core.security import verify_password
from crm.models import Base
from crm.models.user import Role
from crm.schemas.auth import CurrentUser
from crm.schemas.user import UserCreate, UserUpdate
from crm.services.users import UserService

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _user_row(user_id: int = 2, username: str = "alice", role: str = "viewer") -> dict:
    return {
        "id": user_id,
        "username": username,
        "role": role,
        "created_at": NOW,
        "updated_at": NOW,
    }


def _sqlite_database() -> Database:
    """Real tables on one shared in-memory connection, so unique keys are enforced."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    return Database(engine)


class UserServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = MagicMock()
        self.service = UserService(self.db)


class TestListUsers(UserServiceTestCase):
    def test_paginates_newest_first(self) -> None:
        self.db.query.side_effect = [[{"total": 25}], [_user_row()]]
        page = self.service.list_users(page=2, limit=5)

        self.assertEqual(page.pagination.total, 25)
        self.assertEqual(page.pagination.total_pages, 5)
        self.assertTrue(page.pagination.has_next)
        self.assertTrue(page.pagination.has_prev)
        self.assertEqual([u.username for u in page.data], ["alice"])

        data_stmt = self.db.query.call_args_list[1].args[0]
        compiled = data_stmt.compile()
        self.assertIn("ORDER BY users.created_at DESC", str(compiled))
        self.assertNotIn("password_hash", str(compiled))
        self.assertEqual(sorted(v for v in compiled.params.values()), [5, 5])

    def test_responses_never_include_password(self) -> None:
        self.db.query.side_effect = [[{"total": 1}], [_user_row()]]
        page = self.service.list_users()
        self.assertNotIn("password_hash", page.data[0].model_dump())
        self.assertNotIn("password", page.data[0].model_dump())


class TestGetUser(UserServiceTestCase):
    def test_missing_user_is_not_found(self) -> None:
        self.db.query.return_value = []
        with self.assertRaises(NotFoundError) as ctx:
            self.service.get_user(9)
        self.assertEqual(ctx.exception.message, "User with ID 9 not found")


@patch("crm.core.security.BCRYPT_ROUNDS", 4)
class TestCreateUser(UserServiceTestCase):
    def test_duplicate_username_conflicts(self) -> None:
        self.db.query.return_value = [{"id": 1}]
        with self.assertRaises(ConflictError) as ctx:
            self.service.create_user(UserCreate(username="alice", password="secret1"))
        self.assertEqual(ctx.exception.message, "Username already exists")
        self.db.insert.assert_not_called()

    def test_creates_viewer_by_default_with_hashed_password(self) -> None:
        self.db.query.side_effect = [[], [_user_row()]]
        self.db.insert.return_value = InsertResult(generated_id=2, rows_affected=1)

        user = self.service.create_user(UserCreate(username="alice", password="secret1"))

        self.assertEqual(user.id, 2)
        self.assertEqual(user.role, Role.VIEWER)
        params = self.db.insert.call_args.args[0].compile().params
        self.assertEqual(params["role"], "viewer")
        self.assertTrue(verify_password("secret1", params["password_hash"]))


@patch("crm.core.security.BCRYPT_ROUNDS", 4)
class TestUpdateUser(UserServiceTestCase):
    def test_missing_user_is_not_found(self) -> None:
        self.db.query.return_value = []
        with self.assertRaises(NotFoundError):
            self.service.update_user(9, UserUpdate(role=Role.ADMIN))
        self.db.update.assert_not_called()

    def test_rename_to_taken_username_conflicts(self) -> None:
        self.db.query.side_effect = [[_user_row()], [{"id": 3}]]
        with self.assertRaises(ConflictError):
            self.service.update_user(2, UserUpdate(username="bob"))
        self.db.update.assert_not_called()

    def test_password_is_rehashed(self) -> None:
        self.db.query.side_effect = [[_user_row()], [_user_row()]]
        self.db.update.return_value = UpdateResult(rows_affected=1, rows_changed=1)

        self.service.update_user(2, UserUpdate(password="new-secret"))

        params = self.db.update.call_args.args[0].compile().params
        self.assertNotIn("password", params)
        self.assertTrue(verify_password("new-secret", params["password_hash"]))

    def test_empty_patch_returns_current_user(self) -> None:
        self.db.query.side_effect = [[_user_row()], [_user_row()]]
        user = self.service.update_user(2, UserUpdate())
        self.assertEqual(user.username, "alice")
        self.db.update.assert_not_called()


class TestDeleteUser(UserServiceTestCase):
    def test_self_deletion_conflicts_for_any_role(self) -> None:
        for role in Role:
            with self.subTest(role=role):
                acting = CurrentUser(id=2, username="alice", role=role)
                with self.assertRaises(ConflictError) as ctx:
                    self.service.delete_user(2, acting=acting)
                self.assertEqual(ctx.exception.message, "Cannot delete your own account")
        self.db.query.assert_not_called()
        self.db.delete.assert_not_called()

    def test_missing_user_is_not_found(self) -> None:
        self.db.query.return_value = []
        acting = CurrentUser(id=1, username="admin", role=Role.ADMIN)
        with self.assertRaises(NotFoundError):
            self.service.delete_user(9, acting=acting)
        self.db.delete.assert_not_called()

    def test_deletes_other_user(self) -> None:
        self.db.query.return_value = [_user_row()]
        self.db.delete.return_value = DeleteResult(rows_affected=1)
        acting = CurrentUser(id=1, username="admin", role=Role.ADMIN)
        self.service.delete_user(2, acting=acting)
        self.db.delete.assert_called_once()


class TestLastAdmin(UserServiceTestCase):
    def test_only_admin_cannot_be_demoted(self) -> None:
        self.db.query.side_effect = [[_user_row(1, "admin", "admin")], [{"total": 1}]]
        with self.assertRaises(ConflictError) as ctx:
            self.service.update_user(1, UserUpdate(role=Role.VIEWER))
        self.assertEqual(ctx.exception.message, "Cannot remove the last admin")
        self.db.update.assert_not_called()

    def test_admin_can_be_demoted_while_another_remains(self) -> None:
        self.db.query.side_effect = [
            [_user_row(1, "admin", "admin")],
            [{"total": 2}],
            [_user_row(1, "admin", "viewer")],
        ]
        self.db.update.return_value = UpdateResult(rows_affected=1, rows_changed=1)
        user = self.service.update_user(1, UserUpdate(role=Role.VIEWER))
        self.assertEqual(user.role, Role.VIEWER)
        self.db.update.assert_called_once()

    def test_viewer_role_change_skips_admin_count(self) -> None:
        self.db.query.side_effect = [[_user_row()], [_user_row(role="admin")]]
        self.db.update.return_value = UpdateResult(rows_affected=1, rows_changed=1)
        self.service.update_user(2, UserUpdate(role=Role.ADMIN))
        self.assertEqual(self.db.query.call_count, 2)


@patch("crm.core.security.BCRYPT_ROUNDS", 4)
class TestConcurrentUsernameClaims(unittest.TestCase):
    """Two writers pass the pre-check together; the unique key decides the loser."""

    def setUp(self) -> None:
        self.db = _sqlite_database()
        self.service = UserService(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_duplicate_insert_is_a_conflict(self) -> None:
        with patch.object(UserService, "_ensure_username_free"):
            self.service.create_user(UserCreate(username="bob", password="secret1"))
            with self.assertRaises(ConflictError) as ctx:
                self.service.create_user(UserCreate(username="bob", password="secret2"))
        self.assertEqual(ctx.exception.message, "Username already exists")

    def test_rename_onto_taken_username_is_a_conflict(self) -> None:
        self.service.create_user(UserCreate(username="bob", password="secret1"))
        carol = self.service.create_user(UserCreate(username="carol", password="secret1"))
        with patch.object(UserService, "_ensure_username_free"):
            with self.assertRaises(ConflictError):
                self.service.update_user(carol.id, UserUpdate(username="bob"))
        self.assertEqual(self.service.get_user(carol.id).username, "carol")


if __name__ == "__main__":
    unittest.main()
