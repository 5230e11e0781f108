"""User management: CRUD with pagination, username uniqueness and self-deletion guard."""

import logging

from sqlalchemy import delete, func, insert, select

from crm.core.database import Database, build_update
from crm.core.exceptions import ConflictError, ConstraintViolationError, NotFoundError
from crm.core.security import hash_password
from crm.models.user import Role, User
from crm.schemas.auth import CurrentUser
from crm.schemas.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, PaginationMeta
from crm.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

# Public columns only; password_hash is never selected for responses.
PUBLIC_COLUMNS = (User.id, User.username, User.role, User.created_at, User.updated_at)

USERNAME_TAKEN = "Username already exists"


class UserService:
    def __init__(self, db: Database) -> None:
        self.db = db

    def list_users(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page[UserResponse]:
        total = self.db.query(select(func.count().label("total")).select_from(User))[0]["total"]
        meta = PaginationMeta.from_counts(total=total, page=page, limit=limit)
        rows = self.db.query(
            select(*PUBLIC_COLUMNS)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .offset(meta.offset)
        )
        return Page[UserResponse](
            data=[UserResponse.model_validate(r) for r in rows],
            pagination=meta,
        )

    def get_user(self, user_id: int) -> UserResponse:
        rows = self.db.query(select(*PUBLIC_COLUMNS).where(User.id == user_id))
        if not rows:
            raise NotFoundError("User", user_id)
        return UserResponse.model_validate(rows[0])

    def _ensure_username_free(self, username: str, exclude_id: int | None = None) -> None:
        stmt = select(User.id).where(User.username == username)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if self.db.query(stmt):
            raise ConflictError(USERNAME_TAKEN)

    def _ensure_admin_remains(self, user: UserResponse) -> None:
        """Refuse to demote the only remaining admin."""
        if user.role != Role.ADMIN:
            return
        admins = self.db.query(
            select(func.count().label("total")).select_from(User).where(User.role == Role.ADMIN.value)
        )[0]["total"]
        if admins <= 1:
            raise ConflictError("Cannot remove the last admin")

    def create_user(self, data: UserCreate) -> UserResponse:
        self._ensure_username_free(data.username)
        try:
            result = self.db.insert(
                insert(User)
                .values(
                    username=data.username,
                    password_hash=hash_password(data.password),
                    role=data.role.value,
                )
                .returning(User.id)
            )
        except ConstraintViolationError as e:
            # A concurrent create took the name after the pre-check.
            raise ConflictError(USERNAME_TAKEN) from e
        logger.info("Created user id=%s role=%s", result.generated_id, data.role.value)
        return self.get_user(result.generated_id)

    def update_user(self, user_id: int, data: UserUpdate) -> UserResponse:
        current = self.get_user(user_id)

        fields = data.model_dump(exclude_unset=True)
        patch: dict[str, object] = {}
        if "username" in fields:
            self._ensure_username_free(fields["username"], exclude_id=user_id)
            patch["username"] = fields["username"]
        if "role" in fields:
            if fields["role"] != Role.ADMIN:
                self._ensure_admin_remains(current)
            patch["role"] = fields["role"].value
        if "password" in fields:
            patch["password_hash"] = hash_password(fields["password"])

        if not patch:
            return current

        try:
            self.db.update(build_update(User, user_id, patch))
        except ConstraintViolationError as e:
            raise ConflictError(USERNAME_TAKEN) from e
        return self.get_user(user_id)

    def delete_user(self, user_id: int, acting: CurrentUser) -> None:
        """Delete a user. The acting identity may never delete itself."""
        if user_id == acting.id:
            raise ConflictError("Cannot delete your own account")

        self.get_user(user_id)
        result = self.db.delete(delete(User).where(User.id == user_id))
        if result.rows_affected == 0:
            raise NotFoundError("User", user_id)
        logger.info("User id=%s deleted by user id=%s", user_id, acting.id)
