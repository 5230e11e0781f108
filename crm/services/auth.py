"""Credential verification, token issuance and token/id resolution."""

import logging
from typing import TYPE_CHECKING

import jwt
from pydantic import ValidationError
from sqlalchemy import select

from crm.core.database import Database
from crm.core.exceptions import ConfigurationError, InvalidCredentialsError, UnauthorizedError
from crm.core.security import (
    create_access_token,
    decode_access_token,
    dummy_password_hash,
    verify_password,
)
from crm.models.user import User
from crm.schemas.auth import CurrentUser, LoginResponse

if TYPE_CHECKING:
    from crm.core.config import Settings

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Database, settings: "Settings") -> None:
        self.db = db
        self.settings = settings

    def login(self, username: str, password: str) -> LoginResponse:
        """
        Verify username/password and issue an access token.

        Unknown user and wrong password raise the same InvalidCredentialsError,
        and both paths run one bcrypt check, so neither the message nor the
        timing tells which half of the pair was wrong.
        """
        rows = self.db.query(
            select(User.id, User.username, User.password_hash, User.role).where(
                User.username == username
            )
        )
        if not rows:
            verify_password(password, dummy_password_hash())
            raise InvalidCredentialsError()

        row = rows[0]
        if not verify_password(password, row["password_hash"]):
            raise InvalidCredentialsError()

        user = CurrentUser(id=row["id"], username=row["username"], role=row["role"])
        token = create_access_token(
            sub=user.id,
            username=user.username,
            role=user.role.value,
            settings=self.settings,
        )
        logger.info("User %s logged in", user.username)
        return LoginResponse(access_token=token, user=user)

    def resolve_token(self, token: str) -> CurrentUser | None:
        """Return the identity embedded in a valid token; None for any failure."""
        try:
            payload = decode_access_token(token, self.settings)
        except ConfigurationError:
            logger.error("Cannot verify tokens: JWT_SECRET is not configured")
            return None
        except jwt.PyJWTError:
            return None
        try:
            return CurrentUser(
                id=int(payload["sub"]),
                username=payload["username"],
                role=payload["role"],
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            return None

    def resolve_by_id(self, user_id: int) -> CurrentUser | None:
        rows = self.db.query(
            select(User.id, User.username, User.role).where(User.id == user_id)
        )
        if not rows:
            return None
        return CurrentUser.model_validate(rows[0])

    def get_profile(self, user_id: int) -> CurrentUser:
        """Current username/role for a session; 401 if the user was deleted after login."""
        user = self.resolve_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return user
