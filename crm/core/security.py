"""Password hashing and JWT issuance/verification for login and bearer auth."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from crm.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from crm.core.config import Settings

BCRYPT_ROUNDS = 12
# bcrypt ignores input past 72 bytes; PASSWORD_MAX_LEN keeps real passwords below it.
BCRYPT_MAX_BYTES = 72


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str) -> str:
    """Salted bcrypt hash of a password, as stored in users.password_hash."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """True when plain_password matches hashed; a malformed hash never matches."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked when a login names an unknown user, so both paths cost one bcrypt round."""
    return hash_password("not-a-real-password")


def _secret(settings: "Settings") -> str:
    if settings.JWT_SECRET is None:
        raise ConfigurationError("JWT_SECRET is not configured")
    return settings.JWT_SECRET.get_secret_value()


def create_access_token(sub: int, username: str, role: str, settings: "Settings") -> str:
    """Create a JWT access token with sub (user id), username, role, iat and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "username": username,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, _secret(settings), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, username, role, iat, exp).
    Raises jwt.PyJWTError on invalid or expired token, ConfigurationError
    when no secret is configured.
    """
    return jwt.decode(
        token,
        _secret(settings),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp", "iat"]},
    )
