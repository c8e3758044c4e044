"""Password hashing and token signing primitives."""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from shop_service.config import JWT_ALGORITHM, TOKEN_TTL_HOURS

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(
    admin_id: str,
    secret: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a signed token for an admin.

    Args:
        admin_id: Identity embedded in the token
        secret: Shared signing secret
        expires_delta: Lifetime of the token, 24 hours by default

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(hours=TOKEN_TTL_HOURS)
    payload = {
        "id": admin_id,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str) -> str:
    """
    Verify a token's signature and expiry and return the embedded admin id.

    Raises:
        jwt.PyJWTError: If the token is malformed, badly signed or expired
    """
    payload = jwt.decode(
        token,
        secret,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "id"]},
    )
    admin_id = payload["id"]
    if not isinstance(admin_id, str):
        raise jwt.InvalidTokenError("Token identity must be a string")
    return admin_id
