from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from artify.core.config import config


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt (cost 10, same as the seed data)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """bcrypt.checkpw compares in constant time."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_session_token(principal_id: str, role: str, session_id: str, expires_in: int) -> str:
    """Sign a session token carrying the principal, its role and the session id."""
    expire = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    to_encode = {"sub": principal_id, "role": role, "sid": session_id, "exp": expire}
    return jwt.encode(to_encode, config.SESSION_SECRET, algorithm=config.SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """
    Verify signature and expiry of a session token.
    Returns the claims if valid, else None.
    """
    try:
        payload = jwt.decode(token, config.SESSION_SECRET, algorithms=[config.SESSION_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or not payload.get("role") or not payload.get("sid"):
        return None
    return payload
