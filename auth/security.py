"""
Password hashing and bearer tokens.
Tokens are self-contained: {id, role, iat, exp} signed with HS256, valid for a day.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt as _bcrypt
from jose import JWTError, jwt

# ─── Config ───────────────────────────────────────────────────────────────────

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "exam-portal-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24
REQUIRED_CLAIMS = ("id", "role")


# ─── Passwords ────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    salt = _bcrypt.gensalt()
    return _bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """False for a wrong password and for a stored value that is not a bcrypt hash."""
    try:
        return _bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ─── Tokens ───────────────────────────────────────────────────────────────────

def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = expires_delta if expires_delta is not None else timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
    claims = {"id": user_id, "role": role, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Claims of a valid, unexpired token that names a user and a role; otherwise None."""
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except (JWTError, ValueError, TypeError):
        return None
    if any(claims.get(name) is None for name in REQUIRED_CLAIMS):
        return None
    return claims
