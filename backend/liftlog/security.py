# liftlog/security.py
"""
Account credentials: bcrypt password hashes and HS256 bearer tokens.

A token's ``sub`` is the user id as a string; ``read_access_token`` hands the
id back as an int and raises ``JWTError`` (``ExpiredSignatureError`` when it
has simply run out) for anything else.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from passlib.context import CryptContext
from jose import jwt
from jose.exceptions import JWTError
from liftlog.settings import get_settings

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(p: str) -> str:
    return pwd_ctx.hash(p)

def verify_password(plain: str, hashed: str) -> bool:
    # users seeded without a password can never log in
    if not hashed:
        return False
    return pwd_ctx.verify(plain, hashed)

def token_lifetime_seconds() -> int:
    return get_settings().ACCESS_TOKEN_EXPIRE_MINUTES * 60

def issue_access_token(user_id: int, *, expires_minutes: Optional[int] = None) -> str:
    s = get_settings()
    issued = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=s.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes)
    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    return jwt.encode(claims, s.SECRET_KEY, algorithm=s.ALGORITHM)

def read_access_token(token: str) -> int:
    s = get_settings()
    claims = jwt.decode(
        token,
        s.SECRET_KEY,
        algorithms=[s.ALGORITHM],
        options={"verify_exp": True, "require_exp": True, "require_sub": True},
    )
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise JWTError("subject is not a user id")
