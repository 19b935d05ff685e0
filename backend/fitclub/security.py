from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from fitclub.config import settings

# Tokens are issued by the hosted auth provider; this service only verifies them.
JWT_ALG = "HS256"

def make_access_token(sub: str, ttl_min: int = 15) -> str:
    """Mint a token the same shape the auth provider issues. Used by scripts and tests."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])
