from __future__ import annotations
import uuid
from fastapi import Depends, HTTPException, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fitclub.config import settings
from fitclub.security import decode_token

security = HTTPBearer()

async def get_current_user_id(credentials: HTTPAuthorizationCredentials = Depends(security)) -> uuid.UUID:
    token = credentials.credentials
    try:
        data = decode_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    try:
        return uuid.UUID(str(data.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid subject")

async def require_cron(
    authorization: str | None = Header(default=None),
    x_vercel_cron: str | None = Header(default=None, alias="x-vercel-cron"),
) -> None:
    # Without a configured secret only the platform scheduler header is trusted
    if not settings.cron_secret:
        if not x_vercel_cron:
            raise HTTPException(status_code=401, detail="unauthorized")
        return
    if authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=401, detail="unauthorized")
