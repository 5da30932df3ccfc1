from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from typing import List, Optional
import jwt
from datetime import datetime, timedelta, timezone
from quizgen.core.config import settings

class TokenData(BaseModel):
    sub: str
    roles: List[str]

    def is_admin(self) -> bool:
        return "admin" in self.roles

bearer = HTTPBearer()

def create_token(user_id: str, roles: List[str], ttl_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = ttl_minutes if ttl_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {"sub": user_id, "roles": roles, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=ttl)).timestamp())}
    return jwt.encode(payload, settings.APP_SECRET.get_secret_value(), algorithm=settings.ALGORITHM)

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> TokenData:
    try:
        payload = jwt.decode(creds.credentials, settings.APP_SECRET.get_secret_value(), algorithms=[settings.ALGORITHM])
        return TokenData(sub=payload["sub"], roles=payload.get("roles", []))
    except (jwt.PyJWTError, KeyError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

def require_roles(*required: str):
    def checker(user: TokenData = Depends(get_current_user)):
        roles = set(user.roles)
        if not roles.intersection(set(required)):
            raise HTTPException(status_code=403, detail="Insufficient role")
        return user
    return checker

def ensure_self_or_admin(user: TokenData, user_id: str) -> None:
    """Students may only act on their own behalf; admins may act for anyone."""
    if not user.is_admin() and user.sub != user_id:
        raise HTTPException(status_code=403, detail="Cannot act on behalf of another user")
