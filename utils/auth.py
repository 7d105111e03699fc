"""
Authentication utilities for Supabase integration
"""

from typing import Optional
from uuid import UUID

import jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from utils.config import Config, get_config
from utils.error_codes import ErrorCode, ERROR_MESSAGES
from utils.structured_logging import user_id_var


security = HTTPBearer()


class UserSession(BaseModel):
    """Authenticated caller, passed explicitly into services"""
    user_id: UUID
    email: Optional[str] = None
    access_token: str


def verify_supabase_token(token: str, config: Config) -> dict:
    """Verify Supabase JWT token"""
    if not config.supabase_jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Supabase JWT secret not configured"
        )

    try:
        return jwt.decode(
            token,
            config.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ERROR_MESSAGES[ErrorCode.AUTH_TOKEN_EXPIRED]
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ERROR_MESSAGES[ErrorCode.AUTH_TOKEN_INVALID]
        )


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    config: Config = Depends(get_config)
) -> UserSession:
    """Get the authenticated user session"""

    payload = verify_supabase_token(credentials.credentials, config)
    user_id = payload.get("sub")

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    try:
        session = UserSession(
            user_id=UUID(user_id),
            email=payload.get("email"),
            access_token=credentials.credentials
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject"
        )

    user_id_var.set(str(session.user_id))
    return session
