from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.models.enums import UserRole, ADMIN_ROLES
from app.utils.security import decode_access_token
from app.services.auth_service import get_session_user

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(token: str) -> Optional[dict]:
    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        return None

    # The token must still have a live session row (logout deletes it)
    user = await get_session_user(token)
    if not user or user["id"] != payload.get("sub"):
        return None
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Authenticate the bearer token against a live session and return the user"""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user = await _resolve_user(credentials.credentials)
    if user is None:
        raise _unauthorized()

    request.state.token = credentials.credentials
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """Same as get_current_user but anonymous callers get None instead of 401"""
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials)


def require_roles(*roles: UserRole):
    """Dependency factory restricting an endpoint to the given roles"""
    allowed = {UserRole(r) for r in roles}

    async def _checker(current_user: dict = Depends(get_current_user)) -> dict:
        if UserRole(current_user["role"]) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return current_user

    return _checker


get_current_admin = require_roles(*ADMIN_ROLES)
