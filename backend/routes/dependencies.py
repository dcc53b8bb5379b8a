# backend/routes/dependencies.py
from typing import Optional

from fastapi import HTTPException, Request, status

from core.auth import decode_jwt_token
from core.config import settings
from core.hooks import HookRegistry
from models.affiliate import Affiliate


def get_registry(request: Request) -> HookRegistry:
    return request.app.state.registry


def get_affiliate_store(request: Request):
    return request.app.state.affiliate_store


def _token_from_request(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if header and header.startswith("Bearer "):
        return header.split(" ", 1)[1]
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_affiliate(request: Request) -> Optional[Affiliate]:
    """Affiliate behind the session token, or None"""
    token = _token_from_request(request)
    if not token:
        return None

    data = decode_jwt_token(token)
    if not data or data.get("role") != "affiliate" or "affiliate_id" not in data:
        return None

    store = get_affiliate_store(request)
    return await store.get(int(data["affiliate_id"]))


async def require_admin(request: Request) -> dict:
    token = _token_from_request(request)
    data = decode_jwt_token(token) if token else None

    if not data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization"
        )
    if data.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return data
